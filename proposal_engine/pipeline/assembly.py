"""Assembly: the final, deterministic step of a run."""

from datetime import datetime, timezone

import structlog

from proposal_engine.errors import AssemblyError
from proposal_engine.models.document import DocumentMetadata, GeneratedDocument, StageOutputs
from proposal_engine.models.enums import BlockType, FormCriticality
from proposal_engine.models.records import ContractRecord, EntityRecord
from proposal_engine.models.stages import ContentBlock, DataAnalysis
from proposal_engine.pipeline.tree_builder import build_document_tree

logger = structlog.get_logger(__name__)


def _normalize(name: str) -> str:
    return " ".join(name.lower().split())


def missing_required_forms(data_analysis: DataAnalysis, blocks: list[ContentBlock]) -> list[str]:
    """Names of Required forms with no Form block whose title mentions them."""
    form_titles = [_normalize(b.text) for b in blocks if b.type == BlockType.FORM]
    missing = []
    for form in data_analysis.compliance_requirements.required_forms:
        if form.criticality != FormCriticality.REQUIRED:
            continue
        wanted = _normalize(form.name)
        if not any(wanted in title or title in wanted for title in form_titles if title):
            missing.append(form.name)
    return missing


def assemble_document(
    contract: ContractRecord,
    entity: EntityRecord,
    outputs: StageOutputs,
) -> GeneratedDocument:
    """Build the document tree and wrap it in the final envelope.

    Raises:
        AssemblyError: If a stage output is missing or the tree cannot be built.
    """
    if not outputs.is_complete:
        raise AssemblyError("Assembly requires the outputs of all four generation stages")

    blocks = outputs.proposal.response_blocks
    if not blocks:
        raise AssemblyError("Document writing produced no content blocks")

    tree = build_document_tree(blocks)

    warnings = [
        f"Required form not generated: {name}"
        for name in missing_required_forms(outputs.data_analysis, blocks)
    ]
    for warning in warnings:
        logger.warning("assembly_required_form_missing", detail=warning)

    now = datetime.now(timezone.utc)
    return GeneratedDocument(
        metadata=DocumentMetadata(
            contract_id=contract.reference_number,
            company_name=entity.business_name,
            generated_at=now,
            last_modified=now,
            version=1,
        ),
        blocks=tree,
        stage_outputs=outputs,
        submission_ready=True,
        confidence_score=outputs.strategy.win_probability,
        warnings=warnings,
    )
