"""Find fillable forms in a solicitation document."""

import structlog

from proposal_engine.config.prompts import FORM_ANALYSIS_SYSTEM_PROMPT
from proposal_engine.errors import EnrichmentError, StageCallError
from proposal_engine.llm.structured import StructuredCaller, StructuredPrompt
from proposal_engine.models.enrichment import DocumentFormAnalysis, DocumentInfo

logger = structlog.get_logger(__name__)


def analyze_document_for_forms(
    caller: StructuredCaller,
    document: DocumentInfo,
    content: str,
) -> DocumentFormAnalysis:
    """Ask the model for the forms and fields in ``content``.

    The document id and name are taken from ``document``, not the model.

    Raises:
        EnrichmentError: If the model call fails.
    """
    prompt = StructuredPrompt(
        system=FORM_ANALYSIS_SYSTEM_PROMPT,
        user="\n\n".join([
            f"DOCUMENT: {document.filename} (id {document.id})",
            f"CONTENT:\n---\n{content}\n---",
            "Identify the form type, instructions, sections, every fillable field "
            "and the submission requirements of this document.",
        ]),
        name="form_analysis",
    )

    try:
        analysis = caller.call(prompt, DocumentFormAnalysis)
    except StageCallError as e:
        raise EnrichmentError(f"Form analysis failed for {document.filename}: {e}", document.id) from e

    analysis = analysis.model_copy(
        update={"document_id": document.id, "document_name": document.filename}
    )
    logger.info(
        "form_analysis_complete",
        document=document.filename,
        form_type=analysis.form_type,
        fields=len(analysis.extracted_fields),
    )
    return analysis
