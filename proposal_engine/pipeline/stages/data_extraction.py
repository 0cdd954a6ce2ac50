"""Stage 1: Data Extraction.

Turns the raw contract and entity records (plus any fetched solicitation
documents) into a structured DataAnalysis. Facts that can be computed from
the records are applied after the call and take precedence over the model.
"""

from dataclasses import dataclass, field

from proposal_engine.config.prompts import (
    DATA_EXTRACTION_INSTRUCTIONS,
    DATA_EXTRACTION_SYSTEM_PROMPT,
)
from proposal_engine.llm.structured import StructuredPrompt
from proposal_engine.models.enrichment import EnrichmentResult
from proposal_engine.models.enums import StageName
from proposal_engine.models.records import ContractRecord, EntityRecord
from proposal_engine.models.stages import ClassificationAlignment, DataAnalysis, DocumentAnalysis
from proposal_engine.pipeline.stages.base import StageExecutor, dump_json, section


@dataclass(frozen=True)
class DataExtractionInput:
    contract: ContractRecord
    entity: EntityRecord
    enrichment: EnrichmentResult = field(default_factory=EnrichmentResult)


def classification_alignment(contract: ContractRecord, entity: EntityRecord) -> ClassificationAlignment:
    """NAICS alignment computed from the records alone."""
    primary = entity.primary_classification
    return ClassificationAlignment(
        required=contract.classification_code,
        entity_primary=primary.code if primary else "",
        is_match=contract.classification_code in entity.classification_code_set,
    )


class DataExtractionStage(StageExecutor[DataExtractionInput, DataAnalysis]):
    stage = StageName.DATA_EXTRACTION
    schema = DataAnalysis
    start_message = "Processing raw contract and entity data..."

    def build_prompt(self, inputs: DataExtractionInput) -> StructuredPrompt:
        parts = [
            "Analyse the raw contract and entity data below and extract structured "
            "information for generating an RFQ response.",
            section("Raw contract data", dump_json(inputs.contract.model_dump(mode="json", by_alias=True))),
            section("Raw entity data", dump_json(inputs.entity.model_dump(mode="json", by_alias=True))),
        ]

        excerpts = inputs.enrichment.document_excerpts
        if excerpts:
            documents = "\n\n".join(
                f"--- {name} ---\n{excerpts[name]}" for name in sorted(excerpts)
            )
            parts.append(section("Solicitation documents", documents))

        parts.append(DATA_EXTRACTION_INSTRUCTIONS)
        return StructuredPrompt(
            system=DATA_EXTRACTION_SYSTEM_PROMPT,
            user="\n\n".join(parts),
            name=self.stage.value,
        )

    def postprocess(self, inputs: DataExtractionInput, output: DataAnalysis) -> DataAnalysis:
        gap_analysis = output.gap_analysis.model_copy(
            update={"naics_alignment": classification_alignment(inputs.contract, inputs.entity)}
        )
        update = {"gap_analysis": gap_analysis}
        if inputs.enrichment.documents_processed:
            update["document_analysis"] = DocumentAnalysis(
                documents_processed=list(inputs.enrichment.documents_processed)
            )
        return output.model_copy(update=update)

    def digest(self, output: DataAnalysis) -> dict[str, int]:
        return {
            "key_requirements": len(output.contract_info.key_requirements),
            "deliverables": len(output.contract_info.deliverables),
            "capability_gaps": len(output.gap_analysis.capability_gaps),
            "required_forms": len(output.compliance_requirements.required_forms),
            "documents_processed": len(output.document_analysis.documents_processed),
        }

    def summarize(self, output: DataAnalysis) -> str:
        return f"Data processed - Contract type: {output.contract_info.type}"
