"""Stage 4: Document Writing.

Consumes every prior output plus the literal records and produces the flat,
ordered block list that assembly turns into the document tree. Pre-filled
forms from document enrichment, when present, are passed through so the
model can emit them as Form blocks with their mapped values.
"""

from collections import Counter
from dataclasses import dataclass, field

from proposal_engine.config.prompts import (
    DOCUMENT_WRITING_OUTLINE,
    DOCUMENT_WRITING_SYSTEM_PROMPT,
)
from proposal_engine.llm.structured import StructuredPrompt
from proposal_engine.models.enrichment import PreFilledFormDescriptor
from proposal_engine.models.enums import StageName
from proposal_engine.models.records import ContractRecord, EntityRecord
from proposal_engine.models.stages import Analysis, DataAnalysis, Proposal, Strategy
from proposal_engine.pipeline.stages.base import StageExecutor, bullet_list, dump_json, section


@dataclass(frozen=True)
class DocumentWritingInput:
    data_analysis: DataAnalysis
    analysis: Analysis
    strategy: Strategy
    contract: ContractRecord
    entity: EntityRecord
    prefilled_forms: tuple[PreFilledFormDescriptor, ...] = field(default_factory=tuple)


def _entity_facts(entity: EntityRecord) -> str:
    codes = [f"{c.code} {c.name}".strip() for c in entity.classification_codes]
    lines = [
        f"Business name: {entity.business_name}",
        f"Address: {entity.physical_address or 'Not provided'}",
        f"CAGE code: {entity.registration_id or 'Not provided'}",
        f"UEI: {entity.uei_code or 'Not provided'}",
        f"Founded: {entity.founded.isoformat() if entity.founded else 'Not provided'}",
        f"Website: {entity.website or 'Not provided'}",
        "NAICS codes:",
        bullet_list(codes, empty="None"),
    ]
    return "\n".join(lines)


def _prefilled_forms_payload(forms: tuple[PreFilledFormDescriptor, ...]) -> list[dict]:
    return [
        {
            "form_title": form.form_title,
            "source_document": form.document_name,
            "fields": [
                {
                    "id": f.id,
                    "label": f.label,
                    "type": f.type.value,
                    "value": f.value,
                    "required": f.required,
                    "options": f.options,
                }
                for f in form.fields
            ],
        }
        for form in forms
    ]


class DocumentWritingStage(StageExecutor[DocumentWritingInput, Proposal]):
    stage = StageName.DOCUMENT_WRITING
    schema = Proposal
    start_message = "Generating comprehensive response blocks..."

    def build_prompt(self, inputs: DocumentWritingInput) -> StructuredPrompt:
        da = inputs.data_analysis
        strategy = inputs.strategy
        contract = inputs.contract

        required_forms = [
            f"{f.name}: {f.description} ({f.criticality.value})"
            for f in da.compliance_requirements.required_forms
        ]

        parts = [
            "Write a complete RFQ response for submission to government contracting officers.",
            section(
                "Contract information",
                "\n".join([
                    f"Solicitation: {contract.reference_number}",
                    f"Title: {contract.title}",
                    f"Agency: {contract.agency_name}",
                    f"Response deadline: {contract.deadline.isoformat()}",
                    f"Type: {da.contract_info.type}",
                    f"Scope: {da.contract_info.scope}",
                    f"Timeline: {da.contract_info.timeline or 'Not specified'}",
                    f"Submission method: {da.compliance_requirements.submission_method or 'Not specified'}",
                ]),
            ),
            section("Requirements", bullet_list(da.contract_info.key_requirements)),
            section("Deliverables", bullet_list(da.contract_info.deliverables)),
            section("Locations", bullet_list(da.contract_info.locations)),
            section("Specifications", bullet_list(da.technical_requirements.specifications)),
            section("Quality standards", bullet_list(da.technical_requirements.quality_standards)),
            section("Delivery requirements", bullet_list(da.technical_requirements.delivery_requirements)),
            section("Warranty requirements", bullet_list(da.technical_requirements.warranty_requirements)),
            section("Payment terms", bullet_list(da.pricing_and_terms.payment_terms)),
            section("Company record (use these values literally)", _entity_facts(inputs.entity)),
            section(
                "Entity assessment",
                "\n".join([
                    f"Primary capability: {da.entity_info.primary_capability}",
                    f"Business type: {da.entity_info.business_type or 'Not specified'}",
                ]),
            ),
            section("Requirements to address", bullet_list(inputs.analysis.requirements)),
            section("Compliance items", bullet_list(inputs.analysis.compliance_items)),
            section(
                "Strategy",
                "\n".join([
                    f"Positioning: {strategy.positioning}",
                    f"Gap mitigation: {strategy.gap_mitigation}",
                    f"Pricing strategy: {strategy.pricing_strategy or 'Not specified'}",
                    f"Tone: {strategy.content_strategy.tone_guidelines or 'Professional'}",
                    f"Structure: {strategy.content_strategy.structure_recommendations or 'Follow the outline'}",
                ]),
            ),
            section("Key messages", bullet_list(strategy.content_strategy.key_messages)),
            section("Value propositions", bullet_list(strategy.value_propositions)),
            section(
                "Documents processed",
                bullet_list(da.document_analysis.documents_processed, empty="None"),
            ),
            section("Required forms", bullet_list(required_forms, empty="None listed")),
        ]

        if inputs.prefilled_forms:
            parts.append(section(
                "Pre-filled forms (emit each as a Form block, keeping field ids and values)",
                dump_json(_prefilled_forms_payload(inputs.prefilled_forms)),
            ))

        parts.append(DOCUMENT_WRITING_OUTLINE.format(
            contract_type=da.contract_info.type,
            reference=contract.reference_number,
        ))

        return StructuredPrompt(
            system=DOCUMENT_WRITING_SYSTEM_PROMPT,
            user="\n\n".join(parts),
            name=self.stage.value,
        )

    def digest(self, output: Proposal) -> dict[str, int]:
        counts = Counter(block.type.value for block in output.response_blocks)
        return {
            "blocks": len(output.response_blocks),
            "headings": counts["H1"] + counts["H2"] + counts["H3"],
            "text_blocks": counts["Text"],
            "forms": counts["Form"],
        }

    def summarize(self, output: Proposal) -> str:
        return f"Generated {len(output.response_blocks)} response blocks"
