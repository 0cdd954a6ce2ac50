"""Map entity data onto extracted form fields."""

import json

import structlog

from proposal_engine.config.prompts import FORM_MAPPING_SYSTEM_PROMPT
from proposal_engine.errors import EnrichmentError, StageCallError
from proposal_engine.llm.structured import StructuredCaller, StructuredPrompt
from proposal_engine.models.enrichment import (
    DocumentFormAnalysis,
    FieldMapping,
    FieldMappingResult,
    PreFilledField,
    PreFilledFormDescriptor,
)
from proposal_engine.models.enums import FieldInputType
from proposal_engine.models.records import EntityRecord

logger = structlog.get_logger(__name__)

_FIELD_TYPES = {
    "email": FieldInputType.EMAIL,
    "tel": FieldInputType.PHONE,
    "phone": FieldInputType.PHONE,
    "date": FieldInputType.DATE,
    "textarea": FieldInputType.MULTILINE_TEXT,
    "select": FieldInputType.SINGLE_SELECT,
}


def map_field_type(field_type: str) -> FieldInputType:
    """Extracted field type to an input widget; unknown types are plain text."""
    return _FIELD_TYPES.get(field_type.strip().lower(), FieldInputType.TEXT)


def build_prefilled_form(
    analysis: DocumentFormAnalysis,
    mapping: FieldMappingResult,
) -> PreFilledFormDescriptor:
    """Combine extracted fields with mapped values, one entry per field."""
    by_name: dict[str, FieldMapping] = {m.field_name: m for m in mapping.mappings}

    fields = []
    for index, extracted in enumerate(analysis.extracted_fields):
        mapped = by_name.get(extracted.field_name)
        fields.append(PreFilledField(
            id=f"field_{index}",
            label=extracted.field_name,
            type=map_field_type(extracted.field_type),
            value=mapped.mapped_value if mapped else "",
            required=extracted.is_required,
            mapping_source=mapped.mapping_source if mapped else "unmapped",
            confidence_score=mapped.confidence_score if mapped else 0,
            needs_review=mapped.needs_review if mapped else True,
            options=extracted.options,
        ))

    filled = [f for f in fields if f.value.strip()]
    completion = round(len(filled) / len(fields) * 100) if fields else 0
    confidence = (
        sum(f.confidence_score for f in filled) / len(filled) if filled else 0
    )

    return PreFilledFormDescriptor(
        id=f"prefilled_{analysis.document_id}",
        document_id=analysis.document_id,
        document_name=analysis.document_name,
        form_title=analysis.form_type,
        fields=fields,
        completion_percentage=completion,
        confidence_score=round(confidence, 1),
        needs_review=any(f.needs_review for f in fields),
        review_notes=mapping.review_notes,
    )


def map_entity_to_form(
    caller: StructuredCaller,
    entity: EntityRecord,
    analysis: DocumentFormAnalysis,
) -> PreFilledFormDescriptor:
    """Pre-fill the fields of ``analysis`` from the entity record.

    Raises:
        EnrichmentError: If the model call fails.
    """
    fields = [
        {
            "field_name": f.field_name,
            "field_type": f.field_type,
            "is_required": f.is_required,
            "description": f.description,
        }
        for f in analysis.extracted_fields
    ]
    prompt = StructuredPrompt(
        system=FORM_MAPPING_SYSTEM_PROMPT,
        user="\n\n".join([
            f"FORM: {analysis.form_type} from {analysis.document_name}",
            f"FORM FIELDS:\n{json.dumps(fields, indent=2)}",
            f"COMPANY RECORD:\n{entity.model_dump_json(indent=2)}",
            "Map company data to each form field with a confidence score and review flag.",
        ]),
        name="form_mapping",
    )

    try:
        mapping = caller.call(prompt, FieldMappingResult)
    except StageCallError as e:
        raise EnrichmentError(
            f"Field mapping failed for {analysis.document_name}: {e}", analysis.document_id
        ) from e

    form = build_prefilled_form(analysis, mapping)
    logger.info(
        "form_mapping_complete",
        document=analysis.document_name,
        form=form.form_title,
        completion_percentage=form.completion_percentage,
    )
    return form
