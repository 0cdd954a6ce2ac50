"""Models for solicitation document fetching and form pre-filling."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import FieldInputType


class DocumentInfo(BaseModel):
    """A solicitation attachment listed by the opportunity feed."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    url: str
    filename: str
    type: str = Field(default="unknown", alias="fileType")


class DocumentFetchResult(BaseModel):
    """Outcome of downloading one document."""

    success: bool
    content: Optional[str] = Field(None, description="Extracted text of the document")
    error: Optional[str] = None
    size_bytes: int = 0
    content_type: str = "unknown"
    pages: Optional[int] = None


# =============================================================================
# Form analysis (model output schemas)
# =============================================================================

class ExtractedFormField(BaseModel):
    field_name: str = Field(description="Label of the field as it appears in the document")
    field_type: str = Field(
        default="text",
        description="One of text, email, tel, date, textarea, select, checkbox, number",
    )
    is_required: bool = False
    description: Optional[str] = None
    placeholder: Optional[str] = None
    options: Optional[list[str]] = None


class FormSection(BaseModel):
    section_title: str
    section_description: Optional[str] = None
    fields: list[ExtractedFormField] = Field(default_factory=list)


class DocumentFormAnalysis(BaseModel):
    """Forms and fillable fields found in one document."""

    document_id: str
    document_name: str
    analysis_success: bool = True
    form_type: str = Field(description="e.g. Financial Information, Company Details, Certification")
    instructions: str = ""
    form_sections: list[FormSection] = Field(default_factory=list)
    extracted_fields: list[ExtractedFormField] = Field(default_factory=list)
    submission_requirements: list[str] = Field(default_factory=list)


class FieldMapping(BaseModel):
    field_name: str
    mapped_value: str = ""
    mapping_source: str = Field(default="", description="Entity property the value came from")
    confidence_score: float = Field(default=0, ge=0, le=100)
    needs_review: bool = True
    reasoning: str = ""


class UnmappedField(BaseModel):
    field_name: str
    reason: str = ""
    suggestion: str = ""


class FieldMappingResult(BaseModel):
    """Model output when mapping entity data onto a form."""

    mappings: list[FieldMapping] = Field(default_factory=list)
    overall_completion_rate: float = Field(default=0, ge=0, le=100)
    review_notes: str = ""
    unmapped_fields: list[UnmappedField] = Field(default_factory=list)


# =============================================================================
# Pre-filled forms (consumed by the writing stage)
# =============================================================================

class PreFilledField(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    type: FieldInputType = FieldInputType.TEXT
    value: str = ""
    required: bool = False
    mapping_source: str = "unmapped"
    confidence_score: float = Field(default=0, ge=0, le=100)
    needs_review: bool = True
    options: Optional[list[str]] = None


class PreFilledFormDescriptor(BaseModel):
    """A form from a source document with values mapped from entity data."""

    model_config = ConfigDict(frozen=True)

    id: str
    document_id: str
    document_name: str
    form_title: str
    fields: list[PreFilledField] = Field(default_factory=list)
    completion_percentage: int = Field(default=0, ge=0, le=100)
    confidence_score: float = Field(default=0, ge=0, le=100)
    needs_review: bool = True
    review_notes: str = ""


class EnrichmentResult(BaseModel):
    """Everything the core pipeline takes from document enrichment."""

    documents_processed: list[str] = Field(
        default_factory=list, description="Names of documents fetched and read, unique per document"
    )
    document_excerpts: dict[str, str] = Field(
        default_factory=dict, description="Document name (as in documents_processed) to extracted text, truncated"
    )
    forms: list[PreFilledFormDescriptor] = Field(default_factory=list)
    failures: dict[str, str] = Field(
        default_factory=dict, description="Document id to the reason it was omitted"
    )

    @property
    def is_empty(self) -> bool:
        return not self.documents_processed and not self.forms
