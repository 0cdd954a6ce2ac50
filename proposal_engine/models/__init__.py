"""Pydantic data models for the pipeline."""

from .enums import (
    STAGE_ORDER,
    BlockType,
    FieldInputType,
    FormCriticality,
    StageName,
    StageStatus,
)
from .records import (
    ClassificationCode,
    ContractRecord,
    EntityRecord,
    load_contract,
    load_entity,
)
from .stages import (
    Analysis,
    BlockMetadata,
    ClassificationAlignment,
    ComplianceRequirements,
    ContentBlock,
    ContentStrategy,
    ContractInfo,
    DataAnalysis,
    DocumentAnalysis,
    EntityInfo,
    FormField,
    GapAnalysis,
    OpportunityAssessment,
    PricingAndTerms,
    Proposal,
    RequiredForm,
    Strategy,
    StrategicInsights,
    SubmissionForm,
    TechnicalRequirements,
)
from .document import DocumentMetadata, DocumentNode, GeneratedDocument, StageOutputs
from .enrichment import (
    DocumentFetchResult,
    DocumentFormAnalysis,
    DocumentInfo,
    EnrichmentResult,
    ExtractedFormField,
    FieldMapping,
    FieldMappingResult,
    FormSection,
    PreFilledField,
    PreFilledFormDescriptor,
    UnmappedField,
)

__all__ = [
    # Enums
    "STAGE_ORDER",
    "BlockType",
    "FieldInputType",
    "FormCriticality",
    "StageName",
    "StageStatus",
    # Input records
    "ClassificationCode",
    "ContractRecord",
    "EntityRecord",
    "load_contract",
    "load_entity",
    # Stage 1
    "ContractInfo",
    "EntityInfo",
    "ClassificationAlignment",
    "GapAnalysis",
    "OpportunityAssessment",
    "RequiredForm",
    "ComplianceRequirements",
    "TechnicalRequirements",
    "PricingAndTerms",
    "DocumentAnalysis",
    "DataAnalysis",
    # Stage 2
    "StrategicInsights",
    "Analysis",
    # Stage 3
    "ContentStrategy",
    "Strategy",
    # Stage 4
    "FormField",
    "BlockMetadata",
    "ContentBlock",
    "SubmissionForm",
    "Proposal",
    # Assembly
    "DocumentNode",
    "DocumentMetadata",
    "StageOutputs",
    "GeneratedDocument",
    # Enrichment
    "DocumentInfo",
    "DocumentFetchResult",
    "ExtractedFormField",
    "FormSection",
    "DocumentFormAnalysis",
    "FieldMapping",
    "UnmappedField",
    "FieldMappingResult",
    "PreFilledField",
    "PreFilledFormDescriptor",
    "EnrichmentResult",
]
