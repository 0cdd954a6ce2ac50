"""Stage output contracts.

These models define the contracts between pipeline stages. Each one is the
output schema handed to the structured model call, so field descriptions are
written for the model as much as for readers.

Stage Flow:
1. Data Extraction      → DataAnalysis
2. Insight Analysis     → Analysis
3. Strategy Synthesis   → Strategy
4. Document Writing     → Proposal (flat ContentBlock list)
5. Assembly             → GeneratedDocument (see document.py)
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import BlockType, FieldInputType, FormCriticality


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# Stage 1: Data Extraction
# =============================================================================

class ContractInfo(_Frozen):
    """Structured summary of the solicitation."""

    type: str = Field(description="Procurement type, e.g. Manufacturing, Services, Construction")
    scope: str = Field(description="One-paragraph scope of work")
    key_requirements: list[str] = Field(default_factory=list)
    deliverables: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list, description="Performance or delivery locations")
    timeline: str = Field(default="", description="Timeline and critical deadlines")
    set_aside_type: Optional[str] = Field(None, description="e.g. SDVOSB, 8(a), Small Business")


class EntityInfo(_Frozen):
    """Structured summary of the bidding company."""

    primary_capability: str
    relevant_experience: list[str] = Field(default_factory=list)
    competitive_advantages: list[str] = Field(default_factory=list)
    business_type: str = Field(default="", description="Size, certifications, specialisation")


class ClassificationAlignment(_Frozen):
    """NAICS alignment between the solicitation and the entity."""

    required: str = Field(description="NAICS code required by the contract")
    entity_primary: str = Field(description="Entity's primary NAICS code")
    is_match: bool = Field(description="True when the entity holds the required code")


class GapAnalysis(_Frozen):
    naics_alignment: ClassificationAlignment
    capability_gaps: list[str] = Field(default_factory=list)
    compliance_gaps: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)


class OpportunityAssessment(_Frozen):
    win_factors: list[str] = Field(default_factory=list)
    competitive_positioning: str = ""
    value_proposition: str = ""
    estimated_win_probability: float = Field(ge=0, le=100, description="Percentage 0-100")


class RequiredForm(_Frozen):
    name: str
    description: str = ""
    criticality: FormCriticality = FormCriticality.REQUIRED


class ComplianceRequirements(_Frozen):
    required_forms: list[RequiredForm] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    submission_method: str = ""
    critical_deadlines: list[str] = Field(default_factory=list)


class TechnicalRequirements(_Frozen):
    specifications: list[str] = Field(default_factory=list)
    quality_standards: list[str] = Field(default_factory=list)
    delivery_requirements: list[str] = Field(default_factory=list)
    warranty_requirements: list[str] = Field(default_factory=list)


class PricingAndTerms(_Frozen):
    payment_terms: list[str] = Field(default_factory=list)
    delivery_timeline: list[str] = Field(default_factory=list)
    warranty_terms: list[str] = Field(default_factory=list)


class DocumentAnalysis(_Frozen):
    documents_processed: list[str] = Field(
        default_factory=list,
        description="Names of solicitation documents analysed before this stage",
    )


class DataAnalysis(_Frozen):
    """Output of the data extraction stage."""

    contract_info: ContractInfo
    entity_info: EntityInfo
    gap_analysis: GapAnalysis
    opportunity_assessment: OpportunityAssessment
    compliance_requirements: ComplianceRequirements = Field(default_factory=ComplianceRequirements)
    technical_requirements: TechnicalRequirements = Field(default_factory=TechnicalRequirements)
    pricing_and_terms: PricingAndTerms = Field(default_factory=PricingAndTerms)
    document_analysis: DocumentAnalysis = Field(default_factory=DocumentAnalysis)


# =============================================================================
# Stage 2: Insight Analysis
# =============================================================================

class StrategicInsights(_Frozen):
    naics_strategy: str = Field(description="Approach to the classification-code alignment")
    competitive_advantage: str
    risk_mitigation: str


class Analysis(_Frozen):
    """Output of the insight analysis stage."""

    requirements: list[str] = Field(default_factory=list)
    gaps: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    compliance_items: list[str] = Field(default_factory=list)
    insights: StrategicInsights


# =============================================================================
# Stage 3: Strategy Synthesis
# =============================================================================

class ContentStrategy(_Frozen):
    """Guidance that steers the writing stage."""

    key_messages: list[str] = Field(default_factory=list)
    tone_guidelines: str = ""
    structure_recommendations: str = ""


class Strategy(_Frozen):
    """Output of the strategy synthesis stage."""

    positioning: str
    gap_mitigation: str
    value_propositions: list[str] = Field(default_factory=list)
    win_probability: float = Field(ge=0, le=100, description="Percentage 0-100")
    pricing_strategy: str = ""
    content_strategy: ContentStrategy = Field(default_factory=ContentStrategy)


# =============================================================================
# Stage 4: Document Writing
# =============================================================================

class FormField(_Frozen):
    """A single input of an embedded form."""

    id: str
    label: str
    type: FieldInputType = FieldInputType.TEXT
    value: str = Field(default="", description="Current value, pre-filled when known")
    required: bool = False
    options: Optional[list[str]] = Field(None, description="Allowed values for select fields")
    placeholder: Optional[str] = None


class BlockMetadata(_Frozen):
    form_fields: list[FormField] = Field(default_factory=list)


class ContentBlock(_Frozen):
    """One flat unit of generated content, before tree assembly."""

    id: str = Field(default="", description="Stable block identifier")
    type: BlockType
    text: str
    order: int = Field(default=0, ge=0, description="Advisory; assembly renumbers by position")
    editable: bool = True
    metadata: Optional[BlockMetadata] = Field(
        None, description="Required for Form blocks: the form's fields"
    )


class SubmissionForm(_Frozen):
    form_name: str
    form_content: str = ""


class Proposal(_Frozen):
    """Output of the document writing stage."""

    company_info: str = ""
    technical_response: str = ""
    narrative: str = ""
    pricing_details: str = ""
    submission_forms: list[SubmissionForm] = Field(default_factory=list)
    response_blocks: list[ContentBlock] = Field(
        default_factory=list,
        description="Ordered flat list of H1/H2/H3/Text/Form blocks",
    )
