"""Pytest configuration and fixtures."""

import pytest

from proposal_engine.config.settings import Settings
from proposal_engine.models import (
    Analysis,
    ClassificationAlignment,
    ContentBlock,
    ContractInfo,
    ContractRecord,
    DataAnalysis,
    EntityInfo,
    EntityRecord,
    FieldInputType,
    FormField,
    GapAnalysis,
    GeneratedDocument,
    OpportunityAssessment,
    Proposal,
    StageOutputs,
    Strategy,
    StrategicInsights,
)
from proposal_engine.models.stages import ComplianceRequirements, RequiredForm
from proposal_engine.pipeline import assemble_document

from tests.factories import FakeCaller, Response, form, heading, text


# =============================================================================
# Input records
# =============================================================================

@pytest.fixture
def contract() -> ContractRecord:
    return ContractRecord.model_validate({
        "id": "opp-001",
        "title": "Office Furniture Supply and Installation",
        "solicitationNumber": "W91247-24-Q-0042",
        "agencyName": "Department of the Army",
        "naicsId": "337127",
        "description": "Supply and install institutional office furniture.",
        "deadlineDate": "2024-09-30T17:00:00Z",
    })


@pytest.fixture
def entity() -> EntityRecord:
    return EntityRecord.model_validate({
        "businessName": "Carolina Interiors & Construction LLC",
        "physicalAddress": "1400 Market St, Fayetteville, NC 28301",
        "naicsCodes": [
            {"code": "236220", "name": "Commercial and Institutional Building Construction"},
            {"code": "238390", "name": "Other Building Finishing Contractors"},
        ],
        "cageCode": "8K2L1",
        "certifications": ["SDVOSB"],
    })


# =============================================================================
# Canned stage outputs
# =============================================================================

@pytest.fixture
def data_analysis() -> DataAnalysis:
    return DataAnalysis(
        contract_info=ContractInfo(
            type="Manufacturing",
            scope="Supply and install office furniture",
            key_requirements=["BIFMA certified furniture", "Installation within 30 days"],
            deliverables=["Workstations", "Conference tables"],
        ),
        entity_info=EntityInfo(primary_capability="Commercial interior construction"),
        gap_analysis=GapAnalysis(
            # Deliberately wrong; the stage recomputes alignment from the records
            naics_alignment=ClassificationAlignment(required="000000", entity_primary="999999", is_match=True),
            capability_gaps=["No furniture manufacturing line"],
        ),
        opportunity_assessment=OpportunityAssessment(estimated_win_probability=55),
        compliance_requirements=ComplianceRequirements(
            required_forms=[RequiredForm(name="SF-1449")],
        ),
    )


@pytest.fixture
def analysis() -> Analysis:
    return Analysis(
        requirements=["BIFMA certified furniture"],
        gaps=["NAICS mismatch", "No manufacturing line"],
        insights=StrategicInsights(
            naics_strategy="Team with a furniture manufacturer",
            competitive_advantage="Local installation crews",
            risk_mitigation="Subcontract manufacturing",
        ),
    )


@pytest.fixture
def strategy() -> Strategy:
    return Strategy(
        positioning="Installer-led team with certified manufacturer partner",
        gap_mitigation="Teaming agreement covers NAICS 337127",
        value_propositions=["Fast local installation"],
        win_probability=62.5,
    )


@pytest.fixture
def response_blocks() -> list[ContentBlock]:
    return [
        heading(1, "Title", "title"),
        heading(2, "Sec A", "sec-a"),
        text("a1", "a1"),
        heading(2, "Sec B", "sec-b"),
        form("SF-1449 Solicitation Form", "sf1449"),
    ]


@pytest.fixture
def proposal(response_blocks) -> Proposal:
    return Proposal(company_info="Carolina Interiors", response_blocks=response_blocks)


@pytest.fixture
def scripted_responses(data_analysis, analysis, strategy, proposal) -> dict[type, Response]:
    return {
        DataAnalysis: data_analysis,
        Analysis: analysis,
        Strategy: strategy,
        Proposal: proposal,
    }


@pytest.fixture
def fake_caller(scripted_responses) -> FakeCaller:
    return FakeCaller(scripted_responses)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        document_allowed_hosts=["sam.gov", "example.com"],
        document_max_bytes=1024,
        document_fetch_attempts=3,
        document_fetch_backoff=0,
    )


# =============================================================================
# Assembled document
# =============================================================================

@pytest.fixture
def document_blocks() -> list[ContentBlock]:
    return [
        heading(1, "RFQ Response W91247-24-Q-0042", "title"),
        heading(2, "Company Overview", "overview"),
        text("We install institutional furniture across the Southeast.", "intro"),
        text("Submission contact: Jane Ortiz, co@army.mil", "submission"),
        heading(2, "Required Forms", "forms"),
        form(
            "SF-1449 Solicitation Form",
            "sf1449",
            fields=[
                FormField(id="f1", label="Company Name", value="Carolina Interiors", required=True),
                FormField(
                    id="f2",
                    label="Business Size",
                    type=FieldInputType.SINGLE_SELECT,
                    options=["Small", "Large"],
                ),
            ],
        ),
    ]


@pytest.fixture
def document(contract, entity, data_analysis, analysis, strategy, document_blocks) -> GeneratedDocument:
    outputs = StageOutputs(
        data_analysis=data_analysis,
        analysis=analysis,
        strategy=strategy,
        proposal=Proposal(company_info="Carolina Interiors", response_blocks=document_blocks),
    )
    return assemble_document(contract, entity, outputs)
