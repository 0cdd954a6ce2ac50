"""
Request schemas for the API.

These define the expected input structure for API endpoints.
Using Pydantic v2 for validation and serialization.
"""

from typing import Literal

from pydantic import BaseModel, Field

from proposal_engine.models.enrichment import DocumentInfo
from proposal_engine.models.records import ContractRecord, EntityRecord


class GenerateRequest(BaseModel):
    """Request to generate a proposal for a contract/entity pair."""
    contract: ContractRecord = Field(..., description="Solicitation being answered")
    entity: EntityRecord = Field(..., description="Company submitting the response")
    documents: list[DocumentInfo] = Field(
        default_factory=list,
        description="Solicitation attachments to scan for forms",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "contract": {
                        "id": "opp-001",
                        "title": "Office Furniture Installation",
                        "solicitationNumber": "W912DY-24-Q-0001",
                        "agencyName": "Department of the Army",
                        "naicsId": "337127",
                        "deadlineDate": "2024-09-30T17:00:00Z",
                    },
                    "entity": {
                        "businessName": "Acme Builders LLC",
                        "naicsCodes": [{"code": "236220", "name": "Commercial Building Construction"}],
                    },
                    "documents": [],
                }
            ]
        }
    }


class EditBlockRequest(BaseModel):
    """Replace the text of one block."""
    text: str = Field(..., description="New block text")


class MoveBlockRequest(BaseModel):
    """Move a block among its siblings."""
    direction: Literal["up", "down"]


class UpdateFieldRequest(BaseModel):
    """Set the value of one form field."""
    value: str = Field(..., description="New field value")
