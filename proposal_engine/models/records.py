"""Input records supplied by the contract and entity data sources.

Both records are read-only. Field aliases match the camelCase JSON exported
by the upstream opportunity feed, so raw files validate directly.
"""

import json
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ClassificationCode(BaseModel):
    """An industry classification (NAICS) code with its title."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=2, description="NAICS code, e.g. '236220'")
    name: str = Field(default="", description="Human-readable industry title")


class ContractRecord(BaseModel):
    """A solicitation (RFQ/RFP) the entity is responding to."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., description="Opportunity identifier in the source feed")
    title: str
    solicitation_number: Optional[str] = Field(None, alias="solicitationNumber")
    agency_name: str = Field(..., alias="agencyName")
    classification_code: str = Field(..., alias="naicsId", description="Required NAICS code")
    description: str = Field(default="", description="Delivery and performance description")
    overview: Optional[str] = None
    deadline: datetime = Field(..., alias="deadlineDate")

    @property
    def reference_number(self) -> str:
        """Solicitation number when published, otherwise the feed id."""
        return self.solicitation_number or self.id


class EntityRecord(BaseModel):
    """The company submitting the response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    business_name: str = Field(..., alias="businessName")
    physical_address: str = Field(default="", alias="physicalAddress")
    classification_codes: list[ClassificationCode] = Field(
        default_factory=list, alias="naicsCodes"
    )
    registration_id: str = Field(default="", alias="cageCode", description="CAGE code")
    founded: Optional[date] = Field(None, alias="entityStartDate")
    uei_code: Optional[str] = Field(None, alias="ueiCode")
    website: Optional[str] = None
    certifications: list[str] = Field(default_factory=list)

    @property
    def primary_classification(self) -> Optional[ClassificationCode]:
        return self.classification_codes[0] if self.classification_codes else None

    @property
    def classification_code_set(self) -> set[str]:
        return {c.code for c in self.classification_codes}


def load_contract(path: str | Path) -> ContractRecord:
    """Load a ContractRecord from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return ContractRecord.model_validate(json.load(f))


def load_entity(path: str | Path) -> EntityRecord:
    """Load an EntityRecord from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return EntityRecord.model_validate(json.load(f))
