"""Assembled document models (post-tree form)."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import BlockType
from .stages import Analysis, BlockMetadata, DataAnalysis, Proposal, Strategy


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentNode(BaseModel):
    """A block placed in the document tree.

    Heading nodes may hold any number of children; Text and Form nodes are
    always leaves. ``depth`` is assigned structurally (root = 0).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: BlockType
    text: str
    order: int = Field(default=0, ge=0)
    editable: bool = True
    metadata: Optional[BlockMetadata] = None
    depth: int = Field(default=0, ge=0)
    children: list["DocumentNode"] = Field(default_factory=list)


class DocumentMetadata(BaseModel):
    contract_id: str = Field(description="Solicitation number the response answers")
    company_name: str
    generated_at: datetime = Field(default_factory=_utcnow)
    last_modified: datetime = Field(default_factory=_utcnow)
    version: int = Field(default=1, ge=1)


class StageOutputs(BaseModel):
    """Every stage output, kept for traceability.

    Fields stay ``None`` for stages that did not run, so the same bundle
    describes partial runs.
    """

    data_analysis: Optional[DataAnalysis] = None
    analysis: Optional[Analysis] = None
    strategy: Optional[Strategy] = None
    proposal: Optional[Proposal] = None

    @property
    def is_complete(self) -> bool:
        return all(
            output is not None
            for output in (self.data_analysis, self.analysis, self.strategy, self.proposal)
        )


class GeneratedDocument(BaseModel):
    """Final envelope handed to the editor."""

    metadata: DocumentMetadata
    blocks: list[DocumentNode] = Field(default_factory=list)
    stage_outputs: StageOutputs
    submission_ready: bool = False
    confidence_score: float = Field(ge=0, le=100)
    warnings: list[str] = Field(default_factory=list)
