"""
Response schemas for the API.

These define the output structure for API endpoints.
Documents are returned as the engine's GeneratedDocument model directly.
"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

RunStatus = Literal["queued", "running", "completed", "failed"]


# =============================================================================
# Generation Response
# =============================================================================

class GenerateResponse(BaseModel):
    """Response after starting a generation run."""
    run_id: str = Field(..., description="Unique identifier for this run")
    status: RunStatus = "queued"
    started_at: datetime


# =============================================================================
# Run List Response
# =============================================================================

class RunListItem(BaseModel):
    """Summary of a single run for listing."""
    run_id: str
    contract_id: str
    company_name: str
    status: RunStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    failed_stage: Optional[str] = None
    confidence_score: Optional[float] = None
    error_message: Optional[str] = None


class RunListResponse(BaseModel):
    """List of all runs."""
    runs: list[RunListItem]
    total_count: int


# =============================================================================
# Progress Response
# =============================================================================

class StageProgressResponse(BaseModel):
    stage: str
    status: Literal["pending", "in_progress", "done", "failed"]
    message: str = ""
    digest: dict[str, int] = Field(default_factory=dict)


class ProgressResponse(BaseModel):
    """Per-stage progress of a run."""
    run_id: str
    status: RunStatus
    overall: float = Field(..., ge=0.0, le=1.0, description="Fraction of stages done")
    current_stage: Optional[str] = None
    failed_stage: Optional[str] = None
    stages: list[StageProgressResponse]


# =============================================================================
# Stage Output Response
# =============================================================================

class StageResultResponse(BaseModel):
    """Raw validated output of one stage."""
    run_id: str
    stage: str
    output: dict[str, Any]


# =============================================================================
# Export Responses
# =============================================================================

class EmailExportResponse(BaseModel):
    """Submission email template for a run's document."""
    subject: str
    body: str
    to: list[str] = Field(default_factory=list)
    cc: list[str] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)
    mailto: str


class CancelResponse(BaseModel):
    run_id: str
    cancel_requested: bool
