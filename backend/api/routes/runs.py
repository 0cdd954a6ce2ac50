"""
Runs Routes

Endpoints for listing runs and inspecting their progress and stage outputs.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from proposal_engine.models.enums import StageName
from proposal_engine.pipeline import ProgressSnapshot

from backend.api.deps import require_run
from backend.api.schemas import (
    CancelResponse,
    ProgressResponse,
    RunListItem,
    RunListResponse,
    StageResultResponse,
)
from backend.services import pipeline_runner, storage

router = APIRouter()

_OUTPUT_STAGES = {s.value for s in StageName if s != StageName.ASSEMBLY}


def _parse_time(value):
    return datetime.fromisoformat(value) if value else None


# =============================================================================
# Run List
# =============================================================================

@router.get("/runs", response_model=RunListResponse)
async def list_runs(
    limit: int = Query(default=50, le=100),
    offset: int = Query(default=0, ge=0),
) -> RunListResponse:
    """
    List all generation runs.

    Returns runs sorted by start time (newest first).
    """
    all_runs = await storage.list_runs()
    paginated = all_runs[offset:offset + limit]

    items = [
        RunListItem(
            run_id=run["run_id"],
            contract_id=run.get("contract_id", ""),
            company_name=run.get("company_name", ""),
            status=run.get("status", "queued"),
            started_at=_parse_time(run.get("started_at")),
            completed_at=_parse_time(run.get("completed_at")),
            failed_stage=run.get("failed_stage"),
            confidence_score=run.get("confidence_score"),
            error_message=run["errors"][0] if run.get("errors") else None,
        )
        for run in paginated
    ]

    return RunListResponse(runs=items, total_count=len(all_runs))


# =============================================================================
# Progress
# =============================================================================

@router.get("/runs/{run_id}/progress", response_model=ProgressResponse)
async def get_progress(run_id: str, metadata: dict = Depends(require_run)) -> ProgressResponse:
    """Per-stage progress; live while the run executes in this process."""
    snapshot = pipeline_runner.live_progress(run_id)
    if snapshot is not None:
        progress = snapshot.to_dict()
    else:
        progress = await storage.load_progress(run_id) or ProgressSnapshot.initial().to_dict()

    return ProgressResponse(run_id=run_id, status=metadata["status"], **progress)


@router.post("/runs/{run_id}/cancel", response_model=CancelResponse)
async def cancel_run(run_id: str, metadata: dict = Depends(require_run)) -> CancelResponse:
    """Ask a running generation to stop at its next stage boundary."""
    return CancelResponse(run_id=run_id, cancel_requested=pipeline_runner.cancel_run(run_id))


# =============================================================================
# Stage Outputs
# =============================================================================

@router.get("/runs/{run_id}/stages/{stage}", response_model=StageResultResponse)
async def get_stage_output(
    run_id: str,
    stage: str,
    metadata: dict = Depends(require_run),
) -> StageResultResponse:
    """Validated output of one model stage."""
    if stage not in _OUTPUT_STAGES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown stage '{stage}'. Expected one of: {sorted(_OUTPUT_STAGES)}",
        )

    output = await storage.load_stage_result(run_id, stage)
    if output is None:
        raise HTTPException(status_code=404, detail=f"Stage '{stage}' has no output for run {run_id}")

    return StageResultResponse(run_id=run_id, stage=stage, output=output)


# =============================================================================
# Delete Run
# =============================================================================

@router.delete("/runs/{run_id}")
async def delete_run(run_id: str) -> dict:
    """
    Delete a run and all its files.

    This permanently removes the inputs, stage outputs, progress and the
    (possibly edited) document. Runs still executing cannot be deleted.
    """
    if not await storage.run_exists(run_id):
        raise HTTPException(status_code=404, detail=f"Run not found: {run_id}")

    if pipeline_runner.live_progress(run_id) is not None:
        raise HTTPException(status_code=409, detail=f"Run {run_id} is still executing")

    deleted = await storage.delete_run(run_id)

    if deleted:
        return {"status": "deleted", "run_id": run_id}
    else:
        raise HTTPException(status_code=500, detail="Failed to delete run")
