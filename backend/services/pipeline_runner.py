"""
Pipeline Runner Service

Orchestrates the execution of the proposal generation pipeline.
Bridges the proposal_engine pipeline with the web API.

Design Decisions:
- Runs the (synchronous) pipeline in an executor to not block the API
- Progress snapshots are pushed from the worker thread into an in-memory
  table for live polling, and persisted once the run ends
- Every stage output that was produced is saved, also for failed runs
"""

import asyncio
from typing import Optional, Sequence

import structlog

from proposal_engine.llm.structured import StructuredCaller
from proposal_engine.models.document import StageOutputs
from proposal_engine.models.enrichment import DocumentInfo
from proposal_engine.models.enums import StageName
from proposal_engine.models.records import ContractRecord, EntityRecord
from proposal_engine.pipeline import (
    PipelineCompleted,
    ProgressSnapshot,
    ProgressTracker,
    ProposalPipeline,
)

from backend.services import storage

logger = structlog.get_logger(__name__)

_OUTPUT_STAGES = {
    "data_analysis": StageName.DATA_EXTRACTION,
    "analysis": StageName.INSIGHT_ANALYSIS,
    "strategy": StageName.STRATEGY_SYNTHESIS,
    "proposal": StageName.DOCUMENT_WRITING,
}

# Live state of runs executing in this process
_live_progress: dict[str, ProgressSnapshot] = {}
_active: dict[str, ProposalPipeline] = {}


def live_progress(run_id: str) -> Optional[ProgressSnapshot]:
    return _live_progress.get(run_id)


def cancel_run(run_id: str) -> bool:
    """Request cancellation of an active run; False if it is not running here."""
    pipeline = _active.get(run_id)
    if pipeline is None:
        return False
    pipeline.cancel()
    return True


async def _save_outputs(run_id: str, outputs: StageOutputs) -> None:
    for field_name, stage in _OUTPUT_STAGES.items():
        output = getattr(outputs, field_name)
        if output is not None:
            await storage.save_stage_result(run_id, stage.value, output.model_dump(mode="json"))


async def run_pipeline(
    run_id: str,
    contract: ContractRecord,
    entity: EntityRecord,
    caller: StructuredCaller,
    documents: Sequence[DocumentInfo] = (),
) -> None:
    """
    Run the full generation pipeline for one contract/entity pair.

    This function:
    1. Updates run status to 'running'
    2. Executes the pipeline in a worker thread
    3. Saves stage outputs, progress and the assembled document
    4. Updates run status to 'completed' or 'failed'
    """
    log = logger.bind(run_id=run_id)
    tracker = ProgressTracker()
    _live_progress[run_id] = tracker.snapshot
    tracker.subscribe(lambda snapshot: _live_progress.__setitem__(run_id, snapshot))

    pipeline = ProposalPipeline(
        contract,
        entity,
        caller,
        documents=documents,
        tracker=tracker,
        run_id=run_id,
    )
    _active[run_id] = pipeline

    try:
        await storage.update_run_status(run_id, "running")

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, pipeline.run)

        await _save_outputs(run_id, result.outputs)
        await storage.save_run_file(run_id, storage.PROGRESS_FILE, result.progress.to_dict())

        if isinstance(result, PipelineCompleted):
            await storage.save_document(run_id, result.document.model_dump(mode="json"))
            await storage.update_run_metadata(
                run_id,
                confidence_score=result.document.confidence_score,
                warnings=list(result.document.warnings),
                duration_seconds=round(result.duration_seconds, 2),
            )
            await storage.update_run_status(run_id, "completed")
        else:
            await storage.update_run_metadata(
                run_id,
                failed_stage=result.stage.value,
                duration_seconds=round(result.duration_seconds, 2),
            )
            await storage.update_run_status(run_id, "failed", f"{result.error_type}: {result.reason}")

    except Exception as e:
        log.exception("pipeline_runner_error")
        await storage.save_run_file(run_id, storage.PROGRESS_FILE, tracker.snapshot.to_dict())
        await storage.update_run_status(run_id, "failed", f"{type(e).__name__}: {e}")

    finally:
        _active.pop(run_id, None)
        _live_progress.pop(run_id, None)
