"""Proposal generation pipeline.

Four schema-validated model calls followed by deterministic assembly.

Usage:
    from proposal_engine.pipeline import ProposalPipeline

    pipeline = ProposalPipeline(contract, entity, caller)
    result = pipeline.run()
    if result.ok:
        print(result.document.confidence_score)
    else:
        print(f"Failed at {result.stage.value}: {result.reason}")
"""

from proposal_engine.pipeline.assembly import assemble_document
from proposal_engine.pipeline.observers import (
    CompositeObserver,
    RunObserver,
    SessionRecorder,
    StructlogObserver,
    generate_session_id,
)
from proposal_engine.pipeline.orchestrator import ProposalPipeline, generate_run_id
from proposal_engine.pipeline.progress import ProgressSnapshot, ProgressTracker, StageProgress
from proposal_engine.pipeline.results import (
    PipelineCompleted,
    PipelineFailed,
    PipelineResult,
    StageFailure,
    StageResult,
    StageSuccess,
)
from proposal_engine.pipeline.tree_builder import build_document_tree

__all__ = [
    "ProposalPipeline",
    "generate_run_id",
    "assemble_document",
    "build_document_tree",
    # Progress
    "ProgressTracker",
    "ProgressSnapshot",
    "StageProgress",
    # Results
    "StageSuccess",
    "StageFailure",
    "StageResult",
    "PipelineCompleted",
    "PipelineFailed",
    "PipelineResult",
    # Observers
    "RunObserver",
    "StructlogObserver",
    "SessionRecorder",
    "CompositeObserver",
    "generate_session_id",
]
