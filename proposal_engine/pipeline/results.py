"""Typed results returned by stages and by the pipeline."""

from dataclasses import dataclass, field
from typing import Generic, TypeVar, Union

from pydantic import BaseModel

from proposal_engine.models.document import GeneratedDocument, StageOutputs
from proposal_engine.models.enums import StageName
from proposal_engine.pipeline.progress import ProgressSnapshot

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class StageSuccess(Generic[T]):
    stage: StageName
    output: T
    duration_seconds: float
    digest: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class StageFailure:
    stage: StageName
    error: str
    error_type: str
    duration_seconds: float

    @property
    def ok(self) -> bool:
        return False


StageResult = Union[StageSuccess[T], StageFailure]


@dataclass(frozen=True)
class PipelineCompleted:
    """Terminal state of a run that produced a document."""

    run_id: str
    document: GeneratedDocument
    outputs: StageOutputs
    progress: ProgressSnapshot
    duration_seconds: float

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class PipelineFailed:
    """Terminal state of a run halted at ``stage``.

    ``outputs`` holds whatever the stages before ``stage`` produced.
    """

    run_id: str
    stage: StageName
    reason: str
    error_type: str
    outputs: StageOutputs
    progress: ProgressSnapshot
    duration_seconds: float

    @property
    def ok(self) -> bool:
        return False


PipelineResult = Union[PipelineCompleted, PipelineFailed]
