"""Common shape of a generation stage.

A stage builds a prompt from typed inputs, makes exactly one structured
model call, and returns ``StageSuccess`` or ``StageFailure``. It never
raises for call errors and never retries.
"""

import json
import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, Iterable, Optional, TypeVar

from pydantic import BaseModel

from proposal_engine.llm.structured import StructuredCaller, StructuredPrompt
from proposal_engine.models.enums import StageName
from proposal_engine.pipeline.observers import RunObserver
from proposal_engine.pipeline.results import StageFailure, StageResult, StageSuccess

I = TypeVar("I")
O = TypeVar("O", bound=BaseModel)


def dump_json(data: Any) -> str:
    """Stable JSON rendering for prompt embedding."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=False)
    return json.dumps(data, indent=2, sort_keys=True, default=str)


def bullet_list(items: Iterable[str], empty: str = "Not specified") -> str:
    items = [i for i in items if i]
    if not items:
        return empty
    return "\n".join(f"- {item}" for item in items)


def section(title: str, body: str) -> str:
    return f"{title.upper()}:\n{body}"


class StageExecutor(ABC, Generic[I, O]):
    """One schema-validated model call with stage-specific prompting."""

    stage: ClassVar[StageName]
    start_message: ClassVar[str] = ""
    schema: ClassVar[type[BaseModel]]

    def __init__(self, caller: StructuredCaller, observer: Optional[RunObserver] = None):
        self.caller = caller
        self.observer = observer

    @abstractmethod
    def build_prompt(self, inputs: I) -> StructuredPrompt:
        """Deterministic prompt for ``inputs``."""

    def postprocess(self, inputs: I, output: O) -> O:
        """Hook for deterministic corrections applied after the call."""
        return output

    @abstractmethod
    def digest(self, output: O) -> dict[str, int]:
        """Small numeric summary of ``output`` for progress and logs."""

    @abstractmethod
    def summarize(self, output: O) -> str:
        """Human-readable progress message for a finished stage."""

    def execute(self, inputs: I) -> StageResult[O]:
        if self.observer is not None:
            self.observer.stage_started(self.stage)
        start = time.perf_counter()

        try:
            prompt = self.build_prompt(inputs)
            output = self.caller.call(prompt, self.schema)
            output = self.postprocess(inputs, output)
            digest = self.digest(output)
        except Exception as e:
            # Every failure becomes a typed result for the orchestrator
            duration = time.perf_counter() - start
            failure = StageFailure(
                stage=self.stage,
                error=str(e) or type(e).__name__,
                error_type=type(e).__name__,
                duration_seconds=duration,
            )
            if self.observer is not None:
                self.observer.stage_failed(self.stage, failure.error, failure.error_type, duration)
            return failure

        duration = time.perf_counter() - start
        if self.observer is not None:
            self.observer.stage_succeeded(self.stage, output, duration, digest)
        return StageSuccess(stage=self.stage, output=output, duration_seconds=duration, digest=digest)
