"""Per-stage progress tracking.

The tracker holds one immutable ``ProgressSnapshot``. Every update builds a
new snapshot and swaps it in whole, so a reader on another thread always sees
a consistent record without locking.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

import structlog

from proposal_engine.models.enums import STAGE_ORDER, StageName, StageStatus

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StageProgress:
    """Progress entry for one stage."""

    stage: StageName
    status: StageStatus = StageStatus.PENDING
    message: str = ""
    digest: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> dict:
        return {
            "stage": self.stage.value,
            "status": self.status.value,
            "message": self.message,
            "digest": dict(self.digest),
        }


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time view of every stage of a run."""

    entries: tuple[StageProgress, ...]

    @classmethod
    def initial(cls, stages: Iterable[StageName] = STAGE_ORDER) -> "ProgressSnapshot":
        return cls(entries=tuple(StageProgress(stage=s) for s in stages))

    def get(self, stage: StageName) -> StageProgress:
        for entry in self.entries:
            if entry.stage == stage:
                return entry
        raise KeyError(stage)

    @property
    def overall(self) -> float:
        """Fraction of stages done, 0.0 to 1.0."""
        if not self.entries:
            return 0.0
        done = sum(1 for e in self.entries if e.status == StageStatus.DONE)
        return done / len(self.entries)

    @property
    def current_stage(self) -> Optional[StageName]:
        for entry in self.entries:
            if entry.status == StageStatus.IN_PROGRESS:
                return entry.stage
        return None

    @property
    def failed_stage(self) -> Optional[StageName]:
        for entry in self.entries:
            if entry.status == StageStatus.FAILED:
                return entry.stage
        return None

    @property
    def is_finished(self) -> bool:
        return self.failed_stage is not None or all(
            e.status == StageStatus.DONE for e in self.entries
        )

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "current_stage": self.current_stage.value if self.current_stage else None,
            "failed_stage": self.failed_stage.value if self.failed_stage else None,
            "stages": [e.to_dict() for e in self.entries],
        }


ProgressListener = Callable[[ProgressSnapshot], None]

# Allowed status transitions; done and failed are terminal
_TRANSITIONS: dict[StageStatus, frozenset[StageStatus]] = {
    StageStatus.PENDING: frozenset({StageStatus.IN_PROGRESS, StageStatus.FAILED}),
    StageStatus.IN_PROGRESS: frozenset({StageStatus.IN_PROGRESS, StageStatus.DONE, StageStatus.FAILED}),
    StageStatus.DONE: frozenset(),
    StageStatus.FAILED: frozenset(),
}


class ProgressTracker:
    """Holds the current snapshot and notifies listeners on every change."""

    def __init__(self, stages: Iterable[StageName] = STAGE_ORDER):
        self._snapshot = ProgressSnapshot.initial(stages)
        self._listeners: list[ProgressListener] = []

    @property
    def snapshot(self) -> ProgressSnapshot:
        return self._snapshot

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self, stage: StageName, message: str = "") -> ProgressSnapshot:
        return self._update(stage, StageStatus.IN_PROGRESS, message)

    def complete(
        self,
        stage: StageName,
        message: str = "",
        digest: Optional[Mapping[str, int]] = None,
    ) -> ProgressSnapshot:
        return self._update(stage, StageStatus.DONE, message, digest)

    def fail(self, stage: StageName, message: str) -> ProgressSnapshot:
        return self._update(stage, StageStatus.FAILED, message)

    def _update(
        self,
        stage: StageName,
        status: StageStatus,
        message: str,
        digest: Optional[Mapping[str, int]] = None,
    ) -> ProgressSnapshot:
        current = self._snapshot.get(stage)
        if status not in _TRANSITIONS[current.status]:
            raise ValueError(
                f"Invalid progress transition for {stage.value}: "
                f"{current.status.value} -> {status.value}"
            )

        entry = replace(
            current,
            status=status,
            message=message,
            digest=MappingProxyType(dict(digest or {})),
        )
        snapshot = ProgressSnapshot(
            entries=tuple(entry if e.stage == stage else e for e in self._snapshot.entries)
        )
        self._snapshot = snapshot

        for listener in list(self._listeners):
            listener(snapshot)

        logger.debug("progress_updated", stage=stage.value, status=status.value, overall=snapshot.overall)
        return snapshot
