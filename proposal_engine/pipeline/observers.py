"""Run observers.

An observer is handed to each pipeline run and receives its stage events.
Nothing here is global: every run gets its own observer instances.
"""

import json
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol

import structlog
from pydantic import BaseModel

from proposal_engine.models.enums import StageName

logger = structlog.get_logger(__name__)


class RunObserver(Protocol):
    def stage_started(self, stage: StageName) -> None:
        ...

    def stage_succeeded(
        self,
        stage: StageName,
        output: BaseModel,
        duration_seconds: float,
        digest: Mapping[str, int],
    ) -> None:
        ...

    def stage_failed(
        self,
        stage: StageName,
        error: str,
        error_type: str,
        duration_seconds: float,
    ) -> None:
        ...

    def run_finished(self, success: bool, summary: Mapping[str, Any]) -> None:
        ...


class StructlogObserver:
    """Writes stage events to structlog, bound to one run id."""

    def __init__(self, run_id: str, log: Optional[Any] = None):
        self.run_id = run_id
        self.log = (log or logger).bind(run_id=run_id)

    def stage_started(self, stage: StageName) -> None:
        self.log.info(f"stage_{stage.value}_start")

    def stage_succeeded(self, stage, output, duration_seconds, digest) -> None:
        self.log.info(
            f"stage_{stage.value}_complete",
            duration_seconds=round(duration_seconds, 3),
            **dict(digest),
        )

    def stage_failed(self, stage, error, error_type, duration_seconds) -> None:
        self.log.error(
            f"stage_{stage.value}_failed",
            error=error,
            error_type=error_type,
            duration_seconds=round(duration_seconds, 3),
        )

    def run_finished(self, success: bool, summary: Mapping[str, Any]) -> None:
        if success:
            self.log.info("pipeline_complete", **dict(summary))
        else:
            self.log.error("pipeline_failed", **dict(summary))


def generate_session_id(now: Optional[datetime] = None) -> str:
    """``session-<iso timestamp, ':' and '.' replaced by '-'>-<random suffix>``."""
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
    stamp = stamp.replace(":", "-").replace(".", "-")
    return f"session-{stamp}-{secrets.token_hex(5)[:9]}"


class SessionRecorder:
    """Diagnostic JSON files for one session.

    One file per stage execution (``<session>_<stage>_<ms>.json``) and one
    summary file when the run finishes (``<session>_SESSION_COMPLETE.json``).
    The pipeline never reads these back.
    """

    def __init__(self, log_dir: str | Path, session_id: Optional[str] = None):
        self.log_dir = Path(log_dir)
        self.session_id = session_id or generate_session_id()
        self.started_at = datetime.now(timezone.utc)
        self._executions: list[dict[str, Any]] = []
        self.log_dir.mkdir(parents=True, exist_ok=True)

    @property
    def executions(self) -> list[dict[str, Any]]:
        return list(self._executions)

    def stage_started(self, stage: StageName) -> None:
        pass

    def stage_succeeded(self, stage, output, duration_seconds, digest) -> None:
        self._record(
            stage,
            {
                "success": True,
                "duration_seconds": duration_seconds,
                "digest": dict(digest),
                "output": output.model_dump(mode="json"),
            },
        )

    def stage_failed(self, stage, error, error_type, duration_seconds) -> None:
        self._record(
            stage,
            {
                "success": False,
                "duration_seconds": duration_seconds,
                "error": error,
                "error_type": error_type,
            },
        )

    def run_finished(self, success: bool, summary: Mapping[str, Any]) -> None:
        ended_at = datetime.now(timezone.utc)
        payload = {
            "session_id": self.session_id,
            "started_at": self.started_at.isoformat(),
            "ended_at": ended_at.isoformat(),
            "total_duration_seconds": (ended_at - self.started_at).total_seconds(),
            "success": success,
            "total_stages": len(self._executions),
            "successful_stages": sum(1 for e in self._executions if e["success"]),
            "failed_stages": sum(1 for e in self._executions if not e["success"]),
            "executions": [
                {k: v for k, v in e.items() if k != "output"} for e in self._executions
            ],
            "summary": dict(summary),
        }
        self._write(f"{self.session_id}_SESSION_COMPLETE.json", payload)

    def _record(self, stage: StageName, data: dict[str, Any]) -> None:
        timestamp = datetime.now(timezone.utc)
        entry = {
            "session_id": self.session_id,
            "stage": stage.value,
            "timestamp": timestamp.isoformat(),
            **data,
        }
        self._executions.append(entry)
        millis = int(timestamp.timestamp() * 1000)
        self._write(f"{self.session_id}_{stage.value}_{millis}.json", entry)

    def _write(self, filename: str, payload: dict[str, Any]) -> None:
        path = self.log_dir / filename
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, default=str)
        logger.debug("session_log_written", path=str(path))


class CompositeObserver:
    """Fans every event out to several observers in order."""

    def __init__(self, *observers: RunObserver):
        self.observers = observers

    def stage_started(self, stage):
        for o in self.observers:
            o.stage_started(stage)

    def stage_succeeded(self, stage, output, duration_seconds, digest):
        for o in self.observers:
            o.stage_succeeded(stage, output, duration_seconds, digest)

    def stage_failed(self, stage, error, error_type, duration_seconds):
        for o in self.observers:
            o.stage_failed(stage, error, error_type, duration_seconds)

    def run_finished(self, success, summary):
        for o in self.observers:
            o.run_finished(success, summary)
