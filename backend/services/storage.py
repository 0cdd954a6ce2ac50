"""
Storage Service for Run Data

Handles all file I/O for generation runs.
Uses JSON files on disk - no database required.

Design Decisions:
- Each run gets its own directory under data/runs/{run_id}/
- Inputs, stage outputs, progress and the final document saved separately
- File operations are async-friendly using aiofiles
"""

import json
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import aiofiles

from proposal_engine.pipeline.orchestrator import generate_run_id

# Base directories
DATA_DIR = Path(__file__).parent.parent / "data"
RUNS_DIR = DATA_DIR / "runs"

METADATA_FILE = "metadata.json"
INPUT_FILE = "input.json"
PROGRESS_FILE = "progress.json"
DOCUMENT_FILE = "document.json"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_run_dir(run_id: str) -> Path:
    """Get the directory for a run."""
    return RUNS_DIR / run_id


def get_run_file(run_id: str, filename: str) -> Path:
    """Get a specific file within a run directory."""
    return get_run_dir(run_id) / filename


def stage_filename(stage_name: str) -> str:
    return f"stage_{stage_name}_result.json"


# =============================================================================
# Run Operations
# =============================================================================

async def create_run(
    contract_id: str,
    company_name: str,
    inputs: dict,
    run_id: Optional[str] = None,
) -> str:
    """Create a new run, persist its inputs and return its ID."""
    run_id = run_id or generate_run_id()
    get_run_dir(run_id).mkdir(parents=True, exist_ok=True)

    metadata = {
        "run_id": run_id,
        "contract_id": contract_id,
        "company_name": company_name,
        "status": "queued",
        "started_at": _now(),
        "completed_at": None,
        "failed_stage": None,
        "confidence_score": None,
        "errors": [],
        "warnings": [],
    }

    await save_run_file(run_id, INPUT_FILE, inputs)
    await save_run_file(run_id, METADATA_FILE, metadata)
    return run_id


async def save_run_file(run_id: str, filename: str, data: Any) -> None:
    """Save data to a file in the run directory."""
    run_dir = get_run_dir(run_id)
    run_dir.mkdir(parents=True, exist_ok=True)

    async with aiofiles.open(run_dir / filename, "w", encoding="utf-8") as f:
        await f.write(json.dumps(data, indent=2, default=str))


async def load_run_file(run_id: str, filename: str) -> Optional[dict]:
    """Load data from a file in the run directory."""
    file_path = get_run_file(run_id, filename)

    if not file_path.exists():
        return None

    async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
        content = await f.read()
        return json.loads(content)


async def update_run_metadata(run_id: str, **fields: Any) -> Optional[dict]:
    """Merge ``fields`` into the run metadata."""
    metadata = await load_run_file(run_id, METADATA_FILE)
    if metadata is None:
        return None
    metadata.update(fields)
    await save_run_file(run_id, METADATA_FILE, metadata)
    return metadata


async def update_run_status(
    run_id: str,
    status: str,
    error_message: Optional[str] = None,
) -> None:
    """Update the status of a run."""
    metadata = await load_run_file(run_id, METADATA_FILE)
    if metadata:
        metadata["status"] = status
        if status in ("completed", "failed"):
            metadata["completed_at"] = _now()
        if error_message:
            metadata["errors"].append(error_message)
        await save_run_file(run_id, METADATA_FILE, metadata)


async def save_stage_result(run_id: str, stage_name: str, result: dict) -> None:
    await save_run_file(run_id, stage_filename(stage_name), result)


async def load_stage_result(run_id: str, stage_name: str) -> Optional[dict]:
    return await load_run_file(run_id, stage_filename(stage_name))


async def list_runs() -> list[dict]:
    """List all runs with their metadata, newest first."""
    runs = []

    if not RUNS_DIR.exists():
        return runs

    for run_dir in RUNS_DIR.iterdir():
        metadata_path = run_dir / METADATA_FILE
        if run_dir.is_dir() and metadata_path.exists():
            async with aiofiles.open(metadata_path, "r", encoding="utf-8") as f:
                runs.append(json.loads(await f.read()))

    runs.sort(key=lambda r: r.get("started_at") or "", reverse=True)
    return runs


async def get_run_metadata(run_id: str) -> Optional[dict]:
    """Get metadata for a specific run."""
    return await load_run_file(run_id, METADATA_FILE)


async def run_exists(run_id: str) -> bool:
    """Check if a run exists."""
    return get_run_file(run_id, METADATA_FILE).exists()


async def delete_run(run_id: str) -> bool:
    """Delete a run and all its files."""
    run_dir = get_run_dir(run_id)
    if run_dir.exists():
        shutil.rmtree(run_dir)
        return True
    return False


# =============================================================================
# Result Loading Helpers
# =============================================================================

async def load_document(run_id: str) -> Optional[dict]:
    """Load the assembled (and possibly edited) document."""
    return await load_run_file(run_id, DOCUMENT_FILE)


async def save_document(run_id: str, document: dict) -> None:
    await save_run_file(run_id, DOCUMENT_FILE, document)


async def load_progress(run_id: str) -> Optional[dict]:
    return await load_run_file(run_id, PROGRESS_FILE)
