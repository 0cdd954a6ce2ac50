"""
FastAPI dependencies.
"""

from fastapi import HTTPException

from proposal_engine.llm.structured import LangChainStructuredCaller, StructuredCaller

from backend.services import storage


def get_structured_caller() -> StructuredCaller:
    """Model caller used by generation runs; overridden in tests."""
    return LangChainStructuredCaller()


async def require_run(run_id: str) -> dict:
    """Run metadata, or 404 if the run does not exist."""
    metadata = await storage.get_run_metadata(run_id)
    if metadata is None:
        raise HTTPException(status_code=404, detail=f"Run not found: {run_id}")
    return metadata
