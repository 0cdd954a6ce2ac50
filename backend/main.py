"""
FastAPI Backend for the RFQ Proposal Engine

This is the main entry point for the API server. It provides endpoints for:
- Starting generation runs for a contract/entity pair
- Polling per-stage progress and reading stage outputs
- Editing the assembled document and exporting it (email, HTML)

Architecture Decision:
- No database - all data stored as JSON on disk for simplicity and portability
- Each run gets a unique ID and its own directory
- Every stage output preserved for traceability
"""

# Load .env BEFORE any application imports that read os.environ
from dotenv import load_dotenv
load_dotenv()

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from proposal_engine import __version__
from proposal_engine.config.settings import get_settings
from proposal_engine.logging_config import configure_logging

from backend.api.routes import document, generate, runs
from backend.services import storage


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging and data directories on startup."""
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    storage.RUNS_DIR.mkdir(parents=True, exist_ok=True)
    yield


app = FastAPI(
    title="RFQ Proposal Engine API",
    description="API for generating and editing government RFQ responses with a staged LLM pipeline",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =============================================================================
# API routes - mounted under /api prefix
# =============================================================================

app.include_router(generate.router, prefix="/api", tags=["Generation"])
app.include_router(runs.router, prefix="/api", tags=["Runs"])
app.include_router(document.router, prefix="/api", tags=["Document"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    return {
        "name": "RFQ Proposal Engine API",
        "docs": "/docs",
        "endpoints": {
            "generate": "POST /api/generate",
            "runs": "GET /api/runs",
            "progress": "GET /api/runs/{run_id}/progress",
            "document": "GET /api/runs/{run_id}/document",
            "stage_output": "GET /api/runs/{run_id}/stages/{stage}",
            "export_email": "GET /api/runs/{run_id}/export/email",
            "export_html": "GET /api/runs/{run_id}/export/html",
            "delete": "DELETE /api/runs/{run_id}",
        },
    }


# =============================================================================
# Run with: python -m backend.main
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", 8100))
    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
    )
