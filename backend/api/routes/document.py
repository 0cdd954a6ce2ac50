"""
Document Routes

Fetch the assembled document of a run, apply editor operations, and export.
Every edit is persisted and returns the updated document with its version
bumped.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse

from proposal_engine.document import edit_block_text, find_node, move_block, update_form_field
from proposal_engine.errors import DocumentEditError
from proposal_engine.export import Contact, ContactInfo, build_email_template, mailto_link, render_html
from proposal_engine.models.document import GeneratedDocument

from backend.api.deps import require_run
from backend.api.schemas import (
    EditBlockRequest,
    EmailExportResponse,
    MoveBlockRequest,
    UpdateFieldRequest,
)
from backend.services import storage

router = APIRouter()


async def _load(run_id: str) -> GeneratedDocument:
    data = await storage.load_document(run_id)
    if data is None:
        raise HTTPException(status_code=404, detail=f"No document for run {run_id}")
    return GeneratedDocument.model_validate(data)


async def _load_for_edit(run_id: str, block_id: str) -> GeneratedDocument:
    document = await _load(run_id)
    if find_node(document.blocks, block_id) is None:
        raise HTTPException(status_code=404, detail=f"Block not found: {block_id}")
    return document


async def _save(run_id: str, document: GeneratedDocument) -> GeneratedDocument:
    await storage.save_document(run_id, document.model_dump(mode="json"))
    return document


@router.get("/runs/{run_id}/document", response_model=GeneratedDocument)
async def get_document(run_id: str, metadata: dict = Depends(require_run)) -> GeneratedDocument:
    return await _load(run_id)


# =============================================================================
# Editing
# =============================================================================

@router.patch("/runs/{run_id}/blocks/{block_id}", response_model=GeneratedDocument)
async def edit_block(
    run_id: str,
    block_id: str,
    request: EditBlockRequest,
    metadata: dict = Depends(require_run),
) -> GeneratedDocument:
    document = await _load_for_edit(run_id, block_id)
    try:
        updated = edit_block_text(document, block_id, request.text)
    except DocumentEditError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await _save(run_id, updated)


@router.post("/runs/{run_id}/blocks/{block_id}/move", response_model=GeneratedDocument)
async def move(
    run_id: str,
    block_id: str,
    request: MoveBlockRequest,
    metadata: dict = Depends(require_run),
) -> GeneratedDocument:
    document = await _load_for_edit(run_id, block_id)
    try:
        updated = move_block(document, block_id, request.direction)
    except DocumentEditError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await _save(run_id, updated)


@router.patch("/runs/{run_id}/blocks/{block_id}/fields/{field_id}", response_model=GeneratedDocument)
async def update_field(
    run_id: str,
    block_id: str,
    field_id: str,
    request: UpdateFieldRequest,
    metadata: dict = Depends(require_run),
) -> GeneratedDocument:
    document = await _load_for_edit(run_id, block_id)
    try:
        updated = update_form_field(document, block_id, field_id, request.value)
    except DocumentEditError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await _save(run_id, updated)


# =============================================================================
# Export
# =============================================================================

@router.get("/runs/{run_id}/export/email", response_model=EmailExportResponse)
async def export_email(
    run_id: str,
    to: list[str] = Query(default=[]),
    cc: Optional[str] = Query(default=None),
    contact_name: Optional[str] = Query(default=None),
    attach_pdf: bool = Query(default=True),
    metadata: dict = Depends(require_run),
) -> EmailExportResponse:
    """Submission email template plus a ready-to-open mailto: link."""
    document = await _load(run_id)
    contact = ContactInfo(
        submission_email=to,
        primary_contact=Contact(name=contact_name) if contact_name else None,
        secondary_contact=Contact(email=cc) if cc else None,
    )
    template = build_email_template(document, contact, attach_pdf=attach_pdf)
    return EmailExportResponse(**template.model_dump(), mailto=mailto_link(template))


@router.get("/runs/{run_id}/export/html", response_class=HTMLResponse)
async def export_html(
    run_id: str,
    exclude_submission_info: bool = Query(default=False),
    exclude_forms: bool = Query(default=False),
    metadata: dict = Depends(require_run),
) -> HTMLResponse:
    """Printable HTML rendering of the document."""
    document = await _load(run_id)
    return HTMLResponse(render_html(document, exclude_submission_info, exclude_forms))
