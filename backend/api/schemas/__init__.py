"""API schemas package."""

from .requests import EditBlockRequest, GenerateRequest, MoveBlockRequest, UpdateFieldRequest
from .responses import (
    CancelResponse,
    EmailExportResponse,
    GenerateResponse,
    ProgressResponse,
    RunListItem,
    RunListResponse,
    StageProgressResponse,
    StageResultResponse,
)

__all__ = [
    # Requests
    "GenerateRequest",
    "EditBlockRequest",
    "MoveBlockRequest",
    "UpdateFieldRequest",
    # Responses
    "GenerateResponse",
    "RunListItem",
    "RunListResponse",
    "StageProgressResponse",
    "ProgressResponse",
    "StageResultResponse",
    "EmailExportResponse",
    "CancelResponse",
]
