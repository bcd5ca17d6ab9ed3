"""Archivist API layer: routes, schemas and middleware."""

from archivist.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from archivist.api.routes import router
from archivist.api.schemas import (
    ArchiveListResponse,
    ArchiveRecordResponse,
    CreateArchiveRequest,
    ErrorResponse,
    HealthResponse,
    StatusSummaryResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "ArchiveListResponse",
    "ArchiveRecordResponse",
    "CreateArchiveRequest",
    "ErrorResponse",
    "HealthResponse",
    "StatusSummaryResponse",
]
