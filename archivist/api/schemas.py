"""Pydantic request/response schemas for the Archivist API.

Defines the public contract for the archive endpoints: request creation,
listing, status summaries, Wayback lookups, health and errors.

# ─── HOW SCHEMAS WORK ─────────────────────────────────────────────────
#
# FastAPI uses these models for request validation, response
# serialization and the generated OpenAPI docs.
#
# Convention: Request schemas end with "Request", response schemas
# end with "Response".
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from archivist.interfaces.archive_provider import Snapshot
from archivist.models.archive import ArchivableType, ArchiveRecord, ArchiveStatus
from archivist.utils import archive_display


class CreateArchiveRequest(BaseModel):
    """Body of ``POST /archives``.

    ``archivable_type`` / ``archivable_id`` are validated by the service so
    a malformed subject yields the same 400 ValidationError body as any
    other caller would get; ``url`` is the page to preserve.
    """

    archivable_type: Any = None
    archivable_id: Any = None
    url: str = Field(..., min_length=1)
    trigger_now: bool = True


class ArchiveUrlRequest(BaseModel):
    """Body for the process / retry endpoints: the page to preserve."""

    url: str = Field(..., min_length=1)


class ArchiveRecordResponse(BaseModel):
    """An archive record plus the display fields the UI renders."""

    id: str
    user_id: str
    archivable_type: ArchivableType
    archivable_id: str
    status: ArchiveStatus
    archive_url: str | None = None
    archive_timestamp: str | None = None
    job_id: str | None = None
    error_message: str | None = None
    requested_at: datetime
    completed_at: datetime | None = None
    created_at: datetime

    status_label: str
    status_color: str
    archive_date: str | None = None
    requested_ago: str
    duration: str | None = None
    can_retry: bool

    @classmethod
    def from_record(cls, record: ArchiveRecord) -> ArchiveRecordResponse:
        return cls(
            **record.model_dump(),
            status_label=archive_display.get_status_label(record),
            status_color=archive_display.get_status_color(record),
            archive_date=archive_display.format_archive_date(record),
            requested_ago=archive_display.format_relative_request_time(record),
            duration=archive_display.get_duration(record),
            can_retry=archive_display.can_retry(record),
        )


class ArchiveListResponse(BaseModel):
    """Paginated list of the caller's archive records."""

    records: list[ArchiveRecordResponse] = Field(default_factory=list)
    count: int = Field(ge=0, description="Total matching records before pagination")


class PollResultResponse(BaseModel):
    """Outcome of reconciling every outstanding capture job."""

    polled: int = Field(ge=0)
    records: list[ArchiveRecordResponse] = Field(default_factory=list)


class StatusSummaryResponse(BaseModel):
    has_archive: bool
    latest_archive_url: str | None = None
    latest_archive_date: str | None = None
    pending_request: bool
    total_archives: int


class AvailabilityResponse(BaseModel):
    url: str
    exists: bool
    archive_url: str | None = None
    timestamp: str | None = None


class SnapshotResponse(BaseModel):
    timestamp: str
    url: str
    mime_type: str
    status_code: str

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> SnapshotResponse:
        return cls(
            timestamp=snapshot.timestamp,
            url=snapshot.url,
            mime_type=snapshot.mime_type,
            status_code=snapshot.status_code,
        )


class SnapshotListResponse(BaseModel):
    url: str
    snapshots: list[SnapshotResponse] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    issues: list[dict[str, str]] | None = None
