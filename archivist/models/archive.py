"""Archive-request domain models.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph, no imports from upper layers).
#
# An ArchiveRecord is one attempt to preserve a URL at the Wayback Machine
# on behalf of a user.  It points at its subject (an article or a source)
# by (archivable_type, archivable_id) only; the subject lives elsewhere.
#
#   pending ──► processing ──► completed
#                    │
#                    └──────► failed ──(retry)──► pending
#
# Records are frozen.  Every transition goes through the store, which
# hands back a fresh instance.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ArchiveStatus(str, Enum):  # noqa: UP042
    """Lifecycle states of an archive request."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ArchiveStatus.COMPLETED, ArchiveStatus.FAILED)


NON_TERMINAL_STATUSES: tuple[ArchiveStatus, ...] = (
    ArchiveStatus.PENDING,
    ArchiveStatus.PROCESSING,
)


class ArchivableType(str, Enum):  # noqa: UP042
    """Kinds of subject an archive request can target."""

    ARTICLE = "article"
    SOURCE = "source"


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class ArchiveRecord(BaseModel):
    """A single request to preserve a subject's URL."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Opaque UUID of the record.")
    user_id: str = Field(description="Owner: the user who requested the archive.")
    archivable_type: ArchivableType
    archivable_id: str = Field(description="UUID of the article or source.")
    status: ArchiveStatus = ArchiveStatus.PENDING
    # Set only once status is COMPLETED.
    archive_url: str | None = None
    # When the Wayback Machine captured the page, as ISO-8601 UTC; holds the
    # raw remote value when it could not be parsed.
    archive_timestamp: str | None = None
    # SPN2 job id while the remote capture is still running.
    job_id: str | None = None
    # Set only once status is FAILED.
    error_message: str | None = None
    requested_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)


class RequestArchiveInput(BaseModel):
    """Validated subject reference for a new archive request."""

    model_config = ConfigDict(frozen=True)

    archivable_type: ArchivableType
    archivable_id: UUID


class ArchiveListFilters(BaseModel):
    """Equality filters accepted by the record listing."""

    model_config = ConfigDict(frozen=True)

    archivable_type: ArchivableType | None = None
    archivable_id: str | None = None
    status: ArchiveStatus | None = None
    user_id: str | None = None


class StatusSummary(BaseModel):
    """Read-only aggregate of every archive record for one subject."""

    model_config = ConfigDict(frozen=True)

    has_archive: bool = False
    latest_archive_url: str | None = None
    latest_archive_date: str | None = None
    pending_request: bool = False
    total_archives: int = Field(default=0, ge=0)


class ExistingArchive(BaseModel):
    """Whether the Wayback Machine already holds a capture of a URL."""

    model_config = ConfigDict(frozen=True)

    exists: bool
    archive_url: str | None = None
    timestamp: str | None = None
