"""Archivist domain models: re-exports the public archive model classes.

Other parts of the codebase can import from ``archivist.models`` directly
(e.g. ``from archivist.models import ArchiveRecord``).
"""

from __future__ import annotations

from archivist.models.archive import (
    NON_TERMINAL_STATUSES,
    ArchivableType,
    ArchiveListFilters,
    ArchiveRecord,
    ArchiveStatus,
    ExistingArchive,
    RequestArchiveInput,
    StatusSummary,
    utc_now,
)

__all__ = [
    "NON_TERMINAL_STATUSES",
    "ArchivableType",
    "ArchiveListFilters",
    "ArchiveRecord",
    "ArchiveStatus",
    "ExistingArchive",
    "RequestArchiveInput",
    "StatusSummary",
    "utc_now",
]
