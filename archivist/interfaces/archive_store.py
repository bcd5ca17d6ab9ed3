"""Abstract base class for archive-record persistence providers.

# ─── ADAPTER PATTERN ─────────────────────────────────────────────────
#
# IArchiveStore hides the relational store behind a small async contract.
# The concrete implementation is SQLiteArchiveStore
# (archivist/providers/archive_store/sqlite_archive_store.py).
#
# The store owns the "one non-terminal record per subject" rule: new
# pending records are created with a conditional insert, so the check and
# the write cannot be separated by a concurrent request.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from archivist.models.archive import ArchivableType, ArchiveListFilters, ArchiveRecord


class IArchiveStore(ABC):
    """Contract for archive-record storage."""

    # ── Lifecycle ──────────────────────────────────────────────────────

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    # ── Writes ─────────────────────────────────────────────────────────

    @abstractmethod
    async def create_pending(
        self,
        user_id: str,
        archivable_type: ArchivableType,
        archivable_id: str,
    ) -> ArchiveRecord | None:
        """Insert a new ``pending`` record unless the subject already has one in flight.

        Returns
        -------
        ArchiveRecord or None
            The new record, or ``None`` if a ``pending``/``processing``
            record already exists for the subject.
        """

    @abstractmethod
    async def update(self, record_id: str, changes: dict[str, Any]) -> ArchiveRecord | None:
        """Apply *changes* (column → value) to a record.

        Returns the updated record, or ``None`` if no record has that id.

        Raises
        ------
        archivist.utils.errors.ConflictError
            If the change would leave two non-terminal records for the
            same subject.
        """

    # ── Reads ──────────────────────────────────────────────────────────

    @abstractmethod
    async def get(self, record_id: str) -> ArchiveRecord | None:
        """Return one record by id, or ``None``."""

    @abstractmethod
    async def list_for_item(
        self,
        archivable_type: ArchivableType,
        archivable_id: str,
    ) -> list[ArchiveRecord]:
        """Return every record for a subject, newest first."""

    @abstractmethod
    async def get_latest_completed(
        self,
        archivable_type: ArchivableType,
        archivable_id: str,
    ) -> ArchiveRecord | None:
        """Return the most recently completed record for a subject."""

    @abstractmethod
    async def list_records(
        self,
        filters: ArchiveListFilters | None = None,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ArchiveRecord], int]:
        """Return one page of records matching *filters* plus the total match count."""

    @abstractmethod
    async def list_awaiting_job(self, limit: int = 50) -> list[ArchiveRecord]:
        """Return ``processing`` records that carry a remote job id, oldest first."""
