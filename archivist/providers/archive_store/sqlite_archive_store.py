"""SQLite-backed archive-record persistence provider.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing IArchiveStore).
#
# Database: ``data/archives.db``, one row per archive request.
#
# Duplicate in-flight requests are prevented twice over:
#   - ``_INSERT_PENDING`` only inserts when no pending/processing row exists
#     for the subject (a single statement, so no check-then-write gap);
#   - a partial UNIQUE index over non-terminal rows rejects anything that
#     slips past, including a retry that would re-arm an old failed row
#     while a newer request is still running.
#
# Uses ``aiosqlite`` for async I/O and ``PRAGMA journal_mode=WAL`` for
# concurrent read safety.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

import aiosqlite
import structlog

from archivist.interfaces.archive_store import IArchiveStore
from archivist.models.archive import (
    ArchivableType,
    ArchiveListFilters,
    ArchiveRecord,
    ArchiveStatus,
    utc_now,
)
from archivist.utils.errors import ConflictError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/archives.db")

# ── Schema DDL ────────────────────────────────────────────────────────

_CREATE_ARCHIVE_RECORDS_TABLE = """\
CREATE TABLE IF NOT EXISTS archive_records (
    id                TEXT PRIMARY KEY,
    user_id           TEXT NOT NULL,
    archivable_type   TEXT NOT NULL CHECK (archivable_type IN ('article', 'source')),
    archivable_id     TEXT NOT NULL,
    archive_url       TEXT,
    archive_timestamp TEXT,
    status            TEXT NOT NULL DEFAULT 'pending'
                      CHECK (status IN ('pending', 'processing', 'completed', 'failed')),
    job_id            TEXT,
    error_message     TEXT,
    requested_at      TEXT NOT NULL,
    completed_at      TEXT,
    created_at        TEXT NOT NULL
);
"""

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_archive_subject "
    "ON archive_records(archivable_type, archivable_id);",
    "CREATE INDEX IF NOT EXISTS idx_archive_user ON archive_records(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_archive_status ON archive_records(status);",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_archive_in_flight "
    "ON archive_records(archivable_type, archivable_id) "
    "WHERE status IN ('pending', 'processing');",
]

# ── DML ───────────────────────────────────────────────────────────────

_INSERT_PENDING = """\
INSERT INTO archive_records (id, user_id, archivable_type, archivable_id, status, requested_at, created_at)
SELECT ?, ?, ?, ?, 'pending', ?, ?
WHERE NOT EXISTS (
    SELECT 1 FROM archive_records
    WHERE archivable_type = ? AND archivable_id = ?
      AND status IN ('pending', 'processing')
);
"""

_SELECT_COLUMNS = """\
id, user_id, archivable_type, archivable_id, archive_url, archive_timestamp,
status, job_id, error_message, requested_at, completed_at, created_at"""

_SELECT_BY_ID = f"SELECT {_SELECT_COLUMNS} FROM archive_records WHERE id = ?;"

_SELECT_FOR_ITEM = f"""\
SELECT {_SELECT_COLUMNS} FROM archive_records
WHERE archivable_type = ? AND archivable_id = ?
ORDER BY created_at DESC, rowid DESC;
"""

_SELECT_LATEST_COMPLETED = f"""\
SELECT {_SELECT_COLUMNS} FROM archive_records
WHERE archivable_type = ? AND archivable_id = ? AND status = 'completed'
ORDER BY completed_at DESC, rowid DESC
LIMIT 1;
"""

_SELECT_AWAITING_JOB = f"""\
SELECT {_SELECT_COLUMNS} FROM archive_records
WHERE status = 'processing' AND job_id IS NOT NULL
ORDER BY requested_at ASC, rowid ASC
LIMIT ?;
"""

# Columns the lifecycle service may change after insert.
_UPDATABLE_COLUMNS = frozenset({
    "status",
    "archive_url",
    "archive_timestamp",
    "job_id",
    "error_message",
    "completed_at",
})


def _to_db(value: Any) -> Any:
    if isinstance(value, ArchiveStatus):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SQLiteArchiveStore(IArchiveStore):
    """SQLite-backed archive-record storage in ``data/archives.db``."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the archive_records table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_ARCHIVE_RECORDS_TABLE)
            for idx_sql in _CREATE_INDICES:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("archive_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_archive"

    # ── Writes ─────────────────────────────────────────────────────────

    async def create_pending(
        self,
        user_id: str,
        archivable_type: ArchivableType,
        archivable_id: str,
    ) -> ArchiveRecord | None:
        record_id = str(uuid4())
        now = utc_now().isoformat()
        subject_type = ArchivableType(archivable_type).value

        async with aiosqlite.connect(str(self._db_path)) as db:
            try:
                cursor = await db.execute(_INSERT_PENDING, (
                    record_id,
                    user_id,
                    subject_type,
                    archivable_id,
                    now,
                    now,
                    subject_type,
                    archivable_id,
                ))
                await db.commit()
            except sqlite3.IntegrityError:
                # Lost a race against a concurrent insert for the same subject.
                return None
            if cursor.rowcount == 0:
                return None

        return await self.get(record_id)

    async def update(self, record_id: str, changes: dict[str, Any]) -> ArchiveRecord | None:
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update archive record columns: {sorted(unknown)}")
        if not changes:
            return await self.get(record_id)

        columns = sorted(changes)
        assignments = ", ".join(f"{column} = ?" for column in columns)
        params = [_to_db(changes[column]) for column in columns]
        params.append(record_id)

        async with aiosqlite.connect(str(self._db_path)) as db:
            try:
                cursor = await db.execute(
                    f"UPDATE archive_records SET {assignments} WHERE id = ?;",
                    params,
                )
                await db.commit()
            except sqlite3.IntegrityError as exc:
                raise ConflictError("An archive request is already in progress") from exc
            if cursor.rowcount == 0:
                return None

        return await self.get(record_id)

    # ── Reads ──────────────────────────────────────────────────────────

    async def get(self, record_id: str) -> ArchiveRecord | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_BY_ID, (record_id,))
            row = await cursor.fetchone()
        return self._row_to_record(dict(row)) if row is not None else None

    async def list_for_item(
        self,
        archivable_type: ArchivableType,
        archivable_id: str,
    ) -> list[ArchiveRecord]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                _SELECT_FOR_ITEM,
                (ArchivableType(archivable_type).value, archivable_id),
            )
            rows = await cursor.fetchall()
        return [self._row_to_record(dict(r)) for r in rows]

    async def get_latest_completed(
        self,
        archivable_type: ArchivableType,
        archivable_id: str,
    ) -> ArchiveRecord | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                _SELECT_LATEST_COMPLETED,
                (ArchivableType(archivable_type).value, archivable_id),
            )
            row = await cursor.fetchone()
        return self._row_to_record(dict(row)) if row is not None else None

    async def list_records(
        self,
        filters: ArchiveListFilters | None = None,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ArchiveRecord], int]:
        filters = filters or ArchiveListFilters()

        # Build dynamic WHERE clause from whichever filters are set.
        conditions: list[str] = []
        params: list[Any] = []
        if filters.archivable_type:
            conditions.append("archivable_type = ?")
            params.append(filters.archivable_type.value)
        if filters.archivable_id:
            conditions.append("archivable_id = ?")
            params.append(filters.archivable_id)
        if filters.status:
            conditions.append("status = ?")
            params.append(filters.status.value)
        if filters.user_id:
            conditions.append("user_id = ?")
            params.append(filters.user_id)
        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT COUNT(*) AS cnt FROM archive_records {where_clause};",
                params,
            )
            count_row = await cursor.fetchone()
            total = count_row["cnt"] if count_row else 0

            cursor = await db.execute(
                f"SELECT {_SELECT_COLUMNS} FROM archive_records {where_clause} "
                "ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?;",
                [*params, limit, offset],
            )
            rows = await cursor.fetchall()

        return [self._row_to_record(dict(r)) for r in rows], total

    async def list_awaiting_job(self, limit: int = 50) -> list[ArchiveRecord]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_AWAITING_JOB, (limit,))
            rows = await cursor.fetchall()
        return [self._row_to_record(dict(r)) for r in rows]

    # ── Private helpers ────────────────────────────────────────────────

    @staticmethod
    def _row_to_record(row: dict[str, Any]) -> ArchiveRecord:
        """Convert an archive_records row into an ArchiveRecord model."""
        return ArchiveRecord(
            id=row["id"],
            user_id=row["user_id"],
            archivable_type=ArchivableType(row["archivable_type"]),
            archivable_id=row["archivable_id"],
            status=ArchiveStatus(row["status"]),
            archive_url=row.get("archive_url"),
            archive_timestamp=row.get("archive_timestamp"),
            job_id=row.get("job_id"),
            error_message=row.get("error_message"),
            requested_at=datetime.fromisoformat(row["requested_at"]),
            completed_at=(
                datetime.fromisoformat(row["completed_at"]) if row.get("completed_at") else None
            ),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
