"""Shared pytest fixtures for the archivist test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from archivist.interfaces.archive_provider import (
    AvailabilityResult,
    IArchiveServiceProvider,
    JobStatusResult,
    SavePageResult,
)
from archivist.models.archive import ArchivableType, ArchiveRecord, ArchiveStatus
from archivist.providers.archive_store.sqlite_archive_store import SQLiteArchiveStore

ARTICLE_ID = "3f2b8c1e-5d4a-4e7b-9c0d-1a2b3c4d5e6f"
SOURCE_ID = "9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d"
ARTICLE_URL = "https://example.com/news/story"
WAYBACK_URL = "https://web.archive.org/web/20230101120000/https://example.com/news/story"


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest_asyncio.fixture
async def archive_store(tmp_path: Path) -> SQLiteArchiveStore:
    """An initialised store backed by a throwaway SQLite file."""
    store = SQLiteArchiveStore(db_path=tmp_path / "archives.db")
    await store.initialize()
    return store


@pytest.fixture
def mock_archiver() -> MagicMock:
    """An IArchiveServiceProvider double.

    Defaults: nothing archived yet, captures fail with "Unknown error",
    anonymous (no credentials).  Tests override the calls they care about.
    """
    archiver = MagicMock(spec=IArchiveServiceProvider)
    archiver.check_availability = AsyncMock(return_value=AvailabilityResult(available=False))
    archiver.save_page = AsyncMock(return_value=SavePageResult(success=False))
    archiver.save_page_v2 = AsyncMock(return_value=SavePageResult(success=False))
    archiver.check_job_status = AsyncMock(return_value=JobStatusResult(status="pending"))
    archiver.get_snapshots = AsyncMock(return_value=[])
    archiver.has_credentials = MagicMock(return_value=False)
    archiver.get_provider_name = MagicMock(return_value="mock_archiver")
    return archiver


class RecordingExecutor:
    """TaskExecutor that keeps submitted jobs so tests decide when they run."""

    def __init__(self) -> None:
        self.jobs: list[tuple[str, Any]] = []

    def submit(self, job, *, name: str = "job") -> None:  # noqa: ANN001
        self.jobs.append((name, job))

    async def run_all(self) -> None:
        jobs, self.jobs = self.jobs, []
        for _, job in jobs:
            await job()


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


def _make_record(**overrides: Any) -> ArchiveRecord:
    requested = datetime(2023, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    fields: dict[str, Any] = {
        "id": "rec-001",
        "user_id": "user-1",
        "archivable_type": ArchivableType.ARTICLE,
        "archivable_id": ARTICLE_ID,
        "status": ArchiveStatus.PENDING,
        "requested_at": requested,
        "created_at": requested,
    }
    fields.update(overrides)
    return ArchiveRecord(**fields)


@pytest.fixture
def record_factory():
    """Build an ArchiveRecord with sensible defaults for pure-function tests."""
    return _make_record
