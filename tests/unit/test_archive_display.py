"""Unit tests for the archive record display helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from archivist.models.archive import ArchiveStatus
from archivist.utils import archive_display

REQUESTED = datetime(2023, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
ARCHIVE_URL = "https://web.archive.org/web/20230101120000/https://example.com/a"


class TestStatusFlags:
    def test_complete_requires_url(self, record_factory) -> None:
        assert archive_display.is_complete(
            record_factory(status=ArchiveStatus.COMPLETED, archive_url=ARCHIVE_URL)
        )
        assert not archive_display.is_complete(record_factory(status=ArchiveStatus.COMPLETED))

    @pytest.mark.parametrize(
        ("status", "pending", "failed", "retryable"),
        [
            (ArchiveStatus.PENDING, True, False, False),
            (ArchiveStatus.PROCESSING, True, False, False),
            (ArchiveStatus.COMPLETED, False, False, False),
            (ArchiveStatus.FAILED, False, True, True),
        ],
    )
    def test_flags_per_status(self, record_factory, status, pending, failed, retryable) -> None:
        record = record_factory(status=status)
        assert archive_display.is_pending(record) is pending
        assert archive_display.is_failed(record) is failed
        assert archive_display.can_retry(record) is retryable

    def test_only_owner_can_view(self, record_factory) -> None:
        record = record_factory(user_id="alice")
        assert archive_display.can_be_viewed_by(record, "alice")
        assert not archive_display.can_be_viewed_by(record, "bob")


class TestLabels:
    @pytest.mark.parametrize(
        ("status", "label"),
        [
            (ArchiveStatus.PENDING, "Pending"),
            (ArchiveStatus.PROCESSING, "Archiving..."),
            (ArchiveStatus.COMPLETED, "Archived"),
            (ArchiveStatus.FAILED, "Failed"),
        ],
    )
    def test_status_label(self, record_factory, status, label) -> None:
        assert archive_display.get_status_label(record_factory(status=status)) == label

    def test_status_color_is_defined_for_every_status(self, record_factory) -> None:
        colors = {archive_display.get_status_color(record_factory(status=s)) for s in ArchiveStatus}
        assert len(colors) == len(ArchiveStatus)
        assert archive_display.get_status_color(
            record_factory(status=ArchiveStatus.FAILED)
        ) == "text-red-600 bg-red-50"


class TestArchiveDate:
    def test_reads_wayback_timestamp(self, record_factory) -> None:
        record = record_factory(archive_timestamp="20230101120000")
        assert archive_display.get_archive_date(record) == REQUESTED

    def test_reads_iso_timestamp(self, record_factory) -> None:
        record = record_factory(archive_timestamp="2023-01-01T12:00:00Z")
        assert archive_display.get_archive_date(record) == REQUESTED

    def test_unparseable_timestamp(self, record_factory) -> None:
        assert archive_display.get_archive_date(record_factory(archive_timestamp="soon")) is None
        assert archive_display.get_archive_date(record_factory()) is None

    def test_format_archive_date(self, record_factory) -> None:
        record = record_factory(archive_timestamp="20230101120000")
        assert archive_display.format_archive_date(record) == "Jan 1, 2023, 12:00 PM"

    def test_format_archive_date_morning(self, record_factory) -> None:
        record = record_factory(archive_timestamp="2023-03-15T09:05:00Z")
        assert archive_display.format_archive_date(record) == "Mar 15, 2023, 09:05 AM"

    def test_format_archive_date_without_timestamp(self, record_factory) -> None:
        assert archive_display.format_archive_date(record_factory()) is None


class TestRelativeRequestTime:
    @pytest.mark.parametrize(
        ("elapsed", "expected"),
        [
            (timedelta(seconds=30), "Just now"),
            (timedelta(minutes=5), "5m ago"),
            (timedelta(minutes=59, seconds=59), "59m ago"),
            (timedelta(hours=3), "3h ago"),
            (timedelta(hours=30), "Yesterday"),
            (timedelta(days=4), "4 days ago"),
        ],
    )
    def test_buckets(self, record_factory, elapsed, expected) -> None:
        record = record_factory(requested_at=REQUESTED)
        now = REQUESTED + elapsed
        assert archive_display.format_relative_request_time(record, now=now) == expected


class TestDuration:
    def test_none_until_terminal(self, record_factory) -> None:
        assert archive_display.get_duration(record_factory()) is None

    @pytest.mark.parametrize(
        ("elapsed", "expected"),
        [
            (timedelta(milliseconds=400), "Less than 1 second"),
            (timedelta(seconds=42), "42 seconds"),
            (timedelta(seconds=90), "1 minutes"),
            (timedelta(minutes=30), "30 minutes"),
            (timedelta(hours=2, minutes=10), "2 hours"),
        ],
    )
    def test_buckets(self, record_factory, elapsed, expected) -> None:
        record = record_factory(
            status=ArchiveStatus.COMPLETED,
            requested_at=REQUESTED,
            completed_at=REQUESTED + elapsed,
        )
        assert archive_display.get_duration(record) == expected
