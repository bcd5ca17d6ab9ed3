"""Display helpers for archive records.

Pure functions (no I/O) that derive what the UI shows for an
:class:`~archivist.models.archive.ArchiveRecord`: status flags, labels,
dates and human-readable durations.

The duration strings are deliberately not pluralisation-aware: a record
that took 90 seconds reads ``"1 minutes"``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from archivist.models.archive import NON_TERMINAL_STATUSES, ArchiveRecord, ArchiveStatus, utc_now
from archivist.utils.wayback_timestamps import parse_wayback_timestamp

_MS_PER_SECOND = 1000
_MS_PER_MINUTE = 60_000
_MS_PER_HOUR = 3_600_000
_MS_PER_DAY = 86_400_000

_STATUS_LABELS: dict[ArchiveStatus, str] = {
    ArchiveStatus.PENDING: "Pending",
    ArchiveStatus.PROCESSING: "Archiving...",
    ArchiveStatus.COMPLETED: "Archived",
    ArchiveStatus.FAILED: "Failed",
}

# Tailwind text/background class pairs used by the status badge.
_STATUS_COLORS: dict[ArchiveStatus, str] = {
    ArchiveStatus.PENDING: "text-yellow-600 bg-yellow-50",
    ArchiveStatus.PROCESSING: "text-blue-600 bg-blue-50",
    ArchiveStatus.COMPLETED: "text-green-600 bg-green-50",
    ArchiveStatus.FAILED: "text-red-600 bg-red-50",
}


def is_complete(record: ArchiveRecord) -> bool:
    return record.status == ArchiveStatus.COMPLETED and record.archive_url is not None


def is_pending(record: ArchiveRecord) -> bool:
    return record.status in NON_TERMINAL_STATUSES


def is_failed(record: ArchiveRecord) -> bool:
    return record.status == ArchiveStatus.FAILED


def can_retry(record: ArchiveRecord) -> bool:
    return record.status == ArchiveStatus.FAILED


def can_be_viewed_by(record: ArchiveRecord, user_id: str) -> bool:
    """Only the requesting user may see or act on a record."""
    return record.user_id == user_id


def get_archive_date(record: ArchiveRecord) -> datetime | None:
    """Return the capture time, reading either a Wayback or an ISO timestamp."""
    if not record.archive_timestamp:
        return None

    wayback_date = parse_wayback_timestamp(record.archive_timestamp)
    if wayback_date is not None:
        return wayback_date

    try:
        parsed = datetime.fromisoformat(record.archive_timestamp.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)  # noqa: UP017
    return parsed


def format_archive_date(record: ArchiveRecord) -> str | None:
    """Format the capture time like ``"Jan 1, 2023, 12:00 PM"`` (UTC)."""
    moment = get_archive_date(record)
    if moment is None:
        return None
    moment = moment.astimezone(timezone.utc)  # noqa: UP017
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment:%b} {moment.day}, {moment.year}, {hour:02d}:{moment:%M} {meridiem}"


def _elapsed_ms(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() * 1000)


def format_relative_request_time(record: ArchiveRecord, now: datetime | None = None) -> str:
    """Describe how long ago the archive was requested ("5m ago", "Yesterday")."""
    diff_ms = _elapsed_ms(record.requested_at, now or utc_now())
    minutes = diff_ms // _MS_PER_MINUTE
    hours = diff_ms // _MS_PER_HOUR
    days = diff_ms // _MS_PER_DAY

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days == 1:
        return "Yesterday"
    return f"{days} days ago"


def get_status_label(record: ArchiveRecord) -> str:
    return _STATUS_LABELS[record.status]


def get_status_color(record: ArchiveRecord) -> str:
    return _STATUS_COLORS[record.status]


def get_duration(record: ArchiveRecord) -> str | None:
    """How long the request took to reach a terminal state, or ``None`` if it hasn't."""
    if record.completed_at is None:
        return None

    duration_ms = _elapsed_ms(record.requested_at, record.completed_at)
    if duration_ms < _MS_PER_SECOND:
        return "Less than 1 second"
    if duration_ms < _MS_PER_MINUTE:
        return f"{duration_ms // _MS_PER_SECOND} seconds"
    if duration_ms < _MS_PER_HOUR:
        return f"{duration_ms // _MS_PER_MINUTE} minutes"
    return f"{duration_ms // _MS_PER_HOUR} hours"
