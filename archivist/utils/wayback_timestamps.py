"""Wayback Machine timestamp and URL helpers.

The Wayback Machine identifies every capture by a 14-digit UTC timestamp
``YYYYMMDDHHmmss``.  It shows up in archive URLs
(``https://web.archive.org/web/20230101120000/http://example.com``), in the
availability API, in CDX rows and in SPN2 job payloads.  This module turns
those strings into timezone-aware datetimes and back, and pulls them out of
archive URLs.

``format_wayback_timestamp(parse_wayback_timestamp(t)) == t`` holds for every
14-digit string that names a real calendar instant.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

WAYBACK_WEB_PREFIX = "https://web.archive.org/web"

_TIMESTAMP_RE = re.compile(r"^\d{14}$")
# Location headers and SPN bodies both embed the timestamp right after /web/.
_URL_TIMESTAMP_RE = re.compile(r"web\.archive\.org/web/(\d{14})")


def parse_wayback_timestamp(timestamp: str | None) -> datetime | None:
    """Parse ``YYYYMMDDHHmmss`` into a UTC datetime.

    Returns ``None`` for anything that is not exactly 14 digits or that does
    not name a valid calendar instant (e.g. month 13).
    """
    if not timestamp or not _TIMESTAMP_RE.match(timestamp):
        return None
    try:
        return datetime(
            int(timestamp[0:4]),
            int(timestamp[4:6]),
            int(timestamp[6:8]),
            int(timestamp[8:10]),
            int(timestamp[10:12]),
            int(timestamp[12:14]),
            tzinfo=timezone.utc,
        )
    except ValueError:
        return None


def format_wayback_timestamp(moment: datetime) -> str:
    """Format *moment* as a 14-digit UTC Wayback timestamp.

    Naive datetimes are taken to already be in UTC.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    # Explicit zero padding: strftime("%Y") does not pad years below 1000.
    return (
        f"{moment.year:04d}{moment.month:02d}{moment.day:02d}"
        f"{moment.hour:02d}{moment.minute:02d}{moment.second:02d}"
    )


def build_wayback_url(timestamp: str, original_url: str) -> str:
    """Return the replay URL for *original_url* captured at *timestamp*."""
    return f"{WAYBACK_WEB_PREFIX}/{timestamp}/{original_url}"


def extract_timestamp_from_url(archive_url: str | None) -> str | None:
    """Return the 14-digit capture timestamp embedded in an archive URL."""
    if not archive_url:
        return None
    match = _URL_TIMESTAMP_RE.search(archive_url)
    return match.group(1) if match else None


def to_iso_utc(moment: datetime) -> str:
    """Render *moment* as ``YYYY-MM-DDTHH:MM:SSZ`` (second precision, UTC)."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")
