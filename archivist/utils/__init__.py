"""Utility modules for archivist.

- **errors** -- Exception hierarchy rooted at ArchivistError; each class
  declares the HTTP status the API answers with.
- **logging** -- structlog setup: coloured console output in development,
  JSON in production.
- **wayback_timestamps** -- 14-digit Wayback timestamp parsing/formatting
  and Wayback URL helpers.
- **archive_display** -- Pure functions deriving labels, dates and
  durations for an archive record.
- **task_executor** (not re-exported here) -- Fire-and-forget job
  submission used by the lifecycle service.
"""

from archivist.utils.errors import (
    ArchivistError,
    ConfigurationError,
    ConflictError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from archivist.utils.logging import configure_logging, get_logger
from archivist.utils.wayback_timestamps import (
    build_wayback_url,
    extract_timestamp_from_url,
    format_wayback_timestamp,
    parse_wayback_timestamp,
)

__all__ = [
    "ArchivistError",
    "ConfigurationError",
    "ConflictError",
    "NotAuthorizedError",
    "NotFoundError",
    "ValidationError",
    "build_wayback_url",
    "configure_logging",
    "extract_timestamp_from_url",
    "format_wayback_timestamp",
    "get_logger",
    "parse_wayback_timestamp",
]
