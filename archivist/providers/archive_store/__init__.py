"""Archive-record persistence providers.

SQLiteArchiveStore keeps archive requests in data/archives.db and enforces
the one-in-flight-request-per-subject rule at insert time.
"""

from archivist.providers.archive_store.sqlite_archive_store import SQLiteArchiveStore

__all__ = ["SQLiteArchiveStore"]
