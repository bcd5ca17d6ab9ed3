"""Public interface definitions for the external services archivist uses.

The lifecycle service talks to the archiving service and to record storage
only through the abstract base classes here; concrete adapters are built in
``archivist/main.py`` and injected.

CONCRETE PROVIDER MAP:
    Interface                  →  Concrete implementation (archivist/providers/)
    ─────────────────────────────────────────────────────────────────────
    IArchiveServiceProvider    →  WaybackArchiveProvider
    IArchiveStore              →  SQLiteArchiveStore
"""

from archivist.interfaces.archive_provider import (
    AvailabilityResult,
    CaptureOptions,
    IArchiveServiceProvider,
    JobStatusResult,
    SavePageResult,
    Snapshot,
)
from archivist.interfaces.archive_store import IArchiveStore

__all__ = [
    "AvailabilityResult",
    "CaptureOptions",
    "IArchiveServiceProvider",
    "IArchiveStore",
    "JobStatusResult",
    "SavePageResult",
    "Snapshot",
]
