"""Web-archiving providers.

WaybackArchiveProvider implements IArchiveServiceProvider against the
Internet Archive: availability lookups, Save Page Now (both the open GET
endpoint and the authenticated SPN2 API), job polling and CDX listings.
"""

from archivist.providers.archive.wayback_provider import WaybackArchiveProvider, WaybackConfig

__all__ = ["WaybackArchiveProvider", "WaybackConfig"]
