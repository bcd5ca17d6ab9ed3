"""Abstract base class for web-archiving service providers.

Defines the contract for asking a third-party archive (the Wayback Machine
being the only implementation today) whether a URL is already preserved,
requesting a new capture, polling an asynchronous capture job and listing
historical captures.  The adapter pattern keeps the archive lifecycle
service independent of the remote API's response shapes.

Every method reports failure through its return value.  Remote responses
are parsed defensively: all fields are treated as optional.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Literal


@dataclass(frozen=True)
class AvailabilityResult:
    """Outcome of an "is this URL already archived?" lookup.

    Attributes
    ----------
    available:
        ``True`` if the archive holds at least one usable snapshot.
    url:
        Replay URL of the closest snapshot.
    timestamp:
        14-digit capture timestamp of the closest snapshot.
    closest_snapshot:
        The raw snapshot payload returned by the service.
    """

    available: bool
    url: str | None = None
    timestamp: str | None = None
    closest_snapshot: dict[str, Any] | None = None


@dataclass(frozen=True)
class SavePageResult:
    """Outcome of a capture request.

    A finished capture sets ``archive_url``; an accepted-but-running capture
    sets only ``job_id``; a failure sets ``error``.
    """

    success: bool
    archive_url: str | None = None
    timestamp: str | None = None
    job_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class JobStatusResult:
    """State of an asynchronous capture job."""

    status: Literal["pending", "success", "error"]
    archive_url: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class Snapshot:
    """One historical capture of a URL."""

    timestamp: str
    url: str
    mime_type: str
    status_code: str


@dataclass(frozen=True)
class CaptureOptions:
    """Optional behaviours for an authenticated capture request."""

    capture_all: bool = False
    capture_outlinks: bool = False
    capture_screenshot: bool = False
    skip_first_archive: bool = False


class IArchiveServiceProvider(ABC):
    """Contract for services that preserve web pages.

    Used by the archive lifecycle service to check for, request and
    reconcile captures of article and source URLs.
    """

    @abstractmethod
    async def check_availability(self, url: str) -> AvailabilityResult:
        """Return whether a snapshot of *url* already exists.

        Never raises: transport errors and non-2xx responses degrade to
        ``AvailabilityResult(available=False)``.
        """

    @abstractmethod
    async def save_page(self, url: str) -> SavePageResult:
        """Request a new capture of *url* through the unauthenticated endpoint."""

    @abstractmethod
    async def save_page_v2(
        self,
        url: str,
        options: CaptureOptions | None = None,
    ) -> SavePageResult:
        """Request a capture through the authenticated endpoint.

        Parameters
        ----------
        url:
            The page to capture.
        options:
            Capture behaviours forwarded to the service.

        Returns
        -------
        SavePageResult
            Either a finished capture (``archive_url``), an accepted job
            (``job_id``) or an error.  Falls back to :meth:`save_page` when
            no credentials are configured.
        """

    @abstractmethod
    async def check_job_status(self, job_id: str) -> JobStatusResult:
        """Poll an asynchronous capture job started by :meth:`save_page_v2`."""

    @abstractmethod
    async def get_snapshots(
        self,
        url: str,
        *,
        from_: str | None = None,
        to: str | None = None,
        limit: int | None = None,
    ) -> list[Snapshot]:
        """List historical captures of *url*; ``[]`` on any failure."""

    @abstractmethod
    def has_credentials(self) -> bool:
        """Return ``True`` if authenticated endpoints can be used."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"wayback"``."""
