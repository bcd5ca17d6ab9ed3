"""Wayback Machine archiving provider.

Talks to four Internet Archive endpoints:

* ``archive.org/wayback/available``: is there already a snapshot?
* ``web.archive.org/save/<url>``: Save Page Now, unauthenticated.  Answers
  with a redirect to the finished capture, a 429, or an HTML page that may
  embed the capture URL.
* ``web.archive.org/save`` (POST) and ``/save/status/<job_id>``: SPN2,
  authenticated with an S3-style key pair; may answer with a job id that
  has to be polled.
* ``web.archive.org/cdx/search/cdx``: historical capture listing.

Rate limits are roughly 15 req/min authenticated and 5 req/min without.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from archivist.interfaces.archive_provider import (
    AvailabilityResult,
    CaptureOptions,
    IArchiveServiceProvider,
    JobStatusResult,
    SavePageResult,
    Snapshot,
)
from archivist.utils.wayback_timestamps import build_wayback_url, extract_timestamp_from_url

logger = structlog.get_logger(logger_name=__name__)

_AVAILABILITY_URL = "https://archive.org/wayback/available"
_SAVE_URL = "https://web.archive.org/save"
_CDX_URL = "https://web.archive.org/cdx/search/cdx"

DEFAULT_USER_AGENT = "archivist/0.1 (journalist archival tool)"
DEFAULT_TIMEOUT = 10.0

RATE_LIMITED_MESSAGE = "Rate limited. Please try again later."

_REDIRECT_STATUSES = frozenset({301, 302})
_EMBEDDED_ARCHIVE_URL_RE = re.compile(r"https://web\.archive\.org/web/\d{14}/[^\s\"<]+")


@dataclass(frozen=True)
class WaybackConfig:
    """Connection settings for the Wayback Machine.

    ``access_key``/``secret_key`` are archive.org S3-style keys; SPN2 and job
    polling are only used when both are present.
    """

    access_key: str = ""
    secret_key: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_key and self.secret_key)


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class WaybackArchiveProvider(IArchiveServiceProvider):
    """Internet Archive Wayback Machine adapter.

    Holds no mutable state beyond the HTTP client, so a single instance can
    be shared across requests.
    """

    def __init__(
        self,
        config: WaybackConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or WaybackConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout),
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _headers(self, *, authenticated: bool = False) -> dict[str, str]:
        headers = {"User-Agent": self._config.user_agent}
        if authenticated:
            headers["Authorization"] = f"LOW {self._config.access_key}:{self._config.secret_key}"
        return headers

    @staticmethod
    def _error_text(exc: Exception) -> str:
        return str(exc) or type(exc).__name__

    # ------------------------------------------------------------------
    # IArchiveServiceProvider implementation
    # ------------------------------------------------------------------

    async def check_availability(self, url: str) -> AvailabilityResult:
        try:
            response = await self._client.get(
                _AVAILABILITY_URL,
                params={"url": url},
                headers=self._headers(),
            )
            if not _is_success(response.status_code):
                return AvailabilityResult(available=False)
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("wayback_availability_error", url=url, error=str(exc))
            return AvailabilityResult(available=False)

        snapshots = data.get("archived_snapshots") if isinstance(data, dict) else None
        closest = snapshots.get("closest") if isinstance(snapshots, dict) else None
        if isinstance(closest, dict) and closest.get("available"):
            return AvailabilityResult(
                available=True,
                url=closest.get("url"),
                timestamp=closest.get("timestamp"),
                closest_snapshot=closest,
            )
        return AvailabilityResult(available=False)

    async def save_page(self, url: str) -> SavePageResult:
        try:
            response = await self._client.get(
                f"{_SAVE_URL}/{url}",
                headers=self._headers(),
                follow_redirects=False,
            )

            # SPN redirects straight to the finished capture.
            if response.status_code in _REDIRECT_STATUSES:
                archive_url = response.headers.get("location")
                if archive_url:
                    logger.info("wayback_save_redirected", url=url, archive_url=archive_url)
                    return SavePageResult(
                        success=True,
                        archive_url=archive_url,
                        timestamp=extract_timestamp_from_url(archive_url),
                    )

            if response.status_code == 429:
                logger.warning("wayback_save_rate_limited", url=url)
                return SavePageResult(success=False, error=RATE_LIMITED_MESSAGE)

            if not _is_success(response.status_code):
                return SavePageResult(
                    success=False,
                    error=f"HTTP {response.status_code}: {response.reason_phrase}",
                )

            match = _EMBEDDED_ARCHIVE_URL_RE.search(response.text)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("wayback_save_error", url=url, error=str(exc))
            return SavePageResult(success=False, error=self._error_text(exc))

        if match:
            archive_url = match.group(0)
            return SavePageResult(
                success=True,
                archive_url=archive_url,
                timestamp=extract_timestamp_from_url(archive_url),
            )
        return SavePageResult(success=False, error="Unable to parse archive response")

    async def save_page_v2(
        self,
        url: str,
        options: CaptureOptions | None = None,
    ) -> SavePageResult:
        if not self.has_credentials():
            return await self.save_page(url)

        options = options or CaptureOptions()
        form: dict[str, str] = {"url": url}
        if options.capture_all:
            form["capture_all"] = "1"
        if options.capture_outlinks:
            form["capture_outlinks"] = "1"
        if options.capture_screenshot:
            form["capture_screenshot"] = "1"
        if options.skip_first_archive:
            form["skip_first_archive"] = "1"

        try:
            response = await self._client.post(
                _SAVE_URL,
                data=form,
                headers=self._headers(authenticated=True),
            )
            if response.status_code == 429:
                logger.warning("wayback_spn2_rate_limited", url=url)
                return SavePageResult(success=False, error=RATE_LIMITED_MESSAGE)
            data: Any = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("wayback_spn2_error", url=url, error=str(exc))
            return SavePageResult(success=False, error=self._error_text(exc))

        if not isinstance(data, dict):
            return SavePageResult(success=False, error="Unknown error")

        if data.get("job_id"):
            logger.info("wayback_spn2_job_started", url=url, job_id=data["job_id"])
            return SavePageResult(success=True, job_id=str(data["job_id"]))

        if data.get("url") and data.get("timestamp"):
            timestamp = str(data["timestamp"])
            return SavePageResult(
                success=True,
                archive_url=build_wayback_url(timestamp, data["url"]),
                timestamp=timestamp,
            )

        return SavePageResult(success=False, error=data.get("message") or "Unknown error")

    async def check_job_status(self, job_id: str) -> JobStatusResult:
        if not self.has_credentials():
            return JobStatusResult(status="error", error="Authentication required")

        try:
            response = await self._client.get(
                f"{_SAVE_URL}/status/{job_id}",
                headers=self._headers(authenticated=True),
            )
            data: Any = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("wayback_job_status_error", job_id=job_id, error=str(exc))
            return JobStatusResult(status="error", error=self._error_text(exc))

        if not isinstance(data, dict):
            return JobStatusResult(status="error", error="Archive failed")

        status = data.get("status")
        if status == "success" and data.get("timestamp") and data.get("original_url"):
            return JobStatusResult(
                status="success",
                archive_url=build_wayback_url(str(data["timestamp"]), data["original_url"]),
            )
        if status == "pending":
            return JobStatusResult(status="pending")
        return JobStatusResult(status="error", error=data.get("message") or "Archive failed")

    async def get_snapshots(
        self,
        url: str,
        *,
        from_: str | None = None,
        to: str | None = None,
        limit: int | None = None,
    ) -> list[Snapshot]:
        params: dict[str, str] = {
            "url": url,
            "output": "json",
            "fl": "timestamp,original,mimetype,statuscode",
            "collapse": "timestamp:8",
        }
        if from_:
            params["from"] = from_
        if to:
            params["to"] = to
        if limit:
            params["limit"] = str(limit)

        try:
            response = await self._client.get(_CDX_URL, params=params, headers=self._headers())
            if not _is_success(response.status_code):
                return []
            rows = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("wayback_cdx_error", url=url, error=str(exc))
            return []

        if not isinstance(rows, list):
            return []

        # First row is the column header.
        snapshots: list[Snapshot] = []
        for row in rows[1:]:
            if not isinstance(row, list) or len(row) < 4:
                continue
            timestamp, original, mime_type, status_code = (str(v) for v in row[:4])
            snapshots.append(
                Snapshot(
                    timestamp=timestamp,
                    url=build_wayback_url(timestamp, original),
                    mime_type=mime_type,
                    status_code=status_code,
                )
            )
        return snapshots

    def has_credentials(self) -> bool:
        return self._config.has_credentials

    def get_provider_name(self) -> str:
        return "wayback"
