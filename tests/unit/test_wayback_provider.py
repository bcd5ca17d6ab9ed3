"""Unit tests for the Wayback Machine adapter.

The httpx client is an AsyncMock; responses are MagicMocks carrying just the
attributes the adapter reads (status_code, headers, text, json, reason_phrase).
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from archivist.interfaces.archive_provider import CaptureOptions
from archivist.providers.archive.wayback_provider import (
    RATE_LIMITED_MESSAGE,
    WaybackArchiveProvider,
    WaybackConfig,
)

PAGE_URL = "https://example.com/a"
CAPTURE_URL = "https://web.archive.org/web/20230101120000/https://example.com/a"
CREDENTIALS = WaybackConfig(access_key="key", secret_key="secret")


def _response(
    status_code: int = 200,
    *,
    json_data=None,  # noqa: ANN001
    text: str = "",
    headers: dict[str, str] | None = None,
    reason_phrase: str = "OK",
) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    response.reason_phrase = reason_phrase
    if isinstance(json_data, Exception):
        response.json = MagicMock(side_effect=json_data)
    else:
        response.json = MagicMock(return_value=json_data)
    return response


def _provider(config: WaybackConfig | None = None, **client_calls) -> tuple[WaybackArchiveProvider, AsyncMock]:  # noqa: ANN003
    client = AsyncMock()
    for name, value in client_calls.items():
        setattr(client, name, value)
    return WaybackArchiveProvider(config=config, http_client=client), client


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


class TestCheckAvailability:
    @pytest.mark.asyncio
    async def test_closest_snapshot_available(self) -> None:
        closest = {"available": True, "url": CAPTURE_URL, "timestamp": "20230101120000", "status": "200"}
        provider, client = _provider(
            get=AsyncMock(return_value=_response(json_data={"archived_snapshots": {"closest": closest}}))
        )

        result = await provider.check_availability(PAGE_URL)

        assert result.available is True
        assert result.url == CAPTURE_URL
        assert result.timestamp == "20230101120000"
        assert result.closest_snapshot == closest
        assert client.get.await_args.kwargs["params"] == {"url": PAGE_URL}

    @pytest.mark.asyncio
    async def test_no_snapshot(self) -> None:
        provider, _ = _provider(get=AsyncMock(return_value=_response(json_data={"archived_snapshots": {}})))
        result = await provider.check_availability(PAGE_URL)
        assert result.available is False
        assert result.url is None

    @pytest.mark.asyncio
    async def test_http_error_status_means_unavailable(self) -> None:
        provider, _ = _provider(get=AsyncMock(return_value=_response(503, json_data={})))
        assert (await provider.check_availability(PAGE_URL)).available is False

    @pytest.mark.asyncio
    async def test_transport_error_means_unavailable(self) -> None:
        provider, _ = _provider(get=AsyncMock(side_effect=httpx.ConnectError("refused")))
        assert (await provider.check_availability(PAGE_URL)).available is False

    @pytest.mark.asyncio
    async def test_bad_json_means_unavailable(self) -> None:
        provider, _ = _provider(get=AsyncMock(return_value=_response(json_data=ValueError("bad json"))))
        assert (await provider.check_availability(PAGE_URL)).available is False


# ---------------------------------------------------------------------------
# Save Page Now (anonymous)
# ---------------------------------------------------------------------------


class TestSavePage:
    @pytest.mark.asyncio
    async def test_redirect_to_capture(self) -> None:
        provider, client = _provider(
            get=AsyncMock(return_value=_response(302, headers={"location": CAPTURE_URL}))
        )

        result = await provider.save_page(PAGE_URL)

        assert result.success is True
        assert result.archive_url == CAPTURE_URL
        assert result.timestamp == "20230101120000"
        assert client.get.await_args.args[0] == f"https://web.archive.org/save/{PAGE_URL}"
        assert client.get.await_args.kwargs["follow_redirects"] is False

    @pytest.mark.asyncio
    async def test_rate_limited(self) -> None:
        provider, _ = _provider(get=AsyncMock(return_value=_response(429)))
        result = await provider.save_page(PAGE_URL)
        assert result.success is False
        assert result.error == RATE_LIMITED_MESSAGE

    @pytest.mark.asyncio
    async def test_other_http_failure(self) -> None:
        provider, _ = _provider(
            get=AsyncMock(return_value=_response(503, reason_phrase="Service Unavailable"))
        )
        result = await provider.save_page(PAGE_URL)
        assert result.success is False
        assert result.error == "HTTP 503: Service Unavailable"

    @pytest.mark.asyncio
    async def test_capture_url_embedded_in_body(self) -> None:
        body = f'<html><a href="{CAPTURE_URL}">view</a></html>'
        provider, _ = _provider(get=AsyncMock(return_value=_response(200, text=body)))

        result = await provider.save_page(PAGE_URL)

        assert result.success is True
        assert result.archive_url == CAPTURE_URL
        assert result.timestamp == "20230101120000"

    @pytest.mark.asyncio
    async def test_unparseable_body(self) -> None:
        provider, _ = _provider(get=AsyncMock(return_value=_response(200, text="<html>busy</html>")))
        result = await provider.save_page(PAGE_URL)
        assert result.success is False
        assert result.error == "Unable to parse archive response"

    @pytest.mark.asyncio
    async def test_transport_error_becomes_result(self) -> None:
        provider, _ = _provider(get=AsyncMock(side_effect=httpx.ReadTimeout("timed out")))
        result = await provider.save_page(PAGE_URL)
        assert result.success is False
        assert result.error == "timed out"

    @pytest.mark.asyncio
    async def test_invalid_url_becomes_result(self) -> None:
        provider, _ = _provider(
            get=AsyncMock(side_effect=httpx.InvalidURL("Invalid non-printable ASCII character in URL"))
        )
        result = await provider.save_page("https://example.com/\x07bell")
        assert result.success is False
        assert result.error == "Invalid non-printable ASCII character in URL"


# ---------------------------------------------------------------------------
# SPN2 (authenticated)
# ---------------------------------------------------------------------------


class TestSavePageV2:
    @pytest.mark.asyncio
    async def test_without_credentials_falls_back_to_get(self) -> None:
        provider, client = _provider(
            get=AsyncMock(return_value=_response(302, headers={"location": CAPTURE_URL})),
            post=AsyncMock(),
        )

        result = await provider.save_page_v2(PAGE_URL)

        assert result.success is True
        client.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_job_started(self) -> None:
        provider, client = _provider(
            CREDENTIALS,
            post=AsyncMock(return_value=_response(json_data={"url": PAGE_URL, "job_id": "spn2-abc"})),
        )

        result = await provider.save_page_v2(PAGE_URL, CaptureOptions(capture_outlinks=True))

        assert result.success is True
        assert result.job_id == "spn2-abc"
        assert result.archive_url is None
        kwargs = client.post.await_args.kwargs
        assert kwargs["data"] == {"url": PAGE_URL, "capture_outlinks": "1"}
        assert kwargs["headers"]["Authorization"] == "LOW key:secret"

    @pytest.mark.asyncio
    async def test_immediate_capture(self) -> None:
        provider, _ = _provider(
            CREDENTIALS,
            post=AsyncMock(
                return_value=_response(json_data={"url": PAGE_URL, "timestamp": "20230101120000"})
            ),
        )

        result = await provider.save_page_v2(PAGE_URL)

        assert result.success is True
        assert result.archive_url == CAPTURE_URL
        assert result.timestamp == "20230101120000"

    @pytest.mark.asyncio
    async def test_rate_limited(self) -> None:
        provider, _ = _provider(CREDENTIALS, post=AsyncMock(return_value=_response(429)))
        result = await provider.save_page_v2(PAGE_URL)
        assert result.error == RATE_LIMITED_MESSAGE

    @pytest.mark.asyncio
    async def test_error_message_from_body(self) -> None:
        provider, _ = _provider(
            CREDENTIALS,
            post=AsyncMock(return_value=_response(json_data={"message": "Invalid URL"})),
        )
        result = await provider.save_page_v2(PAGE_URL)
        assert result.success is False
        assert result.error == "Invalid URL"

    @pytest.mark.asyncio
    async def test_unknown_body(self) -> None:
        provider, _ = _provider(CREDENTIALS, post=AsyncMock(return_value=_response(json_data={})))
        result = await provider.save_page_v2(PAGE_URL)
        assert result.error == "Unknown error"


# ---------------------------------------------------------------------------
# Job status
# ---------------------------------------------------------------------------


class TestCheckJobStatus:
    @pytest.mark.asyncio
    async def test_requires_credentials(self) -> None:
        provider, client = _provider(get=AsyncMock())
        result = await provider.check_job_status("spn2-abc")
        assert result.status == "error"
        assert result.error == "Authentication required"
        client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        provider, client = _provider(
            CREDENTIALS,
            get=AsyncMock(
                return_value=_response(
                    json_data={"status": "success", "timestamp": "20230101120000", "original_url": PAGE_URL}
                )
            ),
        )

        result = await provider.check_job_status("spn2-abc")

        assert result.status == "success"
        assert result.archive_url == CAPTURE_URL
        assert client.get.await_args.args[0] == "https://web.archive.org/save/status/spn2-abc"

    @pytest.mark.asyncio
    async def test_pending(self) -> None:
        provider, _ = _provider(CREDENTIALS, get=AsyncMock(return_value=_response(json_data={"status": "pending"})))
        assert (await provider.check_job_status("spn2-abc")).status == "pending"

    @pytest.mark.asyncio
    async def test_error(self) -> None:
        provider, _ = _provider(
            CREDENTIALS,
            get=AsyncMock(return_value=_response(json_data={"status": "error", "message": "Blocked"})),
        )
        result = await provider.check_job_status("spn2-abc")
        assert result.status == "error"
        assert result.error == "Blocked"

    @pytest.mark.asyncio
    async def test_error_without_message(self) -> None:
        provider, _ = _provider(CREDENTIALS, get=AsyncMock(return_value=_response(json_data={"status": "error"})))
        assert (await provider.check_job_status("spn2-abc")).error == "Archive failed"


# ---------------------------------------------------------------------------
# CDX snapshots
# ---------------------------------------------------------------------------


class TestGetSnapshots:
    @pytest.mark.asyncio
    async def test_skips_header_row(self) -> None:
        rows = [
            ["timestamp", "original", "mimetype", "statuscode"],
            ["20230101120000", PAGE_URL, "text/html", "200"],
            ["20230615080000", PAGE_URL, "text/html", "301"],
        ]
        provider, client = _provider(get=AsyncMock(return_value=_response(json_data=rows)))

        snapshots = await provider.get_snapshots(PAGE_URL, from_="2023", to="2024", limit=10)

        assert [s.timestamp for s in snapshots] == ["20230101120000", "20230615080000"]
        assert snapshots[0].url == CAPTURE_URL
        assert snapshots[1].status_code == "301"
        params = client.get.await_args.kwargs["params"]
        assert params["from"] == "2023"
        assert params["to"] == "2024"
        assert params["limit"] == "10"
        assert params["output"] == "json"

    @pytest.mark.asyncio
    async def test_empty_on_failure(self) -> None:
        provider, _ = _provider(get=AsyncMock(side_effect=httpx.ConnectError("refused")))
        assert await provider.get_snapshots(PAGE_URL) == []

    @pytest.mark.asyncio
    async def test_empty_on_http_error(self) -> None:
        provider, _ = _provider(get=AsyncMock(return_value=_response(500, json_data=[])))
        assert await provider.get_snapshots(PAGE_URL) == []


class TestProviderMetadata:
    def test_credentials_and_name(self) -> None:
        anonymous, _ = _provider()
        authed, _ = _provider(CREDENTIALS)
        assert anonymous.has_credentials() is False
        assert authed.has_credentials() is True
        assert authed.get_provider_name() == "wayback"

    def test_partial_credentials_are_not_credentials(self) -> None:
        provider, _ = _provider(WaybackConfig(access_key="key"))
        assert provider.has_credentials() is False
