"""Unit tests for Wayback timestamp and URL helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from archivist.utils.wayback_timestamps import (
    build_wayback_url,
    extract_timestamp_from_url,
    format_wayback_timestamp,
    parse_wayback_timestamp,
    to_iso_utc,
)


class TestParseWaybackTimestamp:
    def test_parses_fourteen_digits_as_utc(self) -> None:
        parsed = parse_wayback_timestamp("20230101120000")
        assert parsed == datetime(2023, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_rejects_wrong_length(self) -> None:
        assert parse_wayback_timestamp("2023") is None
        assert parse_wayback_timestamp("202301011200000") is None

    def test_rejects_non_digits(self) -> None:
        assert parse_wayback_timestamp("2023010112000a") is None
        assert parse_wayback_timestamp("2023-01-01T12:00") is None

    def test_rejects_invalid_calendar_values(self) -> None:
        assert parse_wayback_timestamp("20231301120000") is None
        assert parse_wayback_timestamp("20230230120000") is None

    def test_none_and_empty(self) -> None:
        assert parse_wayback_timestamp(None) is None
        assert parse_wayback_timestamp("") is None


class TestFormatWaybackTimestamp:
    def test_zero_pads_every_field(self) -> None:
        moment = datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert format_wayback_timestamp(moment) == "20230102030405"

    def test_converts_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        moment = datetime(2023, 6, 1, 2, 30, 0, tzinfo=plus_two)
        assert format_wayback_timestamp(moment) == "20230601003000"

    def test_naive_is_treated_as_utc(self) -> None:
        assert format_wayback_timestamp(datetime(2020, 12, 31, 23, 59, 59)) == "20201231235959"

    def test_parse_inverts_format(self) -> None:
        moment = datetime(1999, 9, 9, 9, 9, 9, tzinfo=timezone.utc)
        assert parse_wayback_timestamp(format_wayback_timestamp(moment)) == moment


class TestWaybackUrls:
    def test_build_url(self) -> None:
        assert (
            build_wayback_url("20230101120000", "https://example.com/a")
            == "https://web.archive.org/web/20230101120000/https://example.com/a"
        )

    def test_extract_timestamp(self) -> None:
        url = "https://web.archive.org/web/20230101120000/https://example.com/a"
        assert extract_timestamp_from_url(url) == "20230101120000"

    def test_extract_timestamp_missing(self) -> None:
        assert extract_timestamp_from_url("https://example.com/a") is None
        assert extract_timestamp_from_url("https://web.archive.org/web/2023/https://x") is None
        assert extract_timestamp_from_url(None) is None

    def test_to_iso_utc(self) -> None:
        moment = datetime(2023, 1, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
        assert to_iso_utc(moment) == "2023-01-01T12:00:00Z"
