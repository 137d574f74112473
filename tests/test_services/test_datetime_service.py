"""Tests for timestamp formatting and parsing."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from backend.services.datetime_service import format_datetime, parse_datetime, timestamp


class TestFormat:
    def test_strict_format_in_utc(self) -> None:
        dt = datetime(2026, 2, 2, 22, 21, 29, 975359, tzinfo=timezone(timedelta(hours=2)))
        assert format_datetime(dt) == "2026-02-02 20:21:29.975359+0000"

    def test_naive_is_treated_as_utc(self) -> None:
        assert format_datetime(datetime(2026, 1, 1)) == "2026-01-01 00:00:00.000000+0000"

    def test_timestamps_sort_chronologically(self) -> None:
        earlier = format_datetime(datetime(2026, 1, 9, 23, tzinfo=UTC))
        later = format_datetime(datetime(2026, 1, 10, 1, tzinfo=UTC))
        assert earlier < later
        assert timestamp() > later


class TestParse:
    def test_date_only(self) -> None:
        result = parse_datetime("2026-02-02")
        assert (result.year, result.month, result.day, result.hour) == (2026, 2, 2, 0)
        assert result.tzinfo is not None

    def test_full_datetime(self) -> None:
        result = parse_datetime("2026-02-02T22:21:29+00:00")
        assert result.hour == 22
        assert result.minute == 21

    def test_default_timezone(self) -> None:
        result = parse_datetime("2026-02-02 10:30", default_tz="America/New_York")
        assert result.utcoffset() == timedelta(hours=-5)

    def test_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_datetime("not a date")
