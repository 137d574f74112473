"""Timestamps for stored content: lax input, strict output."""

from __future__ import annotations

from datetime import UTC, datetime

import pendulum

# Strict storage format: YYYY-MM-DD HH:MM:SS.ffffff+HHMM. Lexical order matches
# chronological order for UTC values, which history filtering relies on.
STRICT_FORMAT = "%Y-%m-%d %H:%M:%S.%f%z"


def now_utc() -> datetime:
    return datetime.now(UTC)


def format_datetime(dt: datetime) -> str:
    """Format a datetime in UTC using the strict storage format."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).strftime(STRICT_FORMAT)


def timestamp() -> str:
    """Current time in the strict storage format."""
    return format_datetime(now_utc())


def parse_datetime(value: str, default_tz: str = "UTC") -> datetime:
    """Parse a lax date or datetime string into an aware datetime.

    Accepts ISO 8601 variants and date-only strings; missing time components
    default to midnight in ``default_tz``. Raises ``ValueError`` on garbage.
    """
    try:
        parsed = pendulum.parse(value.strip(), tz=default_tz, strict=False)
    except ValueError as exc:
        msg = f"Invalid date or datetime: '{value}'"
        raise ValueError(msg) from exc
    if not isinstance(parsed, pendulum.DateTime):
        if not isinstance(parsed, pendulum.Date):
            msg = f"Expected a date or datetime, got '{value}'"
            raise ValueError(msg)
        parsed = pendulum.datetime(parsed.year, parsed.month, parsed.day, tz=default_tz)
    return parsed
