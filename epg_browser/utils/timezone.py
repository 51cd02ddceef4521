"""
Date and Time utilities

Timestamps stored in metadata use the same ISO8601 shape browsers produce
with Date.toISOString(): UTC, millisecond precision, 'Z' suffix.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_iso8601_utc(value: datetime) -> str:
    """
    Format a datetime as '2025-10-09T03:00:00.123Z'

    Naive datetimes are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
