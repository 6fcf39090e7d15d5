"""Timestamp utilities for UTC handling and ISO 8601 storage format.

Every datetime that enters the domain models or the database goes through
ensure_utc(); the database stores timestamps as ISO 8601 strings with a 'Z'
suffix (format_timestamp / parse_iso_datetime).
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Make a datetime timezone-aware UTC.

    Naive datetimes are taken to be UTC already; aware ones are converted.

    Example:
        >>> ensure_utc(datetime(2026, 3, 1, 12, 0)).tzinfo == timezone.utc
        True
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string into a UTC datetime.

    Accepts '2026-03-01T12:00:00Z', '2026-03-01T12:00:00.123456Z',
    '2026-03-01T12:00:00+01:00' and '2026-03-01'.

    Returns:
        Timezone-aware datetime in UTC, or None if the string is empty or
        not a recognizable timestamp
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        return None


def format_timestamp(dt: Optional[datetime], include_microseconds: bool = True) -> Optional[str]:
    """Format a datetime as an ISO 8601 UTC string with a 'Z' suffix.

    Example:
        >>> format_timestamp(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc), False)
        '2026-03-01T12:00:00Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return None
    if include_microseconds:
        return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")
