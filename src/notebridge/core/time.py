"""Time utilities.

Rows store naive UTC datetimes (SQLite drops tzinfo), API payloads carry
timezone-aware ISO 8601 strings.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def utc_now_naive() -> datetime:
    """Get current UTC time as naive datetime (for DB compatibility)."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive input is assumed UTC."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(UTC).replace(tzinfo=None)


def format_iso(dt: datetime | None) -> str | None:
    """Format a stored datetime as an ISO string with an explicit UTC offset."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat()
