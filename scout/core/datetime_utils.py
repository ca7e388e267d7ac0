"""Centralized datetime utilities for consistent timezone handling.

All functions return naive UTC datetimes for database compatibility
(SQLAlchemy models store naive UTC).

Usage:
    from scout.core.datetime_utils import utc_now, get_cutoff, parse_iso_datetime

    now = utc_now()
    since = get_cutoff(days=job.lookback_days)
    published = parse_iso_datetime("2024-03-01T12:00:00Z")
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """Get current UTC time as naive datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def get_cutoff(hours: int = 0, days: int = 0) -> datetime:
    """Get cutoff datetime for filtering queries.

    Args:
        hours: Hours to subtract from now
        days: Days to subtract from now

    Returns:
        Naive UTC datetime representing the cutoff point
    """
    delta = timedelta(hours=hours, days=days)
    return utc_now() - delta


def to_naive_utc(dt: datetime) -> datetime:
    """Convert a datetime to naive UTC.

    Args:
        dt: Datetime to convert (can be aware or naive)

    Returns:
        Naive UTC datetime for database compatibility
    """
    if dt.tzinfo is None:
        # Already naive, assume it's UTC
        return dt
    return dt.astimezone(UTC).replace(tzinfo=None)


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp as returned by platform APIs.

    Accepts a trailing "Z" and returns naive UTC, or None when the value is
    missing or unparseable.
    """
    if not value:
        return None
    try:
        return to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return None


def to_iso(dt: datetime | None) -> str | None:
    """Serialize a naive UTC datetime as ISO 8601 with a Z suffix."""
    if dt is None:
        return None
    return dt.replace(microsecond=0).isoformat() + "Z"
