"""
UTC datetime utilities and the injectable clock.

All datetime values in the system are timezone-aware UTC. Services that
enforce TTLs take a Clock instead of calling datetime.now() directly so
expiry logic can be tested without real delays.
"""

from datetime import UTC, datetime
from typing import Protocol


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def as_utc(dt: datetime) -> datetime:
    """
    Return dt as a UTC-aware datetime.

    - If naive, assumes UTC and attaches timezone (SQLite returns naive values)
    - If aware, converts to UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure an optional datetime is UTC-aware (None stays None).

    Use at repository/persistence boundaries to normalize nullable columns.
    """
    if dt is None:
        return None
    return as_utc(dt)


def from_timestamp_utc(timestamp: float) -> datetime:
    """Create a UTC-aware datetime from a Unix timestamp (e.g. a JWT exp claim)."""
    return datetime.fromtimestamp(timestamp, tz=UTC)


def to_iso8601(dt: datetime) -> str:
    """Format a datetime as an ISO 8601 UTC string for the API boundary."""
    return as_utc(dt).isoformat()


class Clock(Protocol):
    """Source of the current time (UTC)."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC datetime."""


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return utc_now()
