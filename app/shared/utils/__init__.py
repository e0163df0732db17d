"""Shared utilities: datetime/clock helpers and ID generators."""

from app.shared.utils.datetime import (
    Clock,
    SystemClock,
    as_utc,
    ensure_utc,
    from_timestamp_utc,
    to_iso8601,
    utc_now,
)
from app.shared.utils.generators import generate_cuid, generate_secure_token
from app.shared.utils.sanitization import strip_markup

__all__ = [
    "Clock",
    "SystemClock",
    "generate_cuid",
    "generate_secure_token",
    "strip_markup",
    "utc_now",
    "as_utc",
    "ensure_utc",
    "from_timestamp_utc",
    "to_iso8601",
]
