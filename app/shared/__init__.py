"""Shared utilities: request context, enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.context import (
    RequestContext,
    clear_request_context,
    get_request_context,
    get_request_id,
    set_request_context,
)
from app.shared.enums import LoginFailureReason, SessionRevokeReason, TokenType
from app.shared.utils import (
    Clock,
    SystemClock,
    ensure_utc,
    from_timestamp_utc,
    generate_cuid,
    generate_secure_token,
    to_iso8601,
    utc_now,
)

__all__ = [
    "RequestContext",
    "set_request_context",
    "clear_request_context",
    "get_request_id",
    "get_request_context",
    "LoginFailureReason",
    "SessionRevokeReason",
    "TokenType",
    "Clock",
    "SystemClock",
    "generate_cuid",
    "generate_secure_token",
    "utc_now",
    "ensure_utc",
    "from_timestamp_utc",
    "to_iso8601",
]
