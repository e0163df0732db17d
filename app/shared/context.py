"""Request context management using contextvars.

Provides async-safe storage for request-scoped data (request ID, client IP,
user agent). Set by RequestIDMiddleware; read by the logging filter and by
endpoints that record session / login metadata.

Usage:
    set_request_context(request_id="abc", ip_address="10.0.0.1")
    request_id = get_request_id()
"""

from contextvars import ContextVar
from dataclasses import dataclass

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_ip_address: ContextVar[str | None] = ContextVar("ip_address", default=None)
_user_agent: ContextVar[str | None] = ContextVar("user_agent", default=None)


@dataclass(frozen=True)
class RequestContext:
    """Immutable snapshot of the current request context."""

    request_id: str | None
    ip_address: str | None = None
    user_agent: str | None = None


def set_request_context(
    request_id: str | None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Set the request context for the current async task.

    Args:
        request_id: Sanitized request ID (see RequestIDMiddleware).
        ip_address: Optional client IP.
        user_agent: Optional client user agent.
    """
    _request_id.set(request_id)
    _ip_address.set(ip_address)
    _user_agent.set(user_agent)


def clear_request_context() -> None:
    """Clear the request context."""
    _request_id.set(None)
    _ip_address.set(None)
    _user_agent.set(None)


def get_request_id() -> str | None:
    """Return the current request ID, or None outside a request."""
    return _request_id.get()


def get_request_context() -> RequestContext:
    """Return a snapshot of the current request context."""
    return RequestContext(
        request_id=_request_id.get(),
        ip_address=_ip_address.get(),
        user_agent=_user_agent.get(),
    )
