"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. This is per-IP request throttling in
front of the domain cooldowns (verification resend, login lockout).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def _auth_limit() -> str:
    return get_settings().auth_rate_limit


# Single source of truth for the auth endpoints' limit (AUTH_RATE_LIMIT).
limit_auth = limiter.limit(_auth_limit)


def configure_limiter() -> Limiter:
    """Apply RATE_LIMIT_ENABLED to the shared limiter and return it."""
    limiter.enabled = get_settings().rate_limit_enabled
    return limiter
