"""Shared enumerations.

Cross-cutting enums used by application and infrastructure (token types,
session revocation reasons, login failure reasons). Domain lifecycle enums
(role, status, token purpose) live in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TokenType(_ValuesMixin, str, Enum):
    """Value of the `typ` claim in signed tokens."""

    ACCESS = "access"
    REFRESH = "refresh"


class SessionRevokeReason(_ValuesMixin, str, Enum):
    """Why a session stopped being usable (audit only)."""

    LOGOUT = "logout"
    LOGOUT_ALL = "logout_all"
    ROTATED = "rotated"
    PASSWORD_CHANGED = "password_changed"
    PASSWORD_RESET = "password_reset"
    REPLAY_DETECTED = "replay_detected"
    PRINCIPAL_SUSPENDED = "principal_suspended"
    PRINCIPAL_BANNED = "principal_banned"
    PRINCIPAL_DELETED = "principal_deleted"


class LoginFailureReason(_ValuesMixin, str, Enum):
    """Internal classification of a failed login. Never returned to clients."""

    UNKNOWN_IDENTIFIER = "unknown_identifier"
    BAD_PASSWORD = "bad_password"
    LOCKED = "locked"
    SUSPENDED = "suspended"
    EMAIL_NOT_VERIFIED = "email_not_verified"
