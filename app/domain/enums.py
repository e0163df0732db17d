"""Domain enumerations for the authentication lifecycle.

Enums represent fixed sets of domain values (principal role, account status,
verification token purpose).
"""

from enum import Enum


class PrincipalRole(str, Enum):
    """Role discriminant of an authenticatable principal."""

    GUEST = "guest"
    MEMBER = "member"
    MODERATOR = "moderator"
    ADMIN = "admin"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid role values as strings."""
        return [role.value for role in cls]


class PrincipalStatus(str, Enum):
    """Persisted account status.

    Soft deletion is tracked separately (deleted_at) so a deleted principal
    keeps the status it had when it was removed.
    """

    PENDING_VERIFICATION = "pending_verification"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings."""
        return [status.value for status in cls]


class LifecycleState(str, Enum):
    """Derived lifecycle state (status plus soft-delete marker)."""

    PENDING_VERIFICATION = "pending_verification"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"
    DELETED = "deleted"


class TokenPurpose(str, Enum):
    """What a single-use verification token authorizes."""

    EMAIL_VERIFY = "email_verify"
    PASSWORD_RESET = "password_reset"
