"""Records for sessions, verification tokens and login attempts (no ORM)."""

from dataclasses import dataclass
from datetime import datetime

from app.domain.enums import PrincipalRole, TokenPurpose


@dataclass(frozen=True)
class SessionRecord:
    """One outstanding refresh capability. token_hash is SHA-256 of the refresh token."""

    id: str
    principal_id: str
    family_id: str
    token_hash: str
    expires_at: datetime
    remember_me: bool = False
    revoked_at: datetime | None = None
    revoked_reason: str | None = None
    last_used_at: datetime | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        """Usable for refresh iff not revoked and not expired."""
        return self.revoked_at is None and now < self.expires_at


@dataclass(frozen=True)
class VerificationTokenRecord:
    """Single-use email-verify / password-reset token (stored by hash)."""

    id: str
    principal_id: str
    purpose: TokenPurpose
    token_hash: str
    expires_at: datetime
    used_at: datetime | None = None
    superseded_at: datetime | None = None
    created_at: datetime | None = None

    def is_valid(self, now: datetime) -> bool:
        return (
            self.used_at is None
            and self.superseded_at is None
            and now < self.expires_at
        )


@dataclass(frozen=True)
class LoginAttemptRecord:
    """One login attempt (login history / security monitoring)."""

    id: str
    identifier: str
    role: PrincipalRole
    succeeded: bool
    principal_id: str | None = None
    failure_reason: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime | None = None
