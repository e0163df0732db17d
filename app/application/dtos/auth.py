"""DTOs for authentication use cases (no dependency on ORM or HTTP)."""

from dataclasses import dataclass
from datetime import datetime

from app.application.dtos.principal import PrincipalResult
from app.domain.enums import PrincipalRole
from app.shared.enums import TokenType


@dataclass(frozen=True)
class ClientInfo:
    """Audit-only metadata about the calling device."""

    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class IssuedToken:
    """A freshly signed token and the instant it stops being valid."""

    token: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims of an access or refresh token."""

    subject: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    jti: str
    role: PrincipalRole | None = None
    session_id: str | None = None
    family_id: str | None = None


@dataclass(frozen=True)
class TokenPair:
    """Bearer credential returned to the client.

    expired_at is the access token expiry; refreshable_until is the expiry of
    the refresh token (and of its session).
    """

    access: str
    refresh: str
    expired_at: datetime
    refreshable_until: datetime


@dataclass(frozen=True)
class AuthResult:
    """Result of join/login: the principal and a fresh token pair."""

    principal: PrincipalResult
    token: TokenPair


@dataclass(frozen=True)
class AckResult:
    """Neutral acknowledgement (identical whether or not an account matched)."""

    message: str


@dataclass(frozen=True)
class EmailVerificationResult:
    """Outcome of confirming an email verification token."""

    status: str
    principal_id: str


EMAIL_VERIFIED = "verified"
EMAIL_ALREADY_VERIFIED = "already_verified"
