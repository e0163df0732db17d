"""Service interfaces (ports) for the application layer.

Protocols define contracts for hashing, token signing, notification delivery
and transaction control (DIP).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.auth import IssuedToken, TokenClaims
    from app.domain.enums import PrincipalRole
    from app.shared.enums import TokenType


class IPasswordHasher(Protocol):
    """Opaque one-way hash + verify. Nothing else may inspect a credential hash."""

    def hash(self, plaintext: str) -> str:
        """Return a salted adaptive hash of plaintext."""

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return True if plaintext matches hashed; False on mismatch or malformed hash."""

    def dummy_hash(self) -> str:
        """Return a valid hash of a throwaway secret (timing mitigation for unknown accounts)."""


class ITokenService(Protocol):
    """Signed, time-bounded access and refresh tokens."""

    def issue_access_token(self, principal_id: str, role: PrincipalRole) -> IssuedToken:
        """Sign a short-lived access token carrying principal id and role."""

    def issue_refresh_token(
        self,
        principal_id: str,
        session_id: str,
        family_id: str,
        expires_at: datetime,
    ) -> IssuedToken:
        """Sign a refresh token bound to a session."""

    def verify(self, token: str, expected_type: TokenType | None = None) -> TokenClaims:
        """Verify signature, issuer, type and expiry. Raises InvalidTokenException."""


class IVerificationNotifier(Protocol):
    """Delivers verification and reset links (email delivery is external)."""

    async def send_email_verification(
        self, email: str, token: str, expires_at: datetime
    ) -> None:
        """Deliver an email-verification token."""

    async def send_password_reset(
        self, email: str, token: str, expires_at: datetime
    ) -> None:
        """Deliver a password-reset token."""


class IUnitOfWork(Protocol):
    """Transaction boundary owned by the application service."""

    async def commit(self) -> None:
        """Commit all pending changes atomically."""

    async def rollback(self) -> None:
        """Discard pending changes."""
