"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only; no infrastructure
imports. Repositories never read the clock: callers pass `now`.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.session import (
        LoginAttemptRecord,
        SessionRecord,
        VerificationTokenRecord,
    )
    from app.domain.entities.principal import PrincipalEntity
    from app.domain.enums import PrincipalRole, PrincipalStatus, TokenPurpose


class IPrincipalRepository(Protocol):
    """Protocol for the credential store (principals)."""

    async def add(self, principal: PrincipalEntity) -> PrincipalEntity:
        """Insert a principal. Raises ConflictException on a uniqueness violation."""

    async def get_by_id(
        self, principal_id: str, *, include_deleted: bool = False
    ) -> PrincipalEntity | None:
        """Return principal by ID (non-deleted unless include_deleted)."""

    async def get_by_email(
        self, email_normalized: str, role: PrincipalRole
    ) -> PrincipalEntity | None:
        """Return the non-deleted principal with this normalized email in the role scope."""

    async def get_by_username(
        self, username_normalized: str, role: PrincipalRole
    ) -> PrincipalEntity | None:
        """Return the non-deleted principal with this normalized username in the role scope."""

    async def list(
        self,
        *,
        role: PrincipalRole | None = None,
        status: PrincipalStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[PrincipalEntity]:
        """Return non-deleted principals, newest first."""

    # Narrow writes. Each touches only the columns its operation owns and
    # returns False when the guarded row did not match (changed concurrently).

    async def record_failed_login(
        self,
        principal_id: str,
        now: datetime,
        *,
        threshold: int,
        window: timedelta,
        lock_duration: timedelta,
    ) -> datetime | None:
        """Atomically count a failure. Returns locked_until if this failure locked."""

    async def record_login(self, principal_id: str, now: datetime) -> bool:
        """Clear lockout counters and set last_login_at."""

    async def set_credential(
        self,
        principal_id: str,
        credential_hash: str,
        now: datetime,
        *,
        expected_hash: str,
        clear_lock: bool = False,
    ) -> bool:
        """Replace the credential only if it still equals expected_hash."""

    async def set_status(
        self,
        principal_id: str,
        status: PrincipalStatus,
        reason: str | None,
        now: datetime,
        *,
        expected: PrincipalStatus,
    ) -> bool:
        """Change status only if it still equals expected."""

    async def clear_lock(self, principal_id: str, now: datetime) -> bool:
        """Reset failed-login counters and any lock."""

    async def mark_email_verified(self, principal_id: str, now: datetime) -> bool:
        """Verify the email (pending_verification becomes active). False if already verified."""

    async def claim_verification_request(
        self, principal_id: str, now: datetime, cooldown: timedelta
    ) -> bool:
        """Stamp verification_requested_at unless a request is inside cooldown."""

    async def soft_delete(self, principal_id: str, now: datetime) -> bool:
        """Set deleted_at on a live principal."""


class ISessionRepository(Protocol):
    """Protocol for the refresh-token session registry store."""

    async def add(self, record: SessionRecord) -> SessionRecord:
        """Insert a session."""

    async def get_by_id(self, session_id: str) -> SessionRecord | None:
        """Return session by ID regardless of state."""

    async def get_by_token_hash(self, token_hash: str) -> SessionRecord | None:
        """Return session by refresh-token hash regardless of state."""

    async def list_active_for_principal(
        self, principal_id: str, now: datetime
    ) -> list[SessionRecord]:
        """Return unrevoked, unexpired sessions for principal, newest first."""

    async def revoke(self, session_id: str, now: datetime, reason: str) -> bool:
        """Revoke one session if not already revoked. Returns True if a row changed."""

    async def revoke_all_for_principal(
        self, principal_id: str, now: datetime, reason: str
    ) -> int:
        """Revoke every unrevoked session of principal. Returns count changed."""

    async def revoke_family(self, family_id: str, now: datetime, reason: str) -> int:
        """Revoke every unrevoked session in a rotation family. Returns count changed."""

    async def touch(self, session_id: str, now: datetime) -> None:
        """Record last use of a session."""


class IVerificationTokenRepository(Protocol):
    """Protocol for single-use verification token storage."""

    async def add(self, record: VerificationTokenRecord) -> VerificationTokenRecord:
        """Insert a token record."""

    async def get_by_token_hash(self, token_hash: str) -> VerificationTokenRecord | None:
        """Return token by hash regardless of state (diagnostics only)."""

    async def consume(
        self, token_hash: str, purpose: TokenPurpose, now: datetime
    ) -> VerificationTokenRecord | None:
        """Atomically mark a valid token used (conditional update).

        Returns the consumed record, or None when zero rows matched (unknown,
        wrong purpose, used, superseded or expired).
        """

    async def supersede_unused(
        self, principal_id: str, purpose: TokenPurpose, now: datetime
    ) -> int:
        """Invalidate every unused token of purpose for principal. Returns count changed."""


class ILoginAttemptRepository(Protocol):
    """Protocol for login history."""

    async def add(self, record: LoginAttemptRecord) -> LoginAttemptRecord:
        """Insert a login attempt."""

    async def list_for_principal(
        self, principal_id: str, skip: int = 0, limit: int = 50
    ) -> list[LoginAttemptRecord]:
        """Return attempts for principal, newest first."""
