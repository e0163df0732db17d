"""Session registry: server-side state of issued refresh tokens.

Stores only a digest of each refresh token. A refresh token is accepted only
when its digest resolves to a session that is neither revoked nor expired.
With rotation, every successful refresh revokes the presented session and
creates a successor in the same family; presenting a rotated token again is
treated as replay and revokes the whole family.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from app.application.dtos.auth import ClientInfo, IssuedToken
from app.application.dtos.session import SessionRecord
from app.application.interfaces.repositories import ISessionRepository
from app.application.interfaces.services import ITokenService
from app.application.services.hash_service import TokenHashService
from app.domain.exceptions import InvalidTokenException
from app.shared.enums import SessionRevokeReason
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import Clock
from app.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


class SessionRegistry:
    """Create, look up, rotate and revoke refresh-token sessions."""

    def __init__(
        self,
        session_repo: ISessionRepository,
        token_service: ITokenService,
        clock: Clock,
        hasher: TokenHashService | None = None,
    ) -> None:
        self._repo = session_repo
        self._tokens = token_service
        self._clock = clock
        self._hasher = hasher or TokenHashService()

    async def create(
        self,
        principal_id: str,
        ttl: timedelta,
        *,
        remember_me: bool = False,
        family_id: str | None = None,
        expires_at: datetime | None = None,
        client: ClientInfo | None = None,
    ) -> tuple[SessionRecord, IssuedToken]:
        """Create a session and sign its refresh token.

        Args:
            principal_id: Owner of the session.
            ttl: Lifetime from now (ignored when expires_at is given).
            remember_me: Recorded for display; ttl already reflects it.
            family_id: Rotation family; a new family starts when omitted.
            expires_at: Absolute expiry inherited by a rotated successor.
            client: Audit-only device metadata.

        Returns:
            The stored session and the raw refresh token (never persisted).
        """
        now = self._clock.now()
        session_id = generate_cuid()
        family = family_id or session_id
        expiry = expires_at or now + ttl
        refresh = self._tokens.issue_refresh_token(
            principal_id, session_id, family, expiry
        )
        client = client or ClientInfo()
        record = SessionRecord(
            id=session_id,
            principal_id=principal_id,
            family_id=family,
            token_hash=self._hasher.hash_token(refresh.token),
            expires_at=expiry,
            remember_me=remember_me,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
            created_at=now,
        )
        stored = await self._repo.add(record)
        return stored, refresh

    async def find_by_token(self, refresh_token: str) -> SessionRecord | None:
        """Return the session for refresh_token regardless of state."""
        return await self._repo.get_by_token_hash(self._hasher.hash_token(refresh_token))

    async def find_active_by_token(self, refresh_token: str) -> SessionRecord | None:
        """Return the session for refresh_token if it is usable, else None."""
        session = await self.find_by_token(refresh_token)
        if session is None or not session.is_active(self._clock.now()):
            return None
        return session

    async def get(self, session_id: str) -> SessionRecord | None:
        return await self._repo.get_by_id(session_id)

    async def list_active(self, principal_id: str) -> list[SessionRecord]:
        return await self._repo.list_active_for_principal(principal_id, self._clock.now())

    async def revoke(self, session_id: str, reason: SessionRevokeReason) -> bool:
        """Revoke one session. Already revoked is a no-op success (returns False)."""
        return await self._repo.revoke(session_id, self._clock.now(), reason.value)

    async def revoke_all_for_principal(
        self, principal_id: str, reason: SessionRevokeReason
    ) -> int:
        count = await self._repo.revoke_all_for_principal(
            principal_id, self._clock.now(), reason.value
        )
        if count:
            logger.info(
                "Revoked %d session(s) for principal %s (%s)",
                count,
                principal_id,
                reason.value,
            )
        return count

    async def revoke_family(self, family_id: str, reason: SessionRevokeReason) -> int:
        return await self._repo.revoke_family(family_id, self._clock.now(), reason.value)

    async def rotate(
        self, session: SessionRecord, client: ClientInfo | None = None
    ) -> tuple[SessionRecord, IssuedToken]:
        """Revoke session and create its successor in the same family.

        The successor keeps the original absolute expiry, so rotation never
        extends how long a login can be refreshed.

        Raises:
            InvalidTokenException: session was revoked concurrently.
        """
        now = self._clock.now()
        if not await self._repo.revoke(session.id, now, SessionRevokeReason.ROTATED.value):
            # Lost a race with a concurrent refresh of the same token.
            raise InvalidTokenException()
        return await self.create(
            session.principal_id,
            session.expires_at - now,
            remember_me=session.remember_me,
            family_id=session.family_id,
            expires_at=session.expires_at,
            client=client
            or ClientInfo(ip_address=session.ip_address, user_agent=session.user_agent),
        )

    async def touch(self, session_id: str) -> None:
        await self._repo.touch(session_id, self._clock.now())
