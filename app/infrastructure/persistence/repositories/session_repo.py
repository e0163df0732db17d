"""Refresh-token session store (auth_session table).

Revocation is a conditional UPDATE on revoked_at IS NULL, so revoking an
already revoked session changes nothing and two concurrent rotations of the
same session cannot both succeed.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ColumnElement, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.session import SessionRecord
from app.infrastructure.persistence.models.auth_session import AuthSession
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import as_utc, ensure_utc


def _session_to_record(row: AuthSession) -> SessionRecord:
    return SessionRecord(
        id=row.id,
        principal_id=row.principal_id,
        family_id=row.family_id,
        token_hash=row.token_hash,
        expires_at=as_utc(row.expires_at),
        remember_me=row.remember_me,
        revoked_at=ensure_utc(row.revoked_at),
        revoked_reason=row.revoked_reason,
        last_used_at=ensure_utc(row.last_used_at),
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        created_at=ensure_utc(row.created_at),
    )


class SessionRepository(BaseRepository[AuthSession]):
    """ISessionRepository over SQLAlchemy."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, AuthSession)

    async def add(self, record: SessionRecord) -> SessionRecord:
        row = AuthSession(
            id=record.id,
            principal_id=record.principal_id,
            family_id=record.family_id,
            token_hash=record.token_hash,
            remember_me=record.remember_me,
            expires_at=record.expires_at,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
        )
        if record.created_at is not None:
            row.created_at = record.created_at
        return _session_to_record(await self.create(row))

    async def get_by_id(self, session_id: str) -> SessionRecord | None:  # type: ignore[override]
        row = await super().get_by_id(session_id)
        return _session_to_record(row) if row else None

    async def get_by_token_hash(self, token_hash: str) -> SessionRecord | None:
        result = await self.db.execute(
            select(AuthSession)
            .where(AuthSession.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _session_to_record(row) if row else None

    async def list_active_for_principal(
        self, principal_id: str, now: datetime
    ) -> list[SessionRecord]:
        result = await self.db.execute(
            select(AuthSession)
            .where(
                AuthSession.principal_id == principal_id,
                AuthSession.revoked_at.is_(None),
                AuthSession.expires_at > now,
            )
            .order_by(AuthSession.created_at.desc(), AuthSession.id)
            .execution_options(populate_existing=True)
        )
        return [_session_to_record(row) for row in result.scalars().all()]

    async def _revoke_where(
        self, criterion: ColumnElement[bool], now: datetime, reason: str
    ) -> int:
        result = await self.db.execute(
            update(AuthSession)
            .where(criterion, AuthSession.revoked_at.is_(None))
            .values(revoked_at=now, revoked_reason=reason)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def revoke(self, session_id: str, now: datetime, reason: str) -> bool:
        return await self._revoke_where(AuthSession.id == session_id, now, reason) == 1

    async def revoke_all_for_principal(
        self, principal_id: str, now: datetime, reason: str
    ) -> int:
        return await self._revoke_where(AuthSession.principal_id == principal_id, now, reason)

    async def revoke_family(self, family_id: str, now: datetime, reason: str) -> int:
        return await self._revoke_where(AuthSession.family_id == family_id, now, reason)

    async def touch(self, session_id: str, now: datetime) -> None:
        await self.db.execute(
            update(AuthSession)
            .where(AuthSession.id == session_id)
            .values(last_used_at=now)
            .execution_options(synchronize_session=False)
        )
