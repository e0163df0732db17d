"""Single-use verification token store (verification_token table).

consume() is one conditional UPDATE: the token is marked used only if it is
still unused, not superseded and not expired. Zero rows affected means the
consumption failed, which makes double redemption impossible even under
concurrent requests.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.session import VerificationTokenRecord
from app.domain.enums import TokenPurpose
from app.infrastructure.persistence.models.verification_token import VerificationToken
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import as_utc, ensure_utc


def _token_to_record(row: VerificationToken) -> VerificationTokenRecord:
    return VerificationTokenRecord(
        id=row.id,
        principal_id=row.principal_id,
        purpose=TokenPurpose(row.purpose),
        token_hash=row.token_hash,
        expires_at=as_utc(row.expires_at),
        used_at=ensure_utc(row.used_at),
        superseded_at=ensure_utc(row.superseded_at),
        created_at=ensure_utc(row.created_at),
    )


class VerificationTokenRepository(BaseRepository[VerificationToken]):
    """IVerificationTokenRepository over SQLAlchemy."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, VerificationToken)

    async def add(self, record: VerificationTokenRecord) -> VerificationTokenRecord:
        row = VerificationToken(
            id=record.id,
            principal_id=record.principal_id,
            purpose=record.purpose.value,
            token_hash=record.token_hash,
            expires_at=record.expires_at,
        )
        if record.created_at is not None:
            row.created_at = record.created_at
        return _token_to_record(await self.create(row))

    async def get_by_token_hash(self, token_hash: str) -> VerificationTokenRecord | None:
        result = await self.db.execute(
            select(VerificationToken)
            .where(VerificationToken.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _token_to_record(row) if row else None

    async def consume(
        self, token_hash: str, purpose: TokenPurpose, now: datetime
    ) -> VerificationTokenRecord | None:
        result = await self.db.execute(
            update(VerificationToken)
            .where(
                VerificationToken.token_hash == token_hash,
                VerificationToken.purpose == purpose.value,
                VerificationToken.used_at.is_(None),
                VerificationToken.superseded_at.is_(None),
                VerificationToken.expires_at > now,
            )
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self.get_by_token_hash(token_hash)

    async def supersede_unused(
        self, principal_id: str, purpose: TokenPurpose, now: datetime
    ) -> int:
        result = await self.db.execute(
            update(VerificationToken)
            .where(
                VerificationToken.principal_id == principal_id,
                VerificationToken.purpose == purpose.value,
                VerificationToken.used_at.is_(None),
                VerificationToken.superseded_at.is_(None),
            )
            .values(superseded_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
