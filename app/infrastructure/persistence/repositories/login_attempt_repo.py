"""Login history store (login_attempt table). Append-only."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.session import LoginAttemptRecord
from app.domain.enums import PrincipalRole
from app.infrastructure.persistence.models.login_attempt import LoginAttempt
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc


def _attempt_to_record(row: LoginAttempt) -> LoginAttemptRecord:
    return LoginAttemptRecord(
        id=row.id,
        identifier=row.identifier,
        role=PrincipalRole(row.role),
        succeeded=row.succeeded,
        principal_id=row.principal_id,
        failure_reason=row.failure_reason,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        created_at=ensure_utc(row.created_at),
    )


class LoginAttemptRepository(BaseRepository[LoginAttempt]):
    """ILoginAttemptRepository over SQLAlchemy."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, LoginAttempt)

    async def add(self, record: LoginAttemptRecord) -> LoginAttemptRecord:
        row = LoginAttempt(
            id=record.id,
            principal_id=record.principal_id,
            identifier=record.identifier,
            role=record.role.value,
            succeeded=record.succeeded,
            failure_reason=record.failure_reason,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
        )
        if record.created_at is not None:
            row.created_at = record.created_at
        return _attempt_to_record(await self.create(row))

    async def list_for_principal(
        self, principal_id: str, skip: int = 0, limit: int = 50
    ) -> list[LoginAttemptRecord]:
        result = await self.db.execute(
            select(LoginAttempt)
            .where(LoginAttempt.principal_id == principal_id)
            .order_by(LoginAttempt.created_at.desc(), LoginAttempt.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return [_attempt_to_record(row) for row in result.scalars().all()]
