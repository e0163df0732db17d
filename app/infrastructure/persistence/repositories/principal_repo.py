"""Principal repository (credential store) over SQLAlchemy.

Maps ORM rows to PrincipalEntity. Uniqueness of email / username per role is
enforced by partial unique indexes; IntegrityError becomes ConflictException
so concurrent joins are resolved by the store, not by a prior read.

There is no whole-row save. Each mutation is one UPDATE that writes only the
columns its operation owns, guarded by the state the caller expects (current
credential, current status, unverified email, elapsed cooldown). Counters are
incremented in SQL, so concurrent requests never overwrite each other with
values read earlier in the request.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import ColumnElement, case, literal, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.principal import PrincipalEntity
from app.domain.enums import PrincipalRole, PrincipalStatus
from app.domain.exceptions import ConflictException
from app.infrastructure.persistence.models.principal import Principal
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc

# Columns copied from the entity on insert.
_INSERT_FIELDS = (
    "role",
    "status",
    "status_reason",
    "email",
    "email_normalized",
    "username",
    "username_normalized",
    "display_name",
    "credential_hash",
    "email_verified",
    "failed_login_count",
    "failed_login_window_started_at",
    "locked_until",
    "last_login_at",
    "verification_requested_at",
    "updated_at",
    "deleted_at",
)

_CLEARED_LOCK: dict[str, Any] = {
    "failed_login_count": 0,
    "failed_login_window_started_at": None,
    "locked_until": None,
}


def _principal_to_entity(row: Principal) -> PrincipalEntity:
    """Map ORM Principal to domain entity (UTC-normalised datetimes)."""
    return PrincipalEntity(
        id=row.id,
        role=PrincipalRole(row.role),
        status=PrincipalStatus(row.status),
        email=row.email,
        email_normalized=row.email_normalized,
        username=row.username,
        username_normalized=row.username_normalized,
        display_name=row.display_name,
        credential_hash=row.credential_hash,
        email_verified=row.email_verified,
        status_reason=row.status_reason,
        failed_login_count=row.failed_login_count,
        failed_login_window_started_at=ensure_utc(row.failed_login_window_started_at),
        locked_until=ensure_utc(row.locked_until),
        last_login_at=ensure_utc(row.last_login_at),
        verification_requested_at=ensure_utc(row.verification_requested_at),
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
        deleted_at=ensure_utc(row.deleted_at),
    )


def _conflict(error: IntegrityError) -> ConflictException:
    field = "username" if "username" in str(error.orig).lower() else "email"
    return ConflictException(field)


class PrincipalRepository(BaseRepository[Principal]):
    """IPrincipalRepository over the principal table."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Principal)

    async def add(self, principal: PrincipalEntity) -> PrincipalEntity:
        row = Principal(id=principal.id)
        if principal.created_at is not None:
            row.created_at = principal.created_at
        for name in _INSERT_FIELDS:
            value = getattr(principal, name)
            if isinstance(value, PrincipalRole | PrincipalStatus):
                value = value.value
            if value is None and name == "updated_at":
                continue
            setattr(row, name, value)
        try:
            created = await self.create(row)
        except IntegrityError as e:
            raise _conflict(e) from e
        return _principal_to_entity(created)

    async def get_by_id(  # type: ignore[override]
        self, principal_id: str, *, include_deleted: bool = False
    ) -> PrincipalEntity | None:
        row = await super().get_by_id(principal_id)
        if row is None or (row.deleted_at is not None and not include_deleted):
            return None
        return _principal_to_entity(row)

    async def _get_one(self, *criteria: ColumnElement[bool]) -> PrincipalEntity | None:
        result = await self.db.execute(
            select(Principal)
            .where(*criteria, Principal.deleted_at.is_(None))
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _principal_to_entity(row) if row else None

    async def get_by_email(
        self, email_normalized: str, role: PrincipalRole
    ) -> PrincipalEntity | None:
        return await self._get_one(
            Principal.email_normalized == email_normalized,
            Principal.role == role.value,
        )

    async def get_by_username(
        self, username_normalized: str, role: PrincipalRole
    ) -> PrincipalEntity | None:
        return await self._get_one(
            Principal.username_normalized == username_normalized,
            Principal.role == role.value,
        )

    async def list(
        self,
        *,
        role: PrincipalRole | None = None,
        status: PrincipalStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[PrincipalEntity]:
        stmt = select(Principal).where(Principal.deleted_at.is_(None))
        if role is not None:
            stmt = stmt.where(Principal.role == role.value)
        if status is not None:
            stmt = stmt.where(Principal.status == status.value)
        stmt = stmt.order_by(Principal.created_at.desc(), Principal.id).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return [_principal_to_entity(row) for row in result.scalars().all()]

    # ---- Narrow writes ----

    async def _update(
        self, principal_id: str, *criteria: ColumnElement[bool], **values: Any
    ) -> bool:
        """Conditional UPDATE of one live principal. True if the row matched."""
        result = await self.db.execute(
            update(Principal)
            .where(Principal.id == principal_id, Principal.deleted_at.is_(None), *criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def record_failed_login(
        self,
        principal_id: str,
        now: datetime,
        *,
        threshold: int,
        window: timedelta,
        lock_duration: timedelta,
    ) -> datetime | None:
        """Count a failed password attempt; lock when threshold is reached in window.

        The window is measured from the first counted failure and restarts once
        it has elapsed. Both SET expressions read the pre-update row, and the
        row stays locked by this transaction until commit, so parallel failures
        are each counted exactly once.

        Returns:
            The new locked_until if this failure locked the account, else None.
        """
        window_start = Principal.failed_login_window_started_at
        window_elapsed = or_(window_start.is_(None), window_start < now - window)
        result = await self.db.execute(
            update(Principal)
            .where(Principal.id == principal_id, Principal.deleted_at.is_(None))
            .values(
                failed_login_count=case(
                    (window_elapsed, 1), else_=Principal.failed_login_count + 1
                ),
                failed_login_window_started_at=case(
                    (window_elapsed, literal(now, window_start.type)), else_=window_start
                ),
                updated_at=now,
            )
            .returning(Principal.failed_login_count)
            .execution_options(synchronize_session=False)
        )
        count = result.scalar_one_or_none()
        if count is None or count < threshold:
            return None
        locked_until = now + lock_duration
        locked = await self._update(
            principal_id,
            Principal.failed_login_count >= threshold,
            locked_until=locked_until,
            failed_login_count=0,
            failed_login_window_started_at=None,
            updated_at=now,
        )
        return locked_until if locked else None

    async def record_login(self, principal_id: str, now: datetime) -> bool:
        """Clear lockout counters and stamp last_login_at."""
        return await self._update(principal_id, last_login_at=now, updated_at=now, **_CLEARED_LOCK)

    async def set_credential(
        self,
        principal_id: str,
        credential_hash: str,
        now: datetime,
        *,
        expected_hash: str,
        clear_lock: bool = False,
    ) -> bool:
        """Replace the credential if it is still expected_hash (compare-and-set)."""
        values: dict[str, Any] = {"credential_hash": credential_hash, "updated_at": now}
        if clear_lock:
            values.update(_CLEARED_LOCK)
        return await self._update(
            principal_id, Principal.credential_hash == expected_hash, **values
        )

    async def set_status(
        self,
        principal_id: str,
        status: PrincipalStatus,
        reason: str | None,
        now: datetime,
        *,
        expected: PrincipalStatus,
    ) -> bool:
        """Move status from expected to status (compare-and-set)."""
        return await self._update(
            principal_id,
            Principal.status == expected.value,
            status=status.value,
            status_reason=reason,
            updated_at=now,
        )

    async def clear_lock(self, principal_id: str, now: datetime) -> bool:
        return await self._update(principal_id, updated_at=now, **_CLEARED_LOCK)

    async def mark_email_verified(self, principal_id: str, now: datetime) -> bool:
        """Set email_verified and leave pending_verification; other statuses are kept.

        Returns:
            False when the email was already verified.
        """
        pending = PrincipalStatus.PENDING_VERIFICATION.value
        return await self._update(
            principal_id,
            Principal.email_verified.is_(False),
            email_verified=True,
            status=case(
                (Principal.status == pending, PrincipalStatus.ACTIVE.value),
                else_=Principal.status,
            ),
            updated_at=now,
        )

    async def claim_verification_request(
        self, principal_id: str, now: datetime, cooldown: timedelta
    ) -> bool:
        """Stamp verification_requested_at unless the last request is inside cooldown."""
        requested_at = Principal.verification_requested_at
        return await self._update(
            principal_id,
            or_(requested_at.is_(None), requested_at <= now - cooldown),
            verification_requested_at=now,
            updated_at=now,
        )

    async def soft_delete(self, principal_id: str, now: datetime) -> bool:
        return await self._update(principal_id, deleted_at=now, updated_at=now)
