"""Staff administration of principals (suspend, ban, reinstate, unlock, delete).

Authorization is a lookup over the actor's role: the actor needs the
capability for the action and must strictly outrank the target. Sanctions
that block sign-in also revoke every session of the target in the same
commit, so refresh stops working immediately.
"""

from __future__ import annotations

from app.application.dtos.principal import PrincipalResult, principal_to_result
from app.application.dtos.session import LoginAttemptRecord, SessionRecord
from app.application.interfaces.repositories import (
    ILoginAttemptRepository,
    IPrincipalRepository,
    ISessionRepository,
)
from app.application.interfaces.services import IUnitOfWork
from app.domain.entities.principal import PrincipalEntity
from app.domain.enums import PrincipalRole, PrincipalStatus
from app.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.roles import Capability, has_capability, outranks
from app.shared.enums import SessionRevokeReason
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import Clock

logger = get_logger(__name__)


class PrincipalAdminService:
    """Administrative operations performed by actor on other principals."""

    def __init__(
        self,
        actor: PrincipalEntity,
        principal_repo: IPrincipalRepository,
        session_repo: ISessionRepository,
        login_attempt_repo: ILoginAttemptRepository,
        uow: IUnitOfWork,
        clock: Clock,
    ) -> None:
        self._actor = actor
        self._principals = principal_repo
        self._sessions = session_repo
        self._attempts = login_attempt_repo
        self._uow = uow
        self._clock = clock

    def _authorize(self, capability: Capability) -> None:
        if not has_capability(self._actor.role, capability):
            resource, _, action = capability.value.partition(":")
            raise AuthorizationException(resource=resource, action=action)

    async def _load_target(self, principal_id: str, capability: Capability) -> PrincipalEntity:
        """Authorize capability, load the target and enforce the rank rule."""
        self._authorize(capability)
        target = await self._principals.get_by_id(principal_id)
        if target is None:
            raise ResourceNotFoundException("principal", principal_id)
        if capability != Capability.PRINCIPAL_READ and not outranks(
            self._actor.role, target.role
        ):
            raise AuthorizationException(
                message="Cannot act on a principal of equal or higher role"
            )
        return target

    async def _revoke_sessions(self, principal_id: str, reason: SessionRevokeReason) -> int:
        return await self._sessions.revoke_all_for_principal(
            principal_id, self._clock.now(), reason.value
        )

    # ---- Reads ----

    async def get_principal(self, principal_id: str) -> PrincipalResult:
        target = await self._load_target(principal_id, Capability.PRINCIPAL_READ)
        return principal_to_result(target)

    async def list_principals(
        self,
        *,
        role: PrincipalRole | None = None,
        status: PrincipalStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[PrincipalResult]:
        self._authorize(Capability.PRINCIPAL_READ)
        principals = await self._principals.list(
            role=role, status=status, skip=skip, limit=limit
        )
        return [principal_to_result(p) for p in principals]

    async def list_sessions(self, principal_id: str) -> list[SessionRecord]:
        self._authorize(Capability.SESSION_READ)
        await self._load_target(principal_id, Capability.PRINCIPAL_READ)
        return await self._sessions.list_active_for_principal(principal_id, self._clock.now())

    async def login_history(
        self, principal_id: str, skip: int = 0, limit: int = 50
    ) -> list[LoginAttemptRecord]:
        self._authorize(Capability.SESSION_READ)
        await self._load_target(principal_id, Capability.PRINCIPAL_READ)
        return await self._attempts.list_for_principal(principal_id, skip=skip, limit=limit)

    # ---- Transitions ----

    async def suspend(self, principal_id: str, reason: str | None = None) -> PrincipalResult:
        """Suspend target and revoke its sessions. Banned principals cannot be suspended."""
        target = await self._load_target(principal_id, Capability.PRINCIPAL_SUSPEND)
        previous = target.status
        try:
            target.suspend(reason)
        except ValueError as e:
            raise ValidationException(str(e), field="status") from e
        return await self._save_sanction(target, previous, SessionRevokeReason.PRINCIPAL_SUSPENDED)

    async def ban(self, principal_id: str, reason: str | None = None) -> PrincipalResult:
        """Ban target and revoke its sessions."""
        target = await self._load_target(principal_id, Capability.PRINCIPAL_BAN)
        previous = target.status
        target.ban(reason)
        return await self._save_sanction(target, previous, SessionRevokeReason.PRINCIPAL_BANNED)

    async def _set_status(self, target: PrincipalEntity, previous: PrincipalStatus) -> None:
        """Persist target's new status if nobody changed it since it was loaded."""
        now = self._clock.now()
        target.updated_at = now
        if not await self._principals.set_status(
            target.id, target.status, target.status_reason, now, expected=previous
        ):
            raise ConflictException(
                "status", message="Principal was modified concurrently; reload and retry"
            )

    async def _save_sanction(
        self, target: PrincipalEntity, previous: PrincipalStatus, reason: SessionRevokeReason
    ) -> PrincipalResult:
        await self._set_status(target, previous)
        revoked = await self._revoke_sessions(target.id, reason)
        await self._uow.commit()
        logger.info(
            "Principal %s set to %s by %s; revoked %d session(s)",
            target.id,
            target.status.value,
            self._actor.id,
            revoked,
        )
        return principal_to_result(target)

    async def reinstate(self, principal_id: str) -> PrincipalResult:
        target = await self._load_target(principal_id, Capability.PRINCIPAL_REINSTATE)
        previous = target.status
        target.reinstate()
        if target.status != previous:
            await self._set_status(target, previous)
            await self._uow.commit()
        logger.info("Principal %s reinstated by %s", target.id, self._actor.id)
        return principal_to_result(target)

    async def unlock(self, principal_id: str) -> PrincipalResult:
        """Clear a failed-login lock before it elapses."""
        target = await self._load_target(principal_id, Capability.PRINCIPAL_UNLOCK)
        now = self._clock.now()
        target.unlock()
        target.updated_at = now
        await self._principals.clear_lock(target.id, now)
        await self._uow.commit()
        return principal_to_result(target)

    async def delete(self, principal_id: str) -> None:
        """Soft-delete target and revoke its sessions. Its email becomes reusable."""
        target = await self._load_target(principal_id, Capability.PRINCIPAL_DELETE)
        now = self._clock.now()
        target.soft_delete(now)
        if not await self._principals.soft_delete(target.id, now):
            raise ResourceNotFoundException("principal", target.id)
        await self._revoke_sessions(target.id, SessionRevokeReason.PRINCIPAL_DELETED)
        await self._uow.commit()
        logger.info("Principal %s deleted by %s", target.id, self._actor.id)
