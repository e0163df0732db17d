"""Principal administration API (moderators and admins).

Capabilities and the rank rule are enforced by PrincipalAdminService;
members and guests get 403.
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query

from app.api.v1.dependencies import get_admin_service
from app.application.services import PrincipalAdminService
from app.domain.enums import PrincipalRole, PrincipalStatus
from app.schemas.principal import PrincipalResponse, SanctionRequest
from app.schemas.session import LoginAttemptDetailResponse, SessionResponse

router = APIRouter()

AdminService = Annotated[PrincipalAdminService, Depends(get_admin_service)]


@router.get("", response_model=list[PrincipalResponse])
async def list_principals(
    admin_service: AdminService,
    role: PrincipalRole | None = None,
    status: PrincipalStatus | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """List principals (excluding deleted), optionally filtered by role and status."""
    principals = await admin_service.list_principals(
        role=role, status=status, skip=skip, limit=limit
    )
    return [PrincipalResponse.model_validate(p) for p in principals]


@router.get("/{principal_id}", response_model=PrincipalResponse)
async def get_principal(principal_id: str, admin_service: AdminService):
    return PrincipalResponse.model_validate(
        await admin_service.get_principal(principal_id)
    )


@router.get("/{principal_id}/sessions", response_model=list[SessionResponse])
async def list_principal_sessions(principal_id: str, admin_service: AdminService):
    sessions = await admin_service.list_sessions(principal_id)
    return [SessionResponse.model_validate(s) for s in sessions]


@router.get(
    "/{principal_id}/login-history", response_model=list[LoginAttemptDetailResponse]
)
async def principal_login_history(
    principal_id: str,
    admin_service: AdminService,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    attempts = await admin_service.login_history(principal_id, skip=skip, limit=limit)
    return [LoginAttemptDetailResponse.model_validate(a) for a in attempts]


@router.post("/{principal_id}/suspend", response_model=PrincipalResponse)
async def suspend_principal(
    principal_id: str,
    admin_service: AdminService,
    body: Annotated[SanctionRequest | None, Body()] = None,
):
    """Suspend the principal and revoke all of its sessions."""
    reason = body.reason if body else None
    return PrincipalResponse.model_validate(
        await admin_service.suspend(principal_id, reason)
    )


@router.post("/{principal_id}/ban", response_model=PrincipalResponse)
async def ban_principal(
    principal_id: str,
    admin_service: AdminService,
    body: Annotated[SanctionRequest | None, Body()] = None,
):
    """Ban the principal and revoke all of its sessions (admin only)."""
    reason = body.reason if body else None
    return PrincipalResponse.model_validate(await admin_service.ban(principal_id, reason))


@router.post("/{principal_id}/reinstate", response_model=PrincipalResponse)
async def reinstate_principal(principal_id: str, admin_service: AdminService):
    return PrincipalResponse.model_validate(await admin_service.reinstate(principal_id))


@router.post("/{principal_id}/unlock", response_model=PrincipalResponse)
async def unlock_principal(principal_id: str, admin_service: AdminService):
    """Clear a failed-login lock."""
    return PrincipalResponse.model_validate(await admin_service.unlock(principal_id))


@router.delete("/{principal_id}", status_code=204)
async def delete_principal(principal_id: str, admin_service: AdminService) -> None:
    """Soft-delete the principal and revoke all of its sessions."""
    await admin_service.delete(principal_id)
