"""Session self-service API: list and revoke own sessions, own login history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import get_auth_service, get_current_principal
from app.application.services import AuthLifecycleService
from app.domain.entities.principal import PrincipalEntity
from app.schemas.session import LoginAttemptResponse, SessionResponse

router = APIRouter()


@router.get("/sessions", response_model=list[SessionResponse])
async def list_my_sessions(
    current_principal: Annotated[PrincipalEntity, Depends(get_current_principal)],
    auth_service: Annotated[AuthLifecycleService, Depends(get_auth_service)],
):
    """Active (unrevoked, unexpired) sessions of the authenticated principal."""
    sessions = await auth_service.list_sessions(current_principal.id)
    return [SessionResponse.model_validate(s) for s in sessions]


@router.delete("/sessions/{session_id}", status_code=204)
async def revoke_my_session(
    session_id: str,
    current_principal: Annotated[PrincipalEntity, Depends(get_current_principal)],
    auth_service: Annotated[AuthLifecycleService, Depends(get_auth_service)],
) -> None:
    """Sign out one device. 404 if the session belongs to someone else."""
    await auth_service.logout_session(current_principal.id, session_id)


@router.get("/login-history", response_model=list[LoginAttemptResponse])
async def my_login_history(
    current_principal: Annotated[PrincipalEntity, Depends(get_current_principal)],
    auth_service: Annotated[AuthLifecycleService, Depends(get_auth_service)],
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    """Most recent login attempts first."""
    attempts = await auth_service.login_history(
        current_principal.id, skip=skip, limit=limit
    )
    return [LoginAttemptResponse.model_validate(a) for a in attempts]
