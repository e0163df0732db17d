"""Auth API: join, login, refresh, logout, passwords and email verification.

Routes only translate HTTP to AuthLifecycleService calls; errors are typed
domain exceptions mapped to status codes in app.core.exception_handlers.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from app.api.v1.dependencies import (
    PasswordResetJob,
    get_auth_service,
    get_client_info,
    get_current_principal,
    get_password_reset_job,
)
from app.application.dtos.auth import ClientInfo
from app.application.services import AuthLifecycleService
from app.application.services.auth_service import PASSWORD_RESET_ACK
from app.core.limiter import limit_auth
from app.domain.entities.principal import PrincipalEntity
from app.schemas.auth import (
    AckResponse,
    AuthorizedResponse,
    ChangePasswordRequest,
    EmailVerificationConfirmRequest,
    EmailVerificationRequest,
    EmailVerificationResponse,
    JoinRequest,
    LoginRequest,
    LogoutRequest,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    RefreshRequest,
    TokenPairResponse,
)
from app.schemas.principal import PrincipalResponse

router = APIRouter()

AuthService = Annotated[AuthLifecycleService, Depends(get_auth_service)]
Client = Annotated[ClientInfo, Depends(get_client_info)]
CurrentPrincipal = Annotated[PrincipalEntity, Depends(get_current_principal)]


def _no_store(response: Response) -> None:
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"


@router.post("/join", response_model=AuthorizedResponse, status_code=201)
@limit_auth
async def join(
    request: Request,
    response: Response,
    body: JoinRequest,
    auth_service: AuthService,
    client: Client,
):
    """Register a principal (pending email verification) and return its first token pair."""
    result = await auth_service.join(
        body.email,
        body.password,
        role=body.role,
        username=body.username,
        display_name=body.display_name,
        remember_me=body.remember_me,
        client=client,
    )
    _no_store(response)
    return AuthorizedResponse.model_validate(result, from_attributes=True)


@router.post("/guest/join", response_model=AuthorizedResponse, status_code=201)
@limit_auth
async def join_guest(
    request: Request,
    response: Response,
    auth_service: AuthService,
    client: Client,
):
    """Create an anonymous guest principal with its own session."""
    result = await auth_service.join_guest(client)
    _no_store(response)
    return AuthorizedResponse.model_validate(result, from_attributes=True)


@router.post("/login", response_model=AuthorizedResponse)
@limit_auth
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    auth_service: AuthService,
    client: Client,
):
    """Authenticate with email or username and password; return a token pair.

    Unknown accounts and wrong passwords yield the same 401.
    """
    result = await auth_service.login(
        body.identifier,
        body.password,
        role=body.role,
        remember_me=body.remember_me,
        client=client,
    )
    _no_store(response)
    return AuthorizedResponse.model_validate(result, from_attributes=True)


@router.post("/refresh", response_model=TokenPairResponse)
@limit_auth
async def refresh(
    request: Request,
    response: Response,
    body: RefreshRequest,
    auth_service: AuthService,
    client: Client,
):
    """Exchange a refresh token for a new pair (the old refresh token is rotated out)."""
    pair = await auth_service.refresh(body.refresh, client)
    _no_store(response)
    return TokenPairResponse.model_validate(pair, from_attributes=True)


@router.post("/logout", status_code=204)
async def logout(body: LogoutRequest, auth_service: AuthService) -> None:
    """Revoke the session behind the given refresh token."""
    await auth_service.logout(body.refresh)


@router.post("/logout-all", status_code=204)
async def logout_all(
    current_principal: CurrentPrincipal, auth_service: AuthService
) -> None:
    """Revoke every session of the authenticated principal."""
    await auth_service.logout_all(current_principal.id)


@router.get("/me", response_model=PrincipalResponse)
async def get_me(current_principal: CurrentPrincipal, auth_service: AuthService):
    """Return the authenticated principal. Requires Authorization: Bearer <access>."""
    profile = await auth_service.get_profile(current_principal.id)
    return PrincipalResponse.model_validate(profile)


@router.put("/password", response_model=AckResponse)
@limit_auth
async def change_password(
    request: Request,
    body: ChangePasswordRequest,
    current_principal: CurrentPrincipal,
    auth_service: AuthService,
):
    """Change password with the current one; signs out every session."""
    ack = await auth_service.change_password(
        current_principal.id, body.current_password, body.new_password
    )
    return AckResponse.model_validate(ack)


@router.post("/password-reset/request", response_model=AckResponse, status_code=202)
@limit_auth
async def request_password_reset(
    request: Request,
    body: PasswordResetRequest,
    background_tasks: BackgroundTasks,
    reset_job: Annotated[PasswordResetJob, Depends(get_password_reset_job)],
):
    """Send a reset link if the address belongs to an account. Response never says which.

    The lookup and token issue run after the response is sent, so known and
    unknown addresses answer in the same time.
    """
    background_tasks.add_task(reset_job, body.email, body.role)
    return AckResponse(message=PASSWORD_RESET_ACK)


@router.post("/password-reset/confirm", response_model=AckResponse)
@limit_auth
async def confirm_password_reset(
    request: Request, body: PasswordResetConfirmRequest, auth_service: AuthService
):
    """Set a new password with a reset token; signs out every session."""
    ack = await auth_service.confirm_password_reset(body.token, body.new_password)
    return AckResponse.model_validate(ack)


@router.post(
    "/email-verification/request", response_model=AckResponse, status_code=202
)
@limit_auth
async def request_email_verification(
    request: Request, body: EmailVerificationRequest, auth_service: AuthService
):
    """Resend the verification link (429 with Retry-After inside the cooldown)."""
    ack = await auth_service.request_email_verification(body.email, role=body.role)
    return AckResponse.model_validate(ack)


@router.post("/email-verification/confirm", response_model=EmailVerificationResponse)
@limit_auth
async def confirm_email_verification(
    request: Request, body: EmailVerificationConfirmRequest, auth_service: AuthService
):
    """Mark the email verified with the token from the verification link."""
    result = await auth_service.confirm_email_verification(body.token)
    return EmailVerificationResponse.model_validate(result)
