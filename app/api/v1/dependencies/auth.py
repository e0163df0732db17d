"""Auth service and bearer-token dependencies (composition root)."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api.v1.dependencies._composition import (
    get_auth_policy,
    get_clock,
    get_notifier,
    get_password_hasher,
    get_token_service,
)
from app.application.dtos.auth import ClientInfo
from app.application.interfaces.services import (
    IPasswordHasher,
    ITokenService,
    IVerificationNotifier,
)
from app.application.policy import AuthPolicy
from app.application.services import AuthLifecycleService, PrincipalAdminService
from app.domain.entities.principal import PrincipalEntity
from app.domain.enums import PrincipalRole
from app.domain.exceptions import InvalidTokenException
from app.infrastructure.persistence.database import get_db, get_session_factory
from app.infrastructure.persistence.repositories import (
    LoginAttemptRepository,
    PrincipalRepository,
    SessionRepository,
    VerificationTokenRepository,
)
from app.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from app.shared.context import get_request_context
from app.shared.utils.datetime import Clock

_http_bearer = HTTPBearer(auto_error=False)

PasswordResetJob = Callable[[str, PrincipalRole], Awaitable[None]]


def get_client_info() -> ClientInfo:
    """Client IP and user agent captured by RequestIDMiddleware."""
    ctx = get_request_context()
    return ClientInfo(ip_address=ctx.ip_address, user_agent=ctx.user_agent)


def _build_auth_service(
    db: AsyncSession,
    policy: AuthPolicy,
    clock: Clock,
    password_hasher: IPasswordHasher,
    token_service: ITokenService,
    notifier: IVerificationNotifier,
) -> AuthLifecycleService:
    return AuthLifecycleService(
        principal_repo=PrincipalRepository(db),
        session_repo=SessionRepository(db),
        verification_token_repo=VerificationTokenRepository(db),
        login_attempt_repo=LoginAttemptRepository(db),
        password_hasher=password_hasher,
        token_service=token_service,
        notifier=notifier,
        uow=SqlAlchemyUnitOfWork(db),
        policy=policy,
        clock=clock,
    )


async def get_auth_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    policy: Annotated[AuthPolicy, Depends(get_auth_policy)],
    clock: Annotated[Clock, Depends(get_clock)],
    password_hasher: Annotated[IPasswordHasher, Depends(get_password_hasher)],
    token_service: Annotated[ITokenService, Depends(get_token_service)],
    notifier: Annotated[IVerificationNotifier, Depends(get_notifier)],
) -> AuthLifecycleService:
    """Build AuthLifecycleService over the request's DB session."""
    return _build_auth_service(db, policy, clock, password_hasher, token_service, notifier)


async def get_password_reset_job(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    policy: Annotated[AuthPolicy, Depends(get_auth_policy)],
    clock: Annotated[Clock, Depends(get_clock)],
    password_hasher: Annotated[IPasswordHasher, Depends(get_password_hasher)],
    token_service: Annotated[ITokenService, Depends(get_token_service)],
    notifier: Annotated[IVerificationNotifier, Depends(get_notifier)],
) -> PasswordResetJob:
    """Password reset request to run as a background task, on its own DB session.

    The request session is closed by the time background tasks run.
    """

    async def run(email: str, role: PrincipalRole) -> None:
        async with session_factory() as db:
            service = _build_auth_service(
                db, policy, clock, password_hasher, token_service, notifier
            )
            await service.request_password_reset(email, role=role)

    return run


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    auth_service: Annotated[AuthLifecycleService, Depends(get_auth_service)],
) -> PrincipalEntity:
    """Return the principal behind the bearer access token; 401 if missing or invalid."""
    if credentials is None or not credentials.credentials:
        raise InvalidTokenException()
    return await auth_service.authenticate_access_token(credentials.credentials)


async def get_admin_service(
    actor: Annotated[PrincipalEntity, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> PrincipalAdminService:
    """Build PrincipalAdminService acting as the authenticated principal."""
    return PrincipalAdminService(
        actor=actor,
        principal_repo=PrincipalRepository(db),
        session_repo=SessionRepository(db),
        login_attempt_repo=LoginAttemptRepository(db),
        uow=SqlAlchemyUnitOfWork(db),
        clock=clock,
    )
