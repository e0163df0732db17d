"""End-to-end service flows over real repositories and a SQLite unit of work."""

import pytest

from app.application.services import AuthLifecycleService
from app.domain.exceptions import InvalidCredentialsException, InvalidTokenException
from app.infrastructure.persistence.repositories import (
    LoginAttemptRepository,
    PrincipalRepository,
    SessionRepository,
    VerificationTokenRepository,
)
from app.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from tests.fakes import FakePasswordHasher

PASSWORD = "correct horse battery"


@pytest.fixture
def service_for(policy, token_service, clock, notifier):
    """Build a service bound to one AsyncSession, as one request would."""

    def _make(session) -> AuthLifecycleService:
        return AuthLifecycleService(
            principal_repo=PrincipalRepository(session),
            session_repo=SessionRepository(session),
            verification_token_repo=VerificationTokenRepository(session),
            login_attempt_repo=LoginAttemptRepository(session),
            password_hasher=FakePasswordHasher(),
            token_service=token_service,
            notifier=notifier,
            uow=SqlAlchemyUnitOfWork(session),
            policy=policy,
            clock=clock,
        )

    return _make


async def test_join_refresh_and_replay_across_requests(session_factory, service_for) -> None:
    async with session_factory() as session:
        joined = await service_for(session).join("flow@example.com", PASSWORD)

    async with session_factory() as session:
        rotated = await service_for(session).refresh(joined.token.refresh)

    async with session_factory() as session:
        with pytest.raises(InvalidTokenException):
            await service_for(session).refresh(joined.token.refresh)

    # Family revocation was committed before the error surfaced.
    async with session_factory() as session:
        with pytest.raises(InvalidTokenException):
            await service_for(session).refresh(rotated.refresh)


async def test_failed_login_is_committed(session_factory, service_for) -> None:
    async with session_factory() as session:
        joined = await service_for(session).join("fail@example.com", PASSWORD)

    async with session_factory() as session:
        with pytest.raises(InvalidCredentialsException):
            await service_for(session).login("fail@example.com", "wrong password")

    async with session_factory() as session:
        history = await service_for(session).login_history(joined.principal.id)
        assert [a.failure_reason for a in history] == ["bad_password"]


async def test_email_verification_consumed_once(session_factory, service_for, notifier) -> None:
    async with session_factory() as session:
        await service_for(session).join("verify@example.com", PASSWORD)
    token = notifier.last_verification_token

    async with session_factory() as session:
        result = await service_for(session).confirm_email_verification(token)
        assert result.status == "verified"

    async with session_factory() as session:
        with pytest.raises(InvalidTokenException):
            await service_for(session).confirm_email_verification(token)
