"""Pytest configuration and fixtures for the auth lifecycle service.

Env is set before any app import so get_settings() validates against test
values. Service tests run against in-memory fakes (tests.fakes); repository
and HTTP tests run against an in-memory SQLite database (aiosqlite).
"""

import os

os.environ["SECRET_KEY"] = "test-secret-key-for-pytest-only-0123456789abcdef"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

from collections.abc import AsyncIterator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.v1.dependencies import get_password_hasher  # noqa: E402
from app.application.policy import AuthPolicy  # noqa: E402
from app.application.services import (  # noqa: E402
    AuthLifecycleService,
    PrincipalAdminService,
)
from app.core.config import get_settings  # noqa: E402
from app.domain.entities.principal import PrincipalEntity  # noqa: E402
from app.domain.enums import PrincipalRole, PrincipalStatus  # noqa: E402
from app.infrastructure.persistence import models  # noqa: E402,F401
from app.infrastructure.persistence.database import (  # noqa: E402
    Base,
    get_db,
    get_session_factory,
)
from app.infrastructure.security import JWTTokenService  # noqa: E402
from app.main import app  # noqa: E402
from app.shared.utils.generators import generate_cuid  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeClock,
    FakePasswordHasher,
    FakeUnitOfWork,
    InMemoryLoginAttemptRepository,
    InMemoryPrincipalRepository,
    InMemorySessionRepository,
    InMemoryVerificationTokenRepository,
    RecordingNotifier,
)

TEST_SECRET = "unit-test-signing-secret-0123456789abcdef"


# ---- Service fixtures (in-memory ports) ----


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def policy() -> AuthPolicy:
    """Default policy: 1h access, 7d/30d refresh, lock after 5 failures in 15 min."""
    return AuthPolicy(signing_secret=TEST_SECRET)


@pytest.fixture
def token_service(policy: AuthPolicy, clock: FakeClock) -> JWTTokenService:
    return JWTTokenService(policy, clock)


@pytest.fixture
def password_hasher() -> FakePasswordHasher:
    return FakePasswordHasher()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def uow() -> FakeUnitOfWork:
    return FakeUnitOfWork()


@pytest.fixture
def principal_repo() -> InMemoryPrincipalRepository:
    return InMemoryPrincipalRepository()


@pytest.fixture
def session_repo() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def token_repo() -> InMemoryVerificationTokenRepository:
    return InMemoryVerificationTokenRepository()


@pytest.fixture
def attempt_repo() -> InMemoryLoginAttemptRepository:
    return InMemoryLoginAttemptRepository()


@pytest.fixture
def make_auth_service(
    principal_repo: InMemoryPrincipalRepository,
    session_repo: InMemorySessionRepository,
    token_repo: InMemoryVerificationTokenRepository,
    attempt_repo: InMemoryLoginAttemptRepository,
    password_hasher: FakePasswordHasher,
    token_service: JWTTokenService,
    notifier: RecordingNotifier,
    uow: FakeUnitOfWork,
    clock: FakeClock,
):
    """Factory so a test can swap the policy while sharing the same stores."""

    def _make(policy: AuthPolicy) -> AuthLifecycleService:
        return AuthLifecycleService(
            principal_repo=principal_repo,
            session_repo=session_repo,
            verification_token_repo=token_repo,
            login_attempt_repo=attempt_repo,
            password_hasher=password_hasher,
            token_service=token_service,
            notifier=notifier,
            uow=uow,
            policy=policy,
            clock=clock,
        )

    return _make


@pytest.fixture
def auth_service(make_auth_service, policy: AuthPolicy) -> AuthLifecycleService:
    return make_auth_service(policy)


@pytest.fixture
def add_principal(principal_repo: InMemoryPrincipalRepository, clock: FakeClock):
    """Insert a principal directly (e.g. staff accounts that cannot self-register)."""

    async def _add(
        role: PrincipalRole = PrincipalRole.MEMBER,
        *,
        email: str | None = None,
        password: str = "correct horse battery",
        status: PrincipalStatus = PrincipalStatus.ACTIVE,
        email_verified: bool = True,
    ) -> PrincipalEntity:
        pid = generate_cuid()
        email = email or f"{role.value}-{pid[:8]}@example.com"
        return await principal_repo.add(
            PrincipalEntity(
                id=pid,
                role=role,
                status=status,
                email=email,
                email_normalized=email.casefold(),
                credential_hash=f"fake${password}",
                email_verified=email_verified,
                created_at=clock.now(),
                updated_at=clock.now(),
            )
        )

    return _add


@pytest.fixture
def make_admin_service(
    principal_repo: InMemoryPrincipalRepository,
    session_repo: InMemorySessionRepository,
    attempt_repo: InMemoryLoginAttemptRepository,
    uow: FakeUnitOfWork,
    clock: FakeClock,
):
    def _make(actor: PrincipalEntity) -> PrincipalAdminService:
        return PrincipalAdminService(
            actor=actor,
            principal_repo=principal_repo,
            session_repo=session_repo,
            login_attempt_repo=attempt_repo,
            uow=uow,
            clock=clock,
        )

    return _make


# ---- SQLite fixtures (repositories and HTTP) ----


@pytest.fixture
async def sqlite_engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory SQLite database with the full schema (one connection, shared)."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=sqlite_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Database session for repository tests. Rolls back after the test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app, backed by the SQLite database."""

    async def _get_test_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_password_hasher] = FakePasswordHasher
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def settings_env(monkeypatch: pytest.MonkeyPatch):
    """Set env vars for one test and reload settings; restored afterwards."""

    def _set(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()

    yield _set
    get_settings.cache_clear()


