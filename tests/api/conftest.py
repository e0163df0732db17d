"""Helpers for HTTP tests: seeded staff accounts and captured notifications."""

import pytest

from app.api.v1.dependencies import get_notifier
from app.domain.entities.principal import PrincipalEntity
from app.domain.enums import PrincipalRole, PrincipalStatus
from app.infrastructure.persistence.repositories import PrincipalRepository
from app.main import app
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid
from tests.fakes import RecordingNotifier

API = "/api/v1"
PASSWORD = "correct horse battery"


@pytest.fixture
def captured(client) -> RecordingNotifier:
    """Replace the logging notifier so tests can read issued tokens."""
    recorder = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recorder
    return recorder


@pytest.fixture
def seed_principal(session_factory):
    """Insert a principal directly (staff roles cannot self-register)."""

    async def _seed(role: PrincipalRole, email: str) -> PrincipalEntity:
        now = utc_now()
        async with session_factory() as session:
            principal = await PrincipalRepository(session).add(
                PrincipalEntity(
                    id=generate_cuid(),
                    role=role,
                    status=PrincipalStatus.ACTIVE,
                    email=email,
                    email_normalized=email.casefold(),
                    credential_hash=f"fake${PASSWORD}",
                    email_verified=True,
                    created_at=now,
                    updated_at=now,
                )
            )
            await session.commit()
        return principal

    return _seed


@pytest.fixture
def login_as(client):
    """Log in and return the Authorization header for the access token."""

    async def _login(email: str, role: PrincipalRole = PrincipalRole.MEMBER) -> dict[str, str]:
        response = await client.post(
            f"{API}/auth/login",
            json={"identifier": email, "password": PASSWORD, "role": role.value},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']['access']}"}

    return _login
