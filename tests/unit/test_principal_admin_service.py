"""Tests for PrincipalAdminService: role capabilities, rank rule and session revocation."""

from unittest.mock import AsyncMock

import pytest

from app.domain.enums import LifecycleState, PrincipalRole, PrincipalStatus
from app.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    InvalidCredentialsException,
    InvalidTokenException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.enums import SessionRevokeReason

PASSWORD = "correct horse battery"


@pytest.fixture
async def admin(add_principal):
    return await add_principal(PrincipalRole.ADMIN, email="admin@example.com")


@pytest.fixture
async def moderator(add_principal):
    return await add_principal(PrincipalRole.MODERATOR, email="mod@example.com")


@pytest.fixture
async def member(add_principal):
    return await add_principal(email="member@example.com")


class TestAuthorization:
    @pytest.mark.parametrize("role", [PrincipalRole.GUEST, PrincipalRole.MEMBER])
    async def test_non_staff_cannot_read(
        self, make_admin_service, add_principal, member, role
    ) -> None:
        actor = await add_principal(role)
        service = make_admin_service(actor)
        with pytest.raises(AuthorizationException):
            await service.list_principals()
        with pytest.raises(AuthorizationException):
            await service.suspend(member.id)

    async def test_moderator_cannot_ban_or_delete(
        self, make_admin_service, moderator, member
    ) -> None:
        service = make_admin_service(moderator)
        with pytest.raises(AuthorizationException):
            await service.ban(member.id)
        with pytest.raises(AuthorizationException):
            await service.delete(member.id)
        with pytest.raises(AuthorizationException):
            await service.unlock(member.id)

    async def test_moderator_cannot_act_on_peers_or_admins(
        self, make_admin_service, add_principal, moderator, admin
    ) -> None:
        peer = await add_principal(PrincipalRole.MODERATOR, email="peer@example.com")
        service = make_admin_service(moderator)
        with pytest.raises(AuthorizationException):
            await service.suspend(peer.id)
        with pytest.raises(AuthorizationException):
            await service.suspend(admin.id)

    async def test_admin_cannot_act_on_another_admin(
        self, make_admin_service, add_principal, admin
    ) -> None:
        other = await add_principal(PrincipalRole.ADMIN, email="admin2@example.com")
        with pytest.raises(AuthorizationException):
            await make_admin_service(admin).ban(other.id)

    async def test_staff_can_read_any_rank(self, make_admin_service, moderator, admin) -> None:
        result = await make_admin_service(moderator).get_principal(admin.id)
        assert result.role == PrincipalRole.ADMIN

    async def test_unknown_target(self, make_admin_service, admin) -> None:
        with pytest.raises(ResourceNotFoundException):
            await make_admin_service(admin).suspend("missing")


class TestSanctions:
    async def test_moderator_suspends_member_and_revokes_sessions(
        self, make_admin_service, auth_service, moderator, member, session_repo
    ) -> None:
        pair = (await auth_service.login("member@example.com", PASSWORD)).token

        result = await make_admin_service(moderator).suspend(member.id, "spam")

        assert result.state == LifecycleState.SUSPENDED
        assert result.status_reason == "spam"
        assert {s.revoked_reason for s in session_repo.rows.values()} == {
            SessionRevokeReason.PRINCIPAL_SUSPENDED.value
        }
        with pytest.raises(InvalidTokenException):
            await auth_service.refresh(pair.refresh)
        with pytest.raises(InvalidTokenException):
            await auth_service.authenticate_access_token(pair.access)

    async def test_banned_principal_cannot_be_suspended(
        self, make_admin_service, admin, member
    ) -> None:
        service = make_admin_service(admin)
        await service.ban(member.id, "fraud")
        with pytest.raises(ValidationException):
            await service.suspend(member.id)

    async def test_status_changed_since_read_is_a_conflict(
        self, make_admin_service, admin, member, principal_repo, session_repo, uow, monkeypatch
    ) -> None:
        monkeypatch.setattr(principal_repo, "set_status", AsyncMock(return_value=False))
        commits = uow.commits

        with pytest.raises(ConflictException):
            await make_admin_service(admin).suspend(member.id, "spam")

        assert uow.commits == commits
        assert principal_repo.rows[member.id].status == PrincipalStatus.ACTIVE

    async def test_reinstate_restores_sign_in(
        self, make_admin_service, auth_service, admin, member
    ) -> None:
        service = make_admin_service(admin)
        await service.ban(member.id)
        result = await service.reinstate(member.id)
        assert result.state == LifecycleState.ACTIVE
        assert result.status_reason is None
        await auth_service.login("member@example.com", PASSWORD)

    async def test_reinstate_unverified_returns_to_pending(
        self, make_admin_service, add_principal, moderator
    ) -> None:
        target = await add_principal(
            email="new@example.com",
            status=PrincipalStatus.SUSPENDED,
            email_verified=False,
        )
        result = await make_admin_service(moderator).reinstate(target.id)
        assert result.state == LifecycleState.PENDING_VERIFICATION

    async def test_unlock_clears_lockout(
        self, make_admin_service, auth_service, admin, member
    ) -> None:
        for _ in range(5):
            with pytest.raises(InvalidCredentialsException):
                await auth_service.login("member@example.com", "wrong password")
        result = await make_admin_service(admin).unlock(member.id)
        assert result.locked_until is None
        await auth_service.login("member@example.com", PASSWORD)

    async def test_delete_revokes_sessions_and_frees_email(
        self, make_admin_service, auth_service, admin, member, session_repo, uow
    ) -> None:
        await auth_service.login("member@example.com", PASSWORD)
        commits = uow.commits

        await make_admin_service(admin).delete(member.id)

        assert uow.commits == commits + 1
        assert all(s.revoked_at is not None for s in session_repo.rows.values())
        with pytest.raises(ResourceNotFoundException):
            await make_admin_service(admin).get_principal(member.id)
        rejoined = await auth_service.join("member@example.com", PASSWORD)
        assert rejoined.principal.id != member.id


class TestReads:
    async def test_list_filters(
        self, make_admin_service, add_principal, admin, moderator, member
    ) -> None:
        await add_principal(email="held@example.com", status=PrincipalStatus.SUSPENDED)
        service = make_admin_service(admin)
        assert {p.id for p in await service.list_principals(role=PrincipalRole.MODERATOR)} == {
            moderator.id
        }
        suspended = await service.list_principals(status=PrincipalStatus.SUSPENDED)
        assert [p.email for p in suspended] == ["held@example.com"]
        assert len(await service.list_principals(limit=2)) == 2

    async def test_sessions_and_history_for_target(
        self, make_admin_service, auth_service, moderator, member
    ) -> None:
        with pytest.raises(InvalidCredentialsException):
            await auth_service.login("member@example.com", "wrong password")
        await auth_service.login("member@example.com", PASSWORD)
        service = make_admin_service(moderator)
        assert len(await service.list_sessions(member.id)) == 1
        history = await service.login_history(member.id)
        assert history[-1].failure_reason == "bad_password"
