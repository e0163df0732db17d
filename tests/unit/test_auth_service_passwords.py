"""Tests for password change and the password reset flow."""

from dataclasses import replace

import pytest

from app.application.services.auth_service import PASSWORD_RESET_ACK
from app.domain.enums import PrincipalStatus
from app.domain.exceptions import (
    AccountLockedException,
    InvalidCredentialsException,
    InvalidTokenException,
    SamePasswordException,
    ValidationException,
)
from app.shared.enums import SessionRevokeReason

PASSWORD = "correct horse battery"
NEW_PASSWORD = "staple battery horse"


class TestChangePassword:
    async def test_guest_has_no_password_to_change(self, auth_service) -> None:
        guest = await auth_service.join_guest()
        with pytest.raises(InvalidCredentialsException):
            await auth_service.change_password(guest.principal.id, "", NEW_PASSWORD)

    async def test_credential_replaced_mid_request_is_rejected(
        self, auth_service, add_principal, principal_repo, password_hasher, uow, monkeypatch
    ) -> None:
        principal = await add_principal(email="race@example.com")
        verify = password_hasher.verify

        def verify_then_replace(plaintext: str, hashed: str) -> bool:
            principal_repo.rows[principal.id].credential_hash = "fake$set elsewhere"
            return verify(plaintext, hashed)

        monkeypatch.setattr(password_hasher, "verify", verify_then_replace)
        commits = uow.commits

        with pytest.raises(InvalidCredentialsException):
            await auth_service.change_password(principal.id, PASSWORD, NEW_PASSWORD)
        assert principal_repo.rows[principal.id].credential_hash == "fake$set elsewhere"
        assert uow.commits == commits

    async def test_change_password_revokes_every_session(
        self, auth_service, add_principal, session_repo
    ) -> None:
        principal = await add_principal(email="m@example.com")
        first = await auth_service.login("m@example.com", PASSWORD)
        await auth_service.login("m@example.com", PASSWORD)

        await auth_service.change_password(principal.id, PASSWORD, NEW_PASSWORD)

        assert await auth_service.list_sessions(principal.id) == []
        assert {s.revoked_reason for s in session_repo.rows.values()} == {
            SessionRevokeReason.PASSWORD_CHANGED.value
        }
        with pytest.raises(InvalidTokenException):
            await auth_service.refresh(first.token.refresh)
        with pytest.raises(InvalidCredentialsException):
            await auth_service.login("m@example.com", PASSWORD)
        result = await auth_service.login("m@example.com", NEW_PASSWORD)
        assert result.principal.id == principal.id

    async def test_wrong_current_password(self, auth_service, add_principal, uow) -> None:
        principal = await add_principal()
        with pytest.raises(InvalidCredentialsException):
            await auth_service.change_password(principal.id, "not it at all", NEW_PASSWORD)
        assert uow.commits == 0

    async def test_same_password_rejected(self, auth_service, add_principal) -> None:
        principal = await add_principal()
        with pytest.raises(SamePasswordException):
            await auth_service.change_password(principal.id, PASSWORD, PASSWORD)

    async def test_same_password_allowed_when_policy_off(
        self, make_auth_service, policy, add_principal
    ) -> None:
        service = make_auth_service(replace(policy, reject_same_password=False))
        principal = await add_principal()
        result = await service.change_password(principal.id, PASSWORD, PASSWORD)
        assert result.message

    async def test_new_password_validated(self, auth_service, add_principal) -> None:
        principal = await add_principal()
        with pytest.raises(ValidationException) as exc_info:
            await auth_service.change_password(principal.id, PASSWORD, "short")
        assert exc_info.value.details["field"] == "new_password"


class TestPasswordReset:
    async def test_ack_is_identical_for_unknown_and_known(
        self, auth_service, add_principal, notifier
    ) -> None:
        await add_principal(email="known@example.com")
        unknown = await auth_service.request_password_reset("ghost@example.com")
        malformed = await auth_service.request_password_reset("nonsense")
        known = await auth_service.request_password_reset("KNOWN@example.com")
        assert unknown == malformed == known
        assert known.message == PASSWORD_RESET_ACK
        assert [e[0] for e in notifier.password_resets] == ["known@example.com"]

    async def test_full_reset_cycle(
        self, auth_service, add_principal, notifier, session_repo
    ) -> None:
        principal = await add_principal(email="r@example.com")
        await auth_service.login("r@example.com", PASSWORD)
        await auth_service.request_password_reset("r@example.com")

        await auth_service.confirm_password_reset(notifier.last_reset_token, NEW_PASSWORD)

        assert await auth_service.list_sessions(principal.id) == []
        assert {s.revoked_reason for s in session_repo.rows.values()} == {
            SessionRevokeReason.PASSWORD_RESET.value
        }
        with pytest.raises(InvalidCredentialsException):
            await auth_service.login("r@example.com", PASSWORD)
        await auth_service.login("r@example.com", NEW_PASSWORD)

    async def test_token_is_single_use(self, auth_service, add_principal, notifier) -> None:
        await add_principal(email="r@example.com")
        await auth_service.request_password_reset("r@example.com")
        token = notifier.last_reset_token
        await auth_service.confirm_password_reset(token, NEW_PASSWORD)
        with pytest.raises(InvalidTokenException):
            await auth_service.confirm_password_reset(token, "yet another password")

    async def test_newer_request_supersedes_older_token(
        self, auth_service, add_principal, notifier
    ) -> None:
        await add_principal(email="r@example.com")
        await auth_service.request_password_reset("r@example.com")
        await auth_service.request_password_reset("r@example.com")
        older, newer = (e[1] for e in notifier.password_resets)
        with pytest.raises(InvalidTokenException):
            await auth_service.confirm_password_reset(older, NEW_PASSWORD)
        await auth_service.confirm_password_reset(newer, NEW_PASSWORD)

    async def test_expired_token(self, auth_service, add_principal, notifier, clock) -> None:
        await add_principal(email="r@example.com")
        await auth_service.request_password_reset("r@example.com")
        clock.advance(hours=1)
        with pytest.raises(InvalidTokenException):
            await auth_service.confirm_password_reset(notifier.last_reset_token, NEW_PASSWORD)

    async def test_reset_clears_lockout(self, auth_service, add_principal, notifier) -> None:
        await add_principal(email="r@example.com")
        for _ in range(5):
            with pytest.raises(InvalidCredentialsException):
                await auth_service.login("r@example.com", "wrong password")
        with pytest.raises(AccountLockedException):
            await auth_service.login("r@example.com", PASSWORD)

        await auth_service.request_password_reset("r@example.com")
        await auth_service.confirm_password_reset(notifier.last_reset_token, NEW_PASSWORD)
        await auth_service.login("r@example.com", NEW_PASSWORD)

    async def test_sanctioned_principal_gets_no_token(
        self, auth_service, add_principal, notifier
    ) -> None:
        await add_principal(email="s@example.com", status=PrincipalStatus.SUSPENDED)
        await auth_service.request_password_reset("s@example.com")
        assert notifier.password_resets == []

    async def test_principal_suspended_after_request_cannot_reset(
        self, auth_service, add_principal, notifier, principal_repo
    ) -> None:
        principal = await add_principal(email="s@example.com")
        await auth_service.request_password_reset("s@example.com")
        principal_repo.rows[principal.id].status = PrincipalStatus.SUSPENDED
        with pytest.raises(InvalidTokenException):
            await auth_service.confirm_password_reset(notifier.last_reset_token, NEW_PASSWORD)

    async def test_short_new_password_keeps_token_usable(
        self, auth_service, add_principal, notifier
    ) -> None:
        await add_principal(email="r@example.com")
        await auth_service.request_password_reset("r@example.com")
        with pytest.raises(ValidationException):
            await auth_service.confirm_password_reset(notifier.last_reset_token, "short")
        await auth_service.confirm_password_reset(notifier.last_reset_token, NEW_PASSWORD)
