"""Tests for token delivery: the logging notifier and the join -> notifier hand-off."""

import logging
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from app.application.services import AuthLifecycleService
from app.infrastructure.notifications import LoggingVerificationNotifier
from tests.fakes import T0


@pytest.mark.asyncio
async def test_logging_notifier_masks_address_and_hides_token(caplog) -> None:
    notifier = LoggingVerificationNotifier()
    with caplog.at_level(logging.INFO, logger="app.infrastructure.notifications"):
        await notifier.send_password_reset("alice@example.com", "raw-secret", T0)
    assert "a***@example.com" in caplog.text
    assert "alice@example.com" not in caplog.text
    assert "raw-secret" not in caplog.text


@pytest.mark.asyncio
async def test_logging_notifier_writes_token_at_debug(caplog) -> None:
    notifier = LoggingVerificationNotifier()
    with caplog.at_level(logging.DEBUG, logger="app.infrastructure.notifications"):
        await notifier.send_email_verification("bob@example.com", "raw-secret", T0)
    assert "raw-secret" in caplog.text


@pytest.mark.asyncio
async def test_join_hands_token_to_notifier_after_commit(
    principal_repo,
    session_repo,
    token_repo,
    attempt_repo,
    password_hasher,
    token_service,
    uow,
    policy,
    clock,
) -> None:
    notifier = AsyncMock()
    service = AuthLifecycleService(
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

    await service.join("carol@example.com", "correct horse battery")

    notifier.send_email_verification.assert_awaited_once()
    email, token, expires_at = notifier.send_email_verification.await_args.args
    assert email == "carol@example.com"
    assert token
    assert expires_at == T0 + timedelta(hours=24)
    notifier.send_password_reset.assert_not_awaited()
    assert uow.commits == 1
