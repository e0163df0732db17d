"""Tests for domain exceptions (error codes, details, generic messages)."""

from datetime import timedelta

from app.domain.exceptions import (
    INVALID_CREDENTIALS_MESSAGE,
    AccountLockedException,
    AuthorizationException,
    AuthServiceException,
    ConflictException,
    InvalidCredentialsException,
    InvalidTokenException,
    RateLimitedException,
    ResourceNotFoundException,
    ValidationException,
)
from tests.fakes import T0


def test_base_defaults_error_code_to_class_name() -> None:
    exc = AuthServiceException("boom")
    assert exc.error_code == "AuthServiceException"
    assert exc.to_dict() == {"error": "AuthServiceException", "message": "boom", "details": {}}


def test_validation_exception_carries_field() -> None:
    exc = ValidationException("bad", field="email")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "email"}


def test_conflict_names_field() -> None:
    exc = ConflictException("username")
    assert exc.error_code == "CONFLICT"
    assert exc.message == "Username already registered"
    assert exc.details == {"field": "username"}


def test_credentials_and_token_messages_are_fixed() -> None:
    assert InvalidCredentialsException().message == INVALID_CREDENTIALS_MESSAGE
    assert InvalidCredentialsException().details == {}
    assert InvalidTokenException().error_code == "INVALID_TOKEN"


def test_account_locked_details() -> None:
    exc = AccountLockedException(T0 + timedelta(minutes=15), 900)
    assert exc.error_code == "ACCOUNT_LOCKED"
    assert exc.retry_after_seconds == 900
    assert exc.details["locked_until"].startswith("2026-01-05T09:15:00")


def test_rate_limited_retry_after() -> None:
    assert RateLimitedException(42).retry_after_seconds == 42


def test_authorization_exception_message() -> None:
    exc = AuthorizationException(resource="principal", action="ban")
    assert exc.message == "Permission denied: ban on principal"
    assert exc.error_code == "PERMISSION_DENIED"


def test_not_found_details() -> None:
    exc = ResourceNotFoundException("session", "s1")
    assert exc.details == {"resource_type": "session", "resource_id": "s1"}
