"""Tests for JWTTokenService: round trip, expiry via the injected clock, rejection cases."""

from datetime import timedelta

import pytest
from jose import jwt

from app.application.policy import AuthPolicy
from app.domain.enums import PrincipalRole
from app.domain.exceptions import InvalidTokenException
from app.infrastructure.security import JWTTokenService
from app.shared.enums import TokenType
from tests.fakes import T0, FakeClock


def test_access_token_round_trip(token_service: JWTTokenService) -> None:
    issued = token_service.issue_access_token("p1", PrincipalRole.MODERATOR)
    claims = token_service.verify(issued.token, TokenType.ACCESS)
    assert claims.subject == "p1"
    assert claims.role == PrincipalRole.MODERATOR
    assert claims.token_type == TokenType.ACCESS
    assert claims.expires_at == issued.expires_at == T0 + timedelta(hours=1)


def test_access_token_expires_after_ttl(
    token_service: JWTTokenService, clock: FakeClock
) -> None:
    issued = token_service.issue_access_token("p1", PrincipalRole.MEMBER)
    clock.advance(minutes=59, seconds=59)
    assert token_service.verify(issued.token).subject == "p1"
    clock.advance(seconds=1)
    with pytest.raises(InvalidTokenException):
        token_service.verify(issued.token)


def test_refresh_token_carries_session_and_family(token_service: JWTTokenService) -> None:
    issued = token_service.issue_refresh_token("p1", "s1", "f1", T0 + timedelta(days=7))
    claims = token_service.verify(issued.token, TokenType.REFRESH)
    assert claims.session_id == "s1"
    assert claims.family_id == "f1"
    assert claims.role is None


def test_tokens_are_unique_within_one_second(token_service: JWTTokenService) -> None:
    a = token_service.issue_access_token("p1", PrincipalRole.MEMBER)
    b = token_service.issue_access_token("p1", PrincipalRole.MEMBER)
    assert a.token != b.token


def test_wrong_type_rejected(token_service: JWTTokenService) -> None:
    access = token_service.issue_access_token("p1", PrincipalRole.MEMBER)
    with pytest.raises(InvalidTokenException):
        token_service.verify(access.token, TokenType.REFRESH)


def test_wrong_secret_rejected(clock: FakeClock, policy: AuthPolicy) -> None:
    issued = JWTTokenService(policy, clock).issue_access_token("p1", PrincipalRole.MEMBER)
    other = JWTTokenService(AuthPolicy(signing_secret="another-secret-0123456789abcdef"), clock)
    with pytest.raises(InvalidTokenException):
        other.verify(issued.token)


def test_wrong_issuer_rejected(clock: FakeClock, policy: AuthPolicy) -> None:
    issued = JWTTokenService(policy, clock).issue_access_token("p1", PrincipalRole.MEMBER)
    other = JWTTokenService(
        AuthPolicy(signing_secret=policy.signing_secret, issuer="someone-else"), clock
    )
    with pytest.raises(InvalidTokenException):
        other.verify(issued.token)


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c"])
def test_malformed_rejected(token_service: JWTTokenService, garbage: str) -> None:
    with pytest.raises(InvalidTokenException):
        token_service.verify(garbage)


def test_missing_claims_rejected(token_service: JWTTokenService, policy: AuthPolicy) -> None:
    token = jwt.encode(
        {"sub": "p1", "typ": "access", "role": "member"},
        policy.signing_secret,
        algorithm=policy.algorithm,
    )
    with pytest.raises(InvalidTokenException):
        token_service.verify(token)


def test_access_token_without_role_rejected(
    token_service: JWTTokenService, policy: AuthPolicy
) -> None:
    now = int(T0.timestamp())
    token = jwt.encode(
        {
            "sub": "p1",
            "iss": policy.issuer,
            "typ": "access",
            "iat": now,
            "exp": now + 60,
            "jti": "j1",
        },
        policy.signing_secret,
        algorithm=policy.algorithm,
    )
    with pytest.raises(InvalidTokenException):
        token_service.verify(token)
