"""Process-wide collaborators (composition root).

Built once from settings and shared by every request: the auth policy, the
clock, password hasher, token service and notifier. Tests replace them with
app.dependency_overrides or by clearing the caches after changing env vars.
"""

from __future__ import annotations

from functools import lru_cache

from app.application.policy import AuthPolicy
from app.core.config import get_settings
from app.infrastructure.notifications import LoggingVerificationNotifier
from app.infrastructure.security import BcryptPasswordHasher, JWTTokenService
from app.shared.utils.datetime import Clock, SystemClock


@lru_cache
def get_auth_policy() -> AuthPolicy:
    """Immutable policy derived from settings."""
    return AuthPolicy.from_settings(get_settings())


@lru_cache
def get_clock() -> Clock:
    return SystemClock()


@lru_cache
def get_password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=get_settings().bcrypt_rounds)


@lru_cache
def get_token_service() -> JWTTokenService:
    """Signs and verifies access/refresh tokens with the policy's secret."""
    return JWTTokenService(get_auth_policy(), get_clock())


@lru_cache
def get_notifier() -> LoggingVerificationNotifier:
    return LoggingVerificationNotifier()


def clear_composition_cache() -> None:
    """Drop cached collaborators (call after get_settings.cache_clear())."""
    for factory in (
        get_auth_policy,
        get_clock,
        get_password_hasher,
        get_token_service,
        get_notifier,
    ):
        factory.cache_clear()
