"""Immutable authentication policy passed explicitly into services.

Built once from Settings in the composition root; business logic reads
TTLs, thresholds and the signing secret from here, never from global
settings, so tests can inject their own secret and limits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from app.domain.enums import PrincipalRole

if TYPE_CHECKING:
    from app.core.config import Settings


@dataclass(frozen=True)
class AuthPolicy:
    """TTLs, limits and feature switches for the authentication lifecycle."""

    signing_secret: str = field(repr=False)
    algorithm: str = "HS256"
    issuer: str = "auth-lifecycle"
    access_token_ttl: timedelta = timedelta(hours=1)
    refresh_token_ttl: timedelta = timedelta(days=7)
    remember_me_refresh_token_ttl: timedelta = timedelta(days=30)
    password_reset_token_ttl: timedelta = timedelta(hours=1)
    email_verify_token_ttl: timedelta = timedelta(hours=24)
    verification_resend_cooldown: timedelta = timedelta(minutes=5)
    lockout_threshold: int = 5
    lockout_window: timedelta = timedelta(minutes=15)
    lockout_duration: timedelta = timedelta(minutes=15)
    refresh_token_rotation: bool = True
    require_email_verification: bool = True
    require_verified_email_for_login: bool = False
    reject_same_password: bool = True
    self_registration_roles: frozenset[PrincipalRole] = frozenset(
        {PrincipalRole.MEMBER}
    )

    def __post_init__(self) -> None:
        if not self.signing_secret:
            raise ValueError("signing_secret must be a non-empty string")
        if self.lockout_threshold < 1:
            raise ValueError("lockout_threshold must be at least 1")

    def refresh_ttl(self, remember_me: bool) -> timedelta:
        """Refresh lifetime: remember-me extends it (30 days vs 7 by default)."""
        return (
            self.remember_me_refresh_token_ttl if remember_me else self.refresh_token_ttl
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> AuthPolicy:
        """Build the policy from application settings."""
        return cls(
            signing_secret=settings.secret_key.get_secret_value(),
            algorithm=settings.algorithm,
            issuer=settings.jwt_issuer,
            access_token_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_token_ttl=timedelta(days=settings.refresh_token_expire_days),
            remember_me_refresh_token_ttl=timedelta(
                days=settings.refresh_token_remember_me_days
            ),
            password_reset_token_ttl=timedelta(
                minutes=settings.password_reset_token_ttl_minutes
            ),
            email_verify_token_ttl=timedelta(
                hours=settings.email_verify_token_ttl_hours
            ),
            verification_resend_cooldown=timedelta(
                seconds=settings.verification_resend_cooldown_seconds
            ),
            lockout_threshold=settings.login_lockout_threshold,
            lockout_window=timedelta(minutes=settings.login_lockout_window_minutes),
            lockout_duration=timedelta(
                minutes=settings.login_lockout_duration_minutes
            ),
            refresh_token_rotation=settings.refresh_token_rotation,
            require_email_verification=settings.require_email_verification,
            require_verified_email_for_login=settings.require_verified_email_for_login,
            reject_same_password=settings.reject_same_password,
            self_registration_roles=frozenset(
                PrincipalRole(r.strip())
                for r in settings.self_registration_roles.split(",")
                if r.strip()
            ),
        )
