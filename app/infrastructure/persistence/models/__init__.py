"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.auth_session import AuthSession
from app.infrastructure.persistence.models.login_attempt import LoginAttempt
from app.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from app.infrastructure.persistence.models.principal import Principal
from app.infrastructure.persistence.models.verification_token import VerificationToken

__all__ = [
    "AuthSession",
    "CreatedAtMixin",
    "CuidMixin",
    "LoginAttempt",
    "Principal",
    "SoftDeleteMixin",
    "TimestampMixin",
    "VerificationToken",
]
