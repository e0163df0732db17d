"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.login_attempt_repo import (
    LoginAttemptRepository,
)
from app.infrastructure.persistence.repositories.principal_repo import (
    PrincipalRepository,
)
from app.infrastructure.persistence.repositories.session_repo import SessionRepository
from app.infrastructure.persistence.repositories.verification_token_repo import (
    VerificationTokenRepository,
)

__all__ = [
    "BaseRepository",
    "LoginAttemptRepository",
    "PrincipalRepository",
    "SessionRepository",
    "VerificationTokenRepository",
]
