"""Application interfaces (ports): repository and service protocols."""

from app.application.interfaces.repositories import (
    ILoginAttemptRepository,
    IPrincipalRepository,
    ISessionRepository,
    IVerificationTokenRepository,
)
from app.application.interfaces.services import (
    IPasswordHasher,
    ITokenService,
    IUnitOfWork,
    IVerificationNotifier,
)

__all__ = [
    "ILoginAttemptRepository",
    "IPasswordHasher",
    "IPrincipalRepository",
    "ISessionRepository",
    "ITokenService",
    "IUnitOfWork",
    "IVerificationNotifier",
    "IVerificationTokenRepository",
]
