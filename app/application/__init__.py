"""Application layer: interfaces, DTOs, policy and services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, hashing, tokens, notifier).
"""

from app.application.interfaces import (
    ILoginAttemptRepository,
    IPasswordHasher,
    IPrincipalRepository,
    ISessionRepository,
    ITokenService,
    IUnitOfWork,
    IVerificationNotifier,
    IVerificationTokenRepository,
)
from app.application.policy import AuthPolicy
from app.application.services import (
    AuthLifecycleService,
    PrincipalAdminService,
    SessionRegistry,
    TokenHashService,
    VerificationTokenService,
)

__all__ = [
    "AuthLifecycleService",
    "AuthPolicy",
    "ILoginAttemptRepository",
    "IPasswordHasher",
    "IPrincipalRepository",
    "ISessionRepository",
    "ITokenService",
    "IUnitOfWork",
    "IVerificationNotifier",
    "IVerificationTokenRepository",
    "PrincipalAdminService",
    "SessionRegistry",
    "TokenHashService",
    "VerificationTokenService",
]
