"""Application DTOs (no dependency on ORM or HTTP schemas)."""

from app.application.dtos.auth import (
    AckResult,
    AuthResult,
    ClientInfo,
    EmailVerificationResult,
    IssuedToken,
    TokenClaims,
    TokenPair,
)
from app.application.dtos.principal import PrincipalResult, principal_to_result
from app.application.dtos.session import (
    LoginAttemptRecord,
    SessionRecord,
    VerificationTokenRecord,
)

__all__ = [
    "AckResult",
    "AuthResult",
    "ClientInfo",
    "EmailVerificationResult",
    "IssuedToken",
    "LoginAttemptRecord",
    "PrincipalResult",
    "SessionRecord",
    "TokenClaims",
    "TokenPair",
    "VerificationTokenRecord",
    "principal_to_result",
]
