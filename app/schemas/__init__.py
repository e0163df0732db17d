"""Pydantic request/response schemas for the API."""

from app.schemas.auth import (
    AckResponse,
    AuthorizedResponse,
    ChangePasswordRequest,
    EmailVerificationConfirmRequest,
    EmailVerificationRequest,
    EmailVerificationResponse,
    JoinRequest,
    LoginRequest,
    LogoutRequest,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    RefreshRequest,
    TokenPairResponse,
)
from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.principal import PrincipalResponse, SanctionRequest
from app.schemas.session import (
    LoginAttemptDetailResponse,
    LoginAttemptResponse,
    SessionResponse,
)

__all__ = [
    "AckResponse",
    "AuthorizedResponse",
    "ChangePasswordRequest",
    "EmailVerificationConfirmRequest",
    "EmailVerificationRequest",
    "EmailVerificationResponse",
    "HealthResponse",
    "JoinRequest",
    "LoginAttemptDetailResponse",
    "LoginAttemptResponse",
    "LoginRequest",
    "LogoutRequest",
    "PasswordResetConfirmRequest",
    "PasswordResetRequest",
    "PrincipalResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "RefreshRequest",
    "SanctionRequest",
    "SessionResponse",
    "TokenPairResponse",
]
