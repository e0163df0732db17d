"""Auth API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.domain.enums import PrincipalRole
from app.schemas.principal import PrincipalResponse

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


class JoinRequest(BaseModel):
    """Request body for POST /auth/join (self-registration)."""

    email: EmailStr
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LENGTH,
        max_length=PASSWORD_MAX_LENGTH,
        description="Password (8-128 characters)",
    )
    username: str | None = Field(default=None, min_length=3, max_length=50)
    display_name: str | None = Field(default=None, max_length=100)
    role: PrincipalRole = Field(
        default=PrincipalRole.MEMBER,
        description="Role to join as; must be open to self-registration",
    )
    remember_me: bool = False


class LoginRequest(BaseModel):
    """Request body for login. identifier is an email (contains '@') or a username."""

    identifier: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)
    role: PrincipalRole = PrincipalRole.MEMBER
    remember_me: bool = False


class RefreshRequest(BaseModel):
    """Request body for POST /auth/refresh."""

    refresh: str = Field(..., min_length=1, description="Refresh token from the last pair")


class LogoutRequest(BaseModel):
    """Request body for POST /auth/logout."""

    refresh: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    """Request body for PUT /auth/password."""

    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)
    new_password: str = Field(
        ..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH
    )


class PasswordResetRequest(BaseModel):
    """Request body for POST /auth/password-reset/request."""

    email: EmailStr
    role: PrincipalRole = PrincipalRole.MEMBER


class PasswordResetConfirmRequest(BaseModel):
    """Request body for POST /auth/password-reset/confirm."""

    token: str = Field(..., min_length=1, description="Token from the reset link")
    new_password: str = Field(
        ..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH
    )


class EmailVerificationRequest(BaseModel):
    """Request body for POST /auth/email-verification/request."""

    email: EmailStr
    role: PrincipalRole = PrincipalRole.MEMBER


class EmailVerificationConfirmRequest(BaseModel):
    """Request body for POST /auth/email-verification/confirm."""

    token: str = Field(..., min_length=1)


class TokenPairResponse(BaseModel):
    """Bearer token pair. expired_at is the access token expiry."""

    model_config = ConfigDict(from_attributes=True)

    access: str
    refresh: str
    token_type: str = "bearer"
    expired_at: datetime
    refreshable_until: datetime


class AuthorizedResponse(BaseModel):
    """Response for join and login: the principal and its first token pair."""

    model_config = ConfigDict(from_attributes=True)

    principal: PrincipalResponse
    token: TokenPairResponse


class AckResponse(BaseModel):
    """Neutral acknowledgement."""

    model_config = ConfigDict(from_attributes=True)

    message: str


class EmailVerificationResponse(BaseModel):
    """Outcome of POST /auth/email-verification/confirm."""

    model_config = ConfigDict(from_attributes=True)

    status: str = Field(..., description="verified or already_verified")
    principal_id: str
