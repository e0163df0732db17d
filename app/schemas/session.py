"""Session and login history API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SessionResponse(BaseModel):
    """One active session (device). The refresh token itself is never returned."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    family_id: str
    remember_me: bool
    expires_at: datetime
    created_at: datetime | None = None
    last_used_at: datetime | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class LoginAttemptResponse(BaseModel):
    """Login history entry as shown to the principal itself."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    identifier: str
    succeeded: bool
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime | None = None


class LoginAttemptDetailResponse(LoginAttemptResponse):
    """Login history entry for staff, including the internal failure reason."""

    failure_reason: str | None = None
