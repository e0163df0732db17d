"""Principal API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import LifecycleState, PrincipalRole


class PrincipalResponse(BaseModel):
    """Principal response (no credential or lockout counters)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    role: PrincipalRole
    state: LifecycleState
    email: str | None = None
    username: str | None = None
    display_name: str | None = None
    email_verified: bool
    status_reason: str | None = None
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    created_at: datetime | None = None


class SanctionRequest(BaseModel):
    """Optional body for POST /principals/{id}/suspend and /ban."""

    reason: str | None = Field(default=None, max_length=500)
