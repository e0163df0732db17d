"""DTOs for principal read-models (no password or lockout internals)."""

from dataclasses import dataclass
from datetime import datetime

from app.domain.entities.principal import PrincipalEntity
from app.domain.enums import LifecycleState, PrincipalRole


@dataclass(frozen=True)
class PrincipalResult:
    """Principal read-model returned by join/login/profile/admin lookups."""

    id: str
    role: PrincipalRole
    state: LifecycleState
    email: str | None
    username: str | None
    display_name: str | None
    email_verified: bool
    status_reason: str | None = None
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    created_at: datetime | None = None


def principal_to_result(p: PrincipalEntity) -> PrincipalResult:
    """Map a PrincipalEntity to its public read-model."""
    return PrincipalResult(
        id=p.id,
        role=p.role,
        state=p.lifecycle_state,
        email=p.email,
        username=p.username,
        display_name=p.display_name,
        email_verified=p.email_verified,
        status_reason=p.status_reason,
        locked_until=p.locked_until,
        last_login_at=p.last_login_at,
        created_at=p.created_at,
    )
