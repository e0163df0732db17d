"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the application services. Services are built
from infrastructure implementations here; routes depend only on these
dependencies, not on infra directly.
"""

from app.api.v1.dependencies._composition import (
    clear_composition_cache,
    get_auth_policy,
    get_clock,
    get_notifier,
    get_password_hasher,
    get_token_service,
)
from app.api.v1.dependencies.auth import (
    PasswordResetJob,
    get_admin_service,
    get_auth_service,
    get_client_info,
    get_current_principal,
    get_password_reset_job,
)

__all__ = [
    "PasswordResetJob",
    "clear_composition_cache",
    "get_admin_service",
    "get_auth_policy",
    "get_auth_service",
    "get_client_info",
    "get_clock",
    "get_current_principal",
    "get_notifier",
    "get_password_hasher",
    "get_password_reset_job",
    "get_token_service",
]
