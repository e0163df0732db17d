"""Application services (use-case orchestration over the ports)."""

from app.application.services.auth_service import AuthLifecycleService
from app.application.services.hash_service import TokenHashService
from app.application.services.principal_admin_service import PrincipalAdminService
from app.application.services.session_registry import SessionRegistry
from app.application.services.verification_tokens import VerificationTokenService

__all__ = [
    "AuthLifecycleService",
    "PrincipalAdminService",
    "SessionRegistry",
    "TokenHashService",
    "VerificationTokenService",
]
