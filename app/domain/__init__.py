"""Domain layer: entities, value objects, enums, role rules and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import PrincipalEntity
from app.domain.enums import (
    LifecycleState,
    PrincipalRole,
    PrincipalStatus,
    TokenPurpose,
)
from app.domain.exceptions import (
    AccountLockedException,
    AccountSuspendedException,
    AuthorizationException,
    AuthServiceException,
    ConflictException,
    EmailNotVerifiedException,
    InvalidCredentialsException,
    InvalidTokenException,
    RateLimitedException,
    ResourceNotFoundException,
    SamePasswordException,
    ValidationException,
)
from app.domain.value_objects import EmailAddress, PlainPassword, Username

__all__ = [
    # Entities
    "PrincipalEntity",
    # Enums
    "LifecycleState",
    "PrincipalRole",
    "PrincipalStatus",
    "TokenPurpose",
    # Exceptions
    "AccountLockedException",
    "AccountSuspendedException",
    "AuthorizationException",
    "AuthServiceException",
    "ConflictException",
    "EmailNotVerifiedException",
    "InvalidCredentialsException",
    "InvalidTokenException",
    "RateLimitedException",
    "ResourceNotFoundException",
    "SamePasswordException",
    "ValidationException",
    # Value objects
    "EmailAddress",
    "PlainPassword",
    "Username",
]
