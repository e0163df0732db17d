"""Domain exceptions for the authentication service.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. The
presentation layer maps them to HTTP responses in exception handlers.

Authentication and token errors use fixed, generic messages so that an
observer cannot tell an unknown account from a wrong password, or an
expired token from a used one.
"""

from datetime import datetime
from typing import Any

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"


class AuthServiceException(Exception):
    """Base exception for all authentication service errors.

    Presentation layer maps these to HTTP responses using message,
    error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, retry_after_seconds).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the HTTP layer."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AuthServiceException):
    """Raised when input validation fails (e.g. invalid email format)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ConflictException(AuthServiceException):
    """Raised when an email or username is already registered for the role."""

    def __init__(self, field: str = "email", message: str | None = None) -> None:
        super().__init__(
            message or f"{field.capitalize()} already registered",
            "CONFLICT",
            {"field": field},
        )


class InvalidCredentialsException(AuthServiceException):
    """Raised for any login failure that must not reveal which part was wrong."""

    def __init__(self) -> None:
        super().__init__(INVALID_CREDENTIALS_MESSAGE, "INVALID_CREDENTIALS")


class AccountLockedException(AuthServiceException):
    """Raised when too many failed logins have temporarily locked the account."""

    def __init__(self, locked_until: datetime, retry_after_seconds: int) -> None:
        super().__init__(
            "Account temporarily locked due to multiple failed login attempts",
            "ACCOUNT_LOCKED",
            {
                "locked_until": locked_until.isoformat(),
                "retry_after_seconds": retry_after_seconds,
            },
        )

    @property
    def retry_after_seconds(self) -> int:
        return int(self.details["retry_after_seconds"])


class AccountSuspendedException(AuthServiceException):
    """Raised when a suspended or banned principal presents valid credentials."""

    def __init__(self, status: str) -> None:
        super().__init__(
            "Account is not permitted to sign in",
            "ACCOUNT_SUSPENDED",
            {"status": status},
        )


class EmailNotVerifiedException(AuthServiceException):
    """Raised on login when the deployment requires a verified email first."""

    def __init__(self) -> None:
        super().__init__(
            "Please verify your email address before logging in",
            "EMAIL_NOT_VERIFIED",
        )


class InvalidTokenException(AuthServiceException):
    """Raised for any unusable token (malformed, expired, revoked, used, unknown)."""

    def __init__(self) -> None:
        super().__init__(INVALID_TOKEN_MESSAGE, "INVALID_TOKEN")


class RateLimitedException(AuthServiceException):
    """Raised when an operation is repeated inside its cooldown window."""

    def __init__(self, retry_after_seconds: int, message: str | None = None) -> None:
        super().__init__(
            message or "Too many requests; try again later",
            "RATE_LIMITED",
            {"retry_after_seconds": retry_after_seconds},
        )

    @property
    def retry_after_seconds(self) -> int:
        return int(self.details["retry_after_seconds"])


class SamePasswordException(AuthServiceException):
    """Raised when the new password equals the current one."""

    def __init__(self) -> None:
        super().__init__(
            "New password must differ from the current password",
            "SAME_PASSWORD",
        )


class AuthorizationException(AuthServiceException):
    """Raised when the actor lacks the capability for an operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(AuthServiceException):
    """Raised when a requested resource (principal, session) is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SqlNotConfiguredException(AuthServiceException):
    """Raised when a request needs the database but DATABASE_URL is not usable."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
