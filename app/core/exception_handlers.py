"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses (SRP, OCP for adding new handlers). The
authentication core raises AuthServiceException subclasses only; the HTTP
status is chosen here from error_code.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import AuthServiceException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "CONFLICT": 409,
    "INVALID_CREDENTIALS": 401,
    "ACCOUNT_LOCKED": 403,
    "ACCOUNT_SUSPENDED": 403,
    "EMAIL_NOT_VERIFIED": 403,
    "INVALID_TOKEN": 401,
    "RATE_LIMITED": 429,
    "SAME_PASSWORD": 400,
    "RESOURCE_NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "PERMISSION_DENIED": 403,
    "SERVICE_UNAVAILABLE": 503,
}

# Codes whose details carry retry_after_seconds, surfaced as Retry-After.
_RETRY_AFTER_CODES = frozenset({"ACCOUNT_LOCKED", "RATE_LIMITED"})


def status_for(exc: AuthServiceException) -> int:
    """Return the HTTP status for a domain exception (400 when unmapped)."""
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _auth_exception_handler(
    request: Request, exc: AuthServiceException
) -> JSONResponse:
    """Return JSON from AuthServiceException.to_dict() with appropriate status code."""
    headers: dict[str, str] = {}
    if exc.error_code in _RETRY_AFTER_CODES and "retry_after_seconds" in exc.details:
        headers["Retry-After"] = str(exc.details["retry_after_seconds"])
    if exc.error_code == "INVALID_TOKEN":
        headers["WWW-Authenticate"] = "Bearer"
    return JSONResponse(
        status_code=status_for(exc),
        content=exc.to_dict(),
        headers=headers or None,
    )


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details (input values omitted)."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {"errors": errors},
        },
    )


def _rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Return 429 in the common error shape for per-IP throttling."""
    return JSONResponse(
        status_code=429,
        content={
            "error": "RATE_LIMITED",
            "message": "Too many requests; try again later",
            "details": {"limit": str(exc.detail)},
        },
        headers={"Retry-After": "60"},
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail, "details": {}},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail, "details": {}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: AuthServiceException (and
    subclasses), RequestValidationError, RateLimitExceeded,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(AuthServiceException, _auth_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
