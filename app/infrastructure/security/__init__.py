"""Security: JWT tokens and password hashing."""

from app.infrastructure.security.jwt import JWTTokenService
from app.infrastructure.security.password import (
    BcryptPasswordHasher,
    get_password_hash,
    verify_password,
)

__all__ = [
    "BcryptPasswordHasher",
    "JWTTokenService",
    "get_password_hash",
    "verify_password",
]
