"""Domain value objects."""

from app.domain.value_objects.core import (
    EmailAddress,
    PlainPassword,
    Username,
    looks_like_email,
)

__all__ = [
    "EmailAddress",
    "PlainPassword",
    "Username",
    "looks_like_email",
]
