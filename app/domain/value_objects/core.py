"""Domain value objects for authentication.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

# Pragmatic address check: one @, no whitespace, dotted domain. Full RFC 5322
# parsing happens at the HTTP boundary (pydantic EmailStr).
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class EmailAddress:
    """Value object for an email address.

    `value` keeps the address as entered (trimmed); `normalized` is the
    case-folded form used for lookups and uniqueness.
    """

    value: str

    MAX_LENGTH: ClassVar[int] = 254

    def __post_init__(self) -> None:
        """Trim and validate format.

        Raises:
            ValueError: If empty, too long, or not shaped like an address.
        """
        object.__setattr__(self, "value", (self.value or "").strip())
        if not self.value:
            raise ValueError("Email must be a non-empty string")
        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(f"Email must not exceed {self.MAX_LENGTH} characters")
        if not _EMAIL_RE.match(self.value):
            raise ValueError("Email format is invalid")

    @property
    def normalized(self) -> str:
        return self.value.casefold()


@dataclass(frozen=True)
class Username:
    """Value object for an optional login handle (3-50 chars, no spaces)."""

    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", (self.value or "").strip())
        if len(self.value) < 3 or len(self.value) > 50:
            raise ValueError("Username must be 3-50 characters")
        if not _USERNAME_RE.match(self.value):
            raise ValueError(
                "Username may contain letters, digits, '.', '_' and '-' only"
            )

    @property
    def normalized(self) -> str:
        return self.value.casefold()


@dataclass(frozen=True)
class PlainPassword:
    """Value object for a candidate password before hashing (8-128 chars).

    repr is masked so the value never ends up in logs or tracebacks.
    """

    value: str

    MIN_LENGTH: ClassVar[int] = 8
    MAX_LENGTH: ClassVar[int] = 128

    def __post_init__(self) -> None:
        if not self.value or len(self.value) < self.MIN_LENGTH:
            raise ValueError(
                f"Password must be at least {self.MIN_LENGTH} characters"
            )
        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(
                f"Password must not exceed {self.MAX_LENGTH} characters"
            )
        if not self.value.strip():
            raise ValueError("Password must not be blank")

    def __repr__(self) -> str:
        return "PlainPassword('********')"


def looks_like_email(identifier: str) -> bool:
    """Return True when a login identifier should be matched against email."""
    return "@" in identifier
