"""Password hashing (bcrypt with SHA-256 pre-hash).

Bcrypt truncates inputs at 72 bytes; pre-hashing with SHA-256 yields a fixed-length
input so long passwords are not silently truncated. Callers in async code run
these functions in a worker thread (asyncio.to_thread).
"""

import base64
import hashlib

import bcrypt

# Lazy dummy hash for comparison when a login identifier matches nothing
# (timing-attack mitigation). Computed on first use, not at import.
_dummy_hash_cache: str | None = None


def _prehash(password: str) -> bytes:
    """SHA-256 pre-hash to avoid bcrypt's 72-byte truncation."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if plain_password matches hashed_password."""
    try:
        result = bcrypt.checkpw(
            _prehash(plain_password),
            hashed_password.encode("utf-8"),
        )
        return bool(result)
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str, rounds: int = 12) -> str:
    """Return bcrypt hash of password (SHA-256 pre-hashed before bcrypt)."""
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(_prehash(password), salt)
    return hashed.decode("utf-8")


class BcryptPasswordHasher:
    """IPasswordHasher backed by bcrypt. rounds is the bcrypt cost factor."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        return get_password_hash(plaintext, rounds=self.rounds)

    def verify(self, plaintext: str, hashed: str) -> bool:
        return verify_password(plaintext, hashed)

    def dummy_hash(self) -> str:
        global _dummy_hash_cache
        if _dummy_hash_cache is None:
            _dummy_hash_cache = get_password_hash("not-a-real-password", rounds=self.rounds)
        return _dummy_hash_cache
