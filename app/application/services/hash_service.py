"""Hash service for bearer secrets stored server-side (refresh and verification tokens).

Only digests are persisted; the raw token is returned to the caller once
and never written to the store or the logs.
"""

from __future__ import annotations

import hashlib
import hmac
from abc import ABC, abstractmethod


class HashAlgorithm(ABC):
    """Abstract hash algorithm (OCP)."""

    @abstractmethod
    def hash(self, data: str) -> str:
        """Compute hash of input string."""
        ...


class SHA256Algorithm(HashAlgorithm):
    """SHA-256 implementation."""

    def hash(self, data: str) -> str:
        return hashlib.sha256(data.encode()).hexdigest()


class TokenHashService:
    """Single source of truth for token digests used as lookup keys."""

    def __init__(self, algorithm: HashAlgorithm | None = None) -> None:
        self.algorithm = algorithm or SHA256Algorithm()

    def hash_token(self, raw_token: str) -> str:
        """Return the hex digest stored for raw_token."""
        return self.algorithm.hash(raw_token)

    def matches(self, raw_token: str, token_hash: str) -> bool:
        """Constant-time comparison of raw_token against a stored digest."""
        return hmac.compare_digest(self.hash_token(raw_token), token_hash)
