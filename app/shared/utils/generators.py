"""ID and secret generators (CUID primary keys, unguessable one-time tokens)."""

import secrets

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

# 32 bytes of entropy, URL-safe so tokens can travel in links unescaped.
SECURE_TOKEN_BYTES = 32


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_secure_token(nbytes: int = SECURE_TOKEN_BYTES) -> str:
    """Return a URL-safe random token for verification and reset links."""
    return secrets.token_urlsafe(nbytes)
