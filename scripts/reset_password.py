"""Operator password reset: set a new credential, clear any lock, sign out every session.

Usage:
    uv run python -m scripts.reset_password <principal_id> <new_password>
All imports use app.*.
"""

import asyncio
import sys

from app.core.config import get_settings
from app.domain.value_objects import PlainPassword
from app.infrastructure.persistence import database
from app.infrastructure.persistence.repositories import (
    PrincipalRepository,
    SessionRepository,
)
from app.infrastructure.security import BcryptPasswordHasher
from app.shared.enums import SessionRevokeReason
from app.shared.utils import utc_now


async def main() -> None:
    """Reset password for principal_id."""
    if len(sys.argv) < 3:
        print(
            "Usage: uv run python -m scripts.reset_password <principal_id> <new_password>",
            file=sys.stderr,
        )
        sys.exit(1)
    principal_id = sys.argv[1]
    try:
        secret = PlainPassword(sys.argv[2])
    except ValueError as e:
        print(f"Invalid password: {e}", file=sys.stderr)
        sys.exit(1)

    settings = get_settings()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
    async with database.AsyncSessionLocal() as session:
        principal_repo = PrincipalRepository(session)
        principal = await principal_repo.get_by_id(principal_id)
        if principal is None:
            print(f"Principal not found: {principal_id}", file=sys.stderr)
            sys.exit(1)
        if principal.credential_hash is None:
            print(f"Principal {principal_id} has no credential (guest)", file=sys.stderr)
            sys.exit(1)
        now = utc_now()
        if not await principal_repo.set_credential(
            principal.id,
            hasher.hash(secret.value),
            now,
            expected_hash=principal.credential_hash,
            clear_lock=True,
        ):
            print("Credential changed concurrently; run the reset again", file=sys.stderr)
            sys.exit(1)
        revoked = await SessionRepository(session).revoke_all_for_principal(
            principal.id, now, SessionRevokeReason.PASSWORD_RESET.value
        )
        await session.commit()
    await database.dispose_engine()
    print(f"Password reset for principal {principal.id}; revoked {revoked} session(s)")


if __name__ == "__main__":
    asyncio.run(main())
