"""Bootstrap an admin principal (there is no self-registration for admins).

Usage:
    uv run python -m scripts.create_admin <email> [password] [username]
If password is omitted, a random one is printed.
All imports use app.*.
"""

import asyncio
import secrets
import sys

from app.core.config import get_settings
from app.domain.entities.principal import PrincipalEntity
from app.domain.enums import PrincipalRole, PrincipalStatus
from app.domain.exceptions import AuthServiceException
from app.domain.value_objects import EmailAddress, PlainPassword, Username
from app.infrastructure.persistence import database
from app.infrastructure.persistence.repositories import PrincipalRepository
from app.infrastructure.security import BcryptPasswordHasher
from app.shared.utils import generate_cuid, utc_now


async def main() -> None:
    """Create an active, verified admin principal."""
    if len(sys.argv) < 2:
        print(
            "Usage: uv run python -m scripts.create_admin <email> [password] [username]",
            file=sys.stderr,
        )
        sys.exit(1)
    settings = get_settings()
    password = sys.argv[2] if len(sys.argv) > 2 else secrets.token_urlsafe(12)
    try:
        address = EmailAddress(sys.argv[1])
        secret = PlainPassword(password)
        handle = Username(sys.argv[3]) if len(sys.argv) > 3 else None
    except ValueError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        sys.exit(1)

    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
    now = utc_now()
    async with database.AsyncSessionLocal() as session:
        repo = PrincipalRepository(session)
        try:
            admin = await repo.add(
                PrincipalEntity(
                    id=generate_cuid(),
                    role=PrincipalRole.ADMIN,
                    status=PrincipalStatus.ACTIVE,
                    email=address.value,
                    email_normalized=address.normalized,
                    username=handle.value if handle else None,
                    username_normalized=handle.normalized if handle else None,
                    credential_hash=hasher.hash(secret.value),
                    email_verified=True,
                    created_at=now,
                    updated_at=now,
                )
            )
        except AuthServiceException as e:
            print(e.message, file=sys.stderr)
            sys.exit(1)
        await session.commit()
    await database.dispose_engine()
    print(f"Created admin: {admin.id} ({admin.email})")
    if len(sys.argv) <= 2:
        print(f"Password: {password}")


if __name__ == "__main__":
    asyncio.run(main())
