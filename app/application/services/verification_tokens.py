"""Single-use verification tokens (email verification, password reset).

Raw tokens are random URL-safe strings handed to the notifier; only their
SHA-256 digest is stored. Issuing a token supersedes every earlier unused
token of the same purpose for that principal, so only the newest link works.
Consumption is a conditional update in the repository: two concurrent
confirmations of the same token cannot both succeed.
"""

from __future__ import annotations

from datetime import timedelta

from app.application.dtos.session import VerificationTokenRecord
from app.application.interfaces.repositories import IVerificationTokenRepository
from app.application.services.hash_service import TokenHashService
from app.domain.enums import TokenPurpose
from app.domain.exceptions import InvalidTokenException
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import Clock
from app.shared.utils.generators import generate_cuid, generate_secure_token

logger = get_logger(__name__)


class VerificationTokenService:
    """Issue and consume email-verify / password-reset tokens."""

    def __init__(
        self,
        token_repo: IVerificationTokenRepository,
        clock: Clock,
        hasher: TokenHashService | None = None,
    ) -> None:
        self._repo = token_repo
        self._clock = clock
        self._hasher = hasher or TokenHashService()

    async def issue(
        self, principal_id: str, purpose: TokenPurpose, ttl: timedelta
    ) -> tuple[str, VerificationTokenRecord]:
        """Supersede unused tokens of purpose and create a new one.

        Returns:
            (raw_token, stored_record). The raw token is not recoverable later.
        """
        now = self._clock.now()
        superseded = await self._repo.supersede_unused(principal_id, purpose, now)
        if superseded:
            logger.debug(
                "Superseded %d unused %s token(s) for principal %s",
                superseded,
                purpose.value,
                principal_id,
            )
        raw = generate_secure_token()
        record = VerificationTokenRecord(
            id=generate_cuid(),
            principal_id=principal_id,
            purpose=purpose,
            token_hash=self._hasher.hash_token(raw),
            expires_at=now + ttl,
            created_at=now,
        )
        stored = await self._repo.add(record)
        return raw, stored

    async def consume(self, raw_token: str, purpose: TokenPurpose) -> VerificationTokenRecord:
        """Atomically mark raw_token used.

        Raises:
            InvalidTokenException: Unknown, wrong purpose, used, superseded or
                expired. The caller cannot tell which; the log can.
        """
        token_hash = self._hasher.hash_token(raw_token)
        now = self._clock.now()
        record = await self._repo.consume(token_hash, purpose, now)
        if record is None:
            reason = await self._rejection_reason(token_hash, purpose)
            logger.info("Rejected %s token: %s", purpose.value, reason)
            raise InvalidTokenException()
        return record

    async def _rejection_reason(self, token_hash: str, purpose: TokenPurpose) -> str:
        existing = await self._repo.get_by_token_hash(token_hash)
        if existing is None:
            return "unknown"
        if existing.purpose != purpose:
            return "wrong_purpose"
        if existing.used_at is not None:
            return "already_used"
        if existing.superseded_at is not None:
            return "superseded"
        return "expired"
