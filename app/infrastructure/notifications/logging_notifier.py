"""Notifier that records deliveries in the application log.

Email delivery is an external collaborator; this implementation lets a
deployment (or a developer running locally) see that a link was issued.
The raw token is only written at DEBUG level.
"""

from datetime import datetime

from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import to_iso8601

logger = get_logger(__name__)


def _mask_email(email: str) -> str:
    """Return a log-safe form of an address (first character of the local part)."""
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}" if domain else "***"


class LoggingVerificationNotifier:
    """IVerificationNotifier that logs instead of sending email."""

    async def send_email_verification(
        self, email: str, token: str, expires_at: datetime
    ) -> None:
        logger.info(
            "Email verification issued for %s (expires %s)",
            _mask_email(email),
            to_iso8601(expires_at),
        )
        logger.debug("Email verification token for %s: %s", email, token)

    async def send_password_reset(
        self, email: str, token: str, expires_at: datetime
    ) -> None:
        logger.info(
            "Password reset issued for %s (expires %s)",
            _mask_email(email),
            to_iso8601(expires_at),
        )
        logger.debug("Password reset token for %s: %s", email, token)
