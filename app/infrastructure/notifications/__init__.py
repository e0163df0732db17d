"""Delivery of verification and password-reset tokens."""

from app.infrastructure.notifications.logging_notifier import LoggingVerificationNotifier

__all__ = ["LoggingVerificationNotifier"]
