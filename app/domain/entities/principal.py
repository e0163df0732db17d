"""Principal domain entity.

Represents any authenticatable actor (guest, member, moderator, admin),
independent of persistence. Lifecycle:

    unregistered -> pending_verification -> active -> suspended | banned -> deleted
"""

from dataclasses import dataclass, field
from datetime import datetime

from app.domain.enums import LifecycleState, PrincipalRole, PrincipalStatus
from app.domain.exceptions import ValidationException


@dataclass
class PrincipalEntity:
    """Domain entity for a principal (business rules separate from persistence).

    Encapsulates the lifecycle rules and lock checks applied to a loaded copy.
    Counters and status changes are persisted by the repository's guarded
    writes, never by writing the whole entity back. Validation runs on construction.
    """

    id: str
    role: PrincipalRole
    status: PrincipalStatus
    email: str | None = None
    email_normalized: str | None = None
    username: str | None = None
    username_normalized: str | None = None
    display_name: str | None = None
    credential_hash: str | None = field(default=None, repr=False)
    email_verified: bool = False
    status_reason: str | None = None
    failed_login_count: int = 0
    failed_login_window_started_at: datetime | None = None
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    verification_requested_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate principal invariants. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Principal ID is required", field="id")
        if self.role != PrincipalRole.GUEST and not self.credential_hash:
            raise ValidationException(
                "A credential is required for non-guest principals",
                field="credential_hash",
            )
        if self.email is not None and not self.email_normalized:
            raise ValidationException(
                "Normalized email is required when email is set", field="email"
            )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def lifecycle_state(self) -> LifecycleState:
        """Return the derived lifecycle state (soft delete wins over status)."""
        if self.is_deleted:
            return LifecycleState.DELETED
        return LifecycleState(self.status.value)

    def can_authenticate(self) -> bool:
        """Return whether tokens may be issued or refreshed for this principal.

        Returns:
            True for pending_verification and active principals; False when
            suspended, banned, or deleted.
        """
        return self.lifecycle_state in (
            LifecycleState.PENDING_VERIFICATION,
            LifecycleState.ACTIVE,
        )

    def has_credential(self) -> bool:
        return bool(self.credential_hash)

    # ---- Lockout ----

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and now < self.locked_until

    def lock_retry_after_seconds(self, now: datetime) -> int:
        """Seconds until the current lock elapses (at least 1 while locked)."""
        if self.locked_until is None or now >= self.locked_until:
            return 0
        return max(1, int((self.locked_until - now).total_seconds()))

    def register_successful_login(self, now: datetime) -> None:
        self.failed_login_count = 0
        self.failed_login_window_started_at = None
        self.locked_until = None
        self.last_login_at = now

    def unlock(self) -> None:
        """Clear lock state (staff intervention or completed password reset)."""
        self.failed_login_count = 0
        self.failed_login_window_started_at = None
        self.locked_until = None

    # ---- Administrative transitions ----

    def _ensure_not_deleted(self) -> None:
        if self.is_deleted:
            raise ValueError("Principal is deleted")

    def suspend(self, reason: str | None = None) -> None:
        """Set status to SUSPENDED. Banned principals stay banned.

        Raises:
            ValueError: If the principal is deleted or banned.
        """
        self._ensure_not_deleted()
        if self.status == PrincipalStatus.BANNED:
            raise ValueError("Principal is banned")
        self.status = PrincipalStatus.SUSPENDED
        self.status_reason = reason

    def ban(self, reason: str | None = None) -> None:
        """Set status to BANNED. Idempotent when already banned.

        Raises:
            ValueError: If the principal is deleted.
        """
        self._ensure_not_deleted()
        self.status = PrincipalStatus.BANNED
        self.status_reason = reason

    def reinstate(self) -> None:
        """Return a suspended or banned principal to its pre-sanction state.

        Unverified principals go back to pending_verification; everyone else
        becomes active. No-op for principals that are not sanctioned.

        Raises:
            ValueError: If the principal is deleted.
        """
        self._ensure_not_deleted()
        if self.status not in (PrincipalStatus.SUSPENDED, PrincipalStatus.BANNED):
            return
        self.status = (
            PrincipalStatus.ACTIVE
            if self.email_verified or self.email is None
            else PrincipalStatus.PENDING_VERIFICATION
        )
        self.status_reason = None

    def soft_delete(self, now: datetime) -> None:
        """Mark the principal deleted. Deletion is irreversible.

        Raises:
            ValueError: If already deleted.
        """
        self._ensure_not_deleted()
        self.deleted_at = now
