"""Authentication lifecycle: join, login, refresh, logout, password and email flows.

Every public operation is one unit of work: repositories stage changes and
the service commits once on success. Raising before the commit leaves the
request session to roll back, so a failed operation writes nothing. The one
exception is failed-login bookkeeping, which is committed before the error
is raised so lock counters and login history survive the rejected request.

Errors are the typed exceptions in app.domain.exceptions. Login failures and
token failures are deliberately generic (InvalidCredentialsException,
InvalidTokenException) so callers cannot probe which accounts exist.
"""

from __future__ import annotations

import asyncio
import math
from typing import TypeVar

from app.application.dtos.auth import (
    EMAIL_ALREADY_VERIFIED,
    EMAIL_VERIFIED,
    AckResult,
    AuthResult,
    ClientInfo,
    EmailVerificationResult,
    TokenPair,
)
from app.application.dtos.principal import PrincipalResult, principal_to_result
from app.application.dtos.session import LoginAttemptRecord, SessionRecord
from app.application.interfaces.repositories import (
    ILoginAttemptRepository,
    IPrincipalRepository,
    ISessionRepository,
    IVerificationTokenRepository,
)
from app.application.interfaces.services import (
    IPasswordHasher,
    ITokenService,
    IUnitOfWork,
    IVerificationNotifier,
)
from app.application.policy import AuthPolicy
from app.application.services.hash_service import TokenHashService
from app.application.services.session_registry import SessionRegistry
from app.application.services.verification_tokens import VerificationTokenService
from app.domain.entities.principal import PrincipalEntity
from app.domain.enums import PrincipalRole, PrincipalStatus, TokenPurpose
from app.domain.exceptions import (
    AccountLockedException,
    AccountSuspendedException,
    AuthorizationException,
    ConflictException,
    EmailNotVerifiedException,
    InvalidCredentialsException,
    InvalidTokenException,
    RateLimitedException,
    ResourceNotFoundException,
    SamePasswordException,
    ValidationException,
)
from app.domain.value_objects import EmailAddress, PlainPassword, Username, looks_like_email
from app.shared.enums import LoginFailureReason, SessionRevokeReason, TokenType
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import Clock
from app.shared.utils.generators import generate_cuid
from app.shared.utils.sanitization import strip_markup

logger = get_logger(__name__)

PASSWORD_RESET_ACK = (
    "If an account exists for that email, password reset instructions have been sent"
)
EMAIL_VERIFICATION_ACK = (
    "If an unverified account exists for that email, a verification link has been sent"
)
PASSWORD_CHANGED_ACK = "Password changed; all sessions have been signed out"
PASSWORD_RESET_DONE_ACK = "Password has been reset; please sign in again"

_V = TypeVar("_V")


def _parse(value_type: type[_V], raw: str, field: str) -> _V:
    """Build a value object, translating ValueError into ValidationException."""
    try:
        return value_type(raw)  # type: ignore[call-arg]
    except ValueError as e:
        raise ValidationException(str(e), field=field) from e


class AuthLifecycleService:
    """Orchestrates the credential store, hashing, tokens and session registry."""

    def __init__(
        self,
        principal_repo: IPrincipalRepository,
        session_repo: ISessionRepository,
        verification_token_repo: IVerificationTokenRepository,
        login_attempt_repo: ILoginAttemptRepository,
        password_hasher: IPasswordHasher,
        token_service: ITokenService,
        notifier: IVerificationNotifier,
        uow: IUnitOfWork,
        policy: AuthPolicy,
        clock: Clock,
        token_hasher: TokenHashService | None = None,
    ) -> None:
        self._principals = principal_repo
        self._attempts = login_attempt_repo
        self._hasher = password_hasher
        self._tokens = token_service
        self._notifier = notifier
        self._uow = uow
        self._policy = policy
        self._clock = clock
        self._sessions = SessionRegistry(session_repo, token_service, clock, token_hasher)
        self._verification = VerificationTokenService(
            verification_token_repo, clock, token_hasher
        )

    # ---- Helpers ----

    async def _hash_password(self, plaintext: str) -> str:
        return await asyncio.to_thread(self._hasher.hash, plaintext)

    async def _verify_password(self, plaintext: str, hashed: str) -> bool:
        return await asyncio.to_thread(self._hasher.verify, plaintext, hashed)

    async def _require_principal(self, principal_id: str) -> PrincipalEntity:
        principal = await self._principals.get_by_id(principal_id)
        if principal is None:
            raise ResourceNotFoundException("principal", principal_id)
        return principal

    async def _issue_pair(
        self,
        principal: PrincipalEntity,
        *,
        remember_me: bool = False,
        client: ClientInfo | None = None,
    ) -> TokenPair:
        session, refresh = await self._sessions.create(
            principal.id,
            self._policy.refresh_ttl(remember_me),
            remember_me=remember_me,
            client=client,
        )
        access = self._tokens.issue_access_token(principal.id, principal.role)
        return TokenPair(
            access=access.token,
            refresh=refresh.token,
            expired_at=access.expires_at,
            refreshable_until=session.expires_at,
        )

    async def _record_attempt(
        self,
        identifier: str,
        role: PrincipalRole,
        *,
        succeeded: bool,
        principal_id: str | None = None,
        failure_reason: LoginFailureReason | None = None,
        client: ClientInfo | None = None,
    ) -> None:
        client = client or ClientInfo()
        await self._attempts.add(
            LoginAttemptRecord(
                id=generate_cuid(),
                identifier=identifier,
                role=role,
                succeeded=succeeded,
                principal_id=principal_id,
                failure_reason=failure_reason.value if failure_reason else None,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
                created_at=self._clock.now(),
            )
        )

    # ---- Join ----

    @traced("auth.join")
    async def join(
        self,
        email: str,
        password: str,
        *,
        role: PrincipalRole = PrincipalRole.MEMBER,
        username: str | None = None,
        display_name: str | None = None,
        remember_me: bool = False,
        client: ClientInfo | None = None,
    ) -> AuthResult:
        """Register a principal and sign it in.

        The principal starts in pending_verification when the policy requires
        email verification, otherwise active. An email_verify token is issued
        and handed to the notifier after the commit.

        Raises:
            AuthorizationException: role is not open to self-registration.
            ValidationException: malformed email, username or password.
            ConflictException: email or username already used in this role.
        """
        if role not in self._policy.self_registration_roles:
            raise AuthorizationException(resource="principal", action=f"join as {role.value}")
        address = _parse(EmailAddress, email, "email")
        secret = _parse(PlainPassword, password, "password")
        handle = _parse(Username, username, "username") if username is not None else None

        # Friendly early conflict; the unique index still decides under concurrency.
        if await self._principals.get_by_email(address.normalized, role):
            raise ConflictException("email")
        if handle and await self._principals.get_by_username(handle.normalized, role):
            raise ConflictException("username")

        now = self._clock.now()
        principal = PrincipalEntity(
            id=generate_cuid(),
            role=role,
            status=(
                PrincipalStatus.PENDING_VERIFICATION
                if self._policy.require_email_verification
                else PrincipalStatus.ACTIVE
            ),
            email=address.value,
            email_normalized=address.normalized,
            username=handle.value if handle else None,
            username_normalized=handle.normalized if handle else None,
            display_name=strip_markup(display_name),
            credential_hash=await self._hash_password(secret.value),
            created_at=now,
            updated_at=now,
        )
        principal = await self._principals.add(principal)
        pair = await self._issue_pair(principal, remember_me=remember_me, client=client)
        raw_token, token = await self._verification.issue(
            principal.id, TokenPurpose.EMAIL_VERIFY, self._policy.email_verify_token_ttl
        )
        await self._uow.commit()

        logger.info("Principal %s joined as %s", principal.id, role.value)
        await self._notifier.send_email_verification(address.value, raw_token, token.expires_at)
        return AuthResult(principal=principal_to_result(principal), token=pair)

    @traced("auth.join_guest")
    async def join_guest(self, client: ClientInfo | None = None) -> AuthResult:
        """Create a credential-less guest principal with its own session."""
        now = self._clock.now()
        principal = await self._principals.add(
            PrincipalEntity(
                id=generate_cuid(),
                role=PrincipalRole.GUEST,
                status=PrincipalStatus.ACTIVE,
                created_at=now,
                updated_at=now,
            )
        )
        pair = await self._issue_pair(principal, client=client)
        await self._uow.commit()
        logger.info("Guest principal %s joined", principal.id)
        return AuthResult(principal=principal_to_result(principal), token=pair)

    # ---- Login ----

    @traced("auth.login")
    async def login(
        self,
        identifier: str,
        password: str,
        *,
        role: PrincipalRole = PrincipalRole.MEMBER,
        remember_me: bool = False,
        client: ClientInfo | None = None,
    ) -> AuthResult:
        """Authenticate by email (identifier contains '@') or username.

        Unknown identifiers, wrong passwords, guests and deleted principals all
        raise the same InvalidCredentialsException. Suspension is only
        disclosed after the password has verified.

        Raises:
            InvalidCredentialsException: Any credential mismatch.
            AccountLockedException: Too many recent failures.
            AccountSuspendedException: Suspended or banned principal.
            EmailNotVerifiedException: Policy requires a verified email.
        """
        normalized = (identifier or "").strip().casefold()
        now = self._clock.now()
        if looks_like_email(normalized):
            principal = await self._principals.get_by_email(normalized, role)
        else:
            principal = await self._principals.get_by_username(normalized, role)

        credential = principal.credential_hash if principal is not None else None
        if principal is None or not credential:
            await self._verify_password(password, self._hasher.dummy_hash())
            await self._record_attempt(
                normalized,
                role,
                succeeded=False,
                failure_reason=LoginFailureReason.UNKNOWN_IDENTIFIER,
                client=client,
            )
            await self._uow.commit()
            raise InvalidCredentialsException()

        locked_until = principal.locked_until
        if locked_until is not None and principal.is_locked(now):
            await self._record_attempt(
                normalized,
                role,
                succeeded=False,
                principal_id=principal.id,
                failure_reason=LoginFailureReason.LOCKED,
                client=client,
            )
            await self._uow.commit()
            raise AccountLockedException(locked_until, principal.lock_retry_after_seconds(now))

        if not await self._verify_password(password, credential):
            # Incremented in SQL; the copy read above may already be stale.
            locked_until = await self._principals.record_failed_login(
                principal.id,
                now,
                threshold=self._policy.lockout_threshold,
                window=self._policy.lockout_window,
                lock_duration=self._policy.lockout_duration,
            )
            await self._record_attempt(
                normalized,
                role,
                succeeded=False,
                principal_id=principal.id,
                failure_reason=LoginFailureReason.BAD_PASSWORD,
                client=client,
            )
            await self._uow.commit()
            if locked_until is not None:
                logger.warning(
                    "Principal %s locked until %s after repeated failed logins",
                    principal.id,
                    locked_until,
                )
            raise InvalidCredentialsException()

        if not principal.can_authenticate():
            await self._record_attempt(
                normalized,
                role,
                succeeded=False,
                principal_id=principal.id,
                failure_reason=LoginFailureReason.SUSPENDED,
                client=client,
            )
            await self._uow.commit()
            raise AccountSuspendedException(principal.status.value)

        if (
            self._policy.require_verified_email_for_login
            and principal.email is not None
            and not principal.email_verified
        ):
            await self._record_attempt(
                normalized,
                role,
                succeeded=False,
                principal_id=principal.id,
                failure_reason=LoginFailureReason.EMAIL_NOT_VERIFIED,
                client=client,
            )
            await self._uow.commit()
            raise EmailNotVerifiedException()

        await self._principals.record_login(principal.id, now)
        principal.register_successful_login(now)
        pair = await self._issue_pair(principal, remember_me=remember_me, client=client)
        await self._record_attempt(
            normalized, role, succeeded=True, principal_id=principal.id, client=client
        )
        await self._uow.commit()
        return AuthResult(principal=principal_to_result(principal), token=pair)

    # ---- Refresh / logout ----

    @traced("auth.refresh")
    async def refresh(
        self, refresh_token: str, client: ClientInfo | None = None
    ) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        With rotation on, the presented session is revoked and a successor is
        issued; presenting a rotated token again revokes the whole family.

        Raises:
            InvalidTokenException: Malformed, expired, unknown, revoked or
                rotated token, or the owning principal can no longer sign in.
        """
        claims = self._tokens.verify(refresh_token, TokenType.REFRESH)
        session = await self._sessions.find_by_token(refresh_token)
        if session is None or session.principal_id != claims.subject:
            raise InvalidTokenException()

        if session.revoked_at is not None:
            if session.revoked_reason == SessionRevokeReason.ROTATED.value:
                revoked = await self._sessions.revoke_family(
                    session.family_id, SessionRevokeReason.REPLAY_DETECTED
                )
                await self._uow.commit()
                logger.warning(
                    "Refresh token replay for principal %s; revoked %d session(s) in family %s",
                    session.principal_id,
                    revoked,
                    session.family_id,
                )
            raise InvalidTokenException()

        if not session.is_active(self._clock.now()):
            raise InvalidTokenException()

        principal = await self._principals.get_by_id(session.principal_id)
        if principal is None or not principal.can_authenticate():
            raise InvalidTokenException()

        if self._policy.refresh_token_rotation:
            successor, issued = await self._sessions.rotate(session, client)
            refresh_value = issued.token
            refreshable_until = successor.expires_at
        else:
            await self._sessions.touch(session.id)
            refresh_value = refresh_token
            refreshable_until = session.expires_at

        access = self._tokens.issue_access_token(principal.id, principal.role)
        await self._uow.commit()
        return TokenPair(
            access=access.token,
            refresh=refresh_value,
            expired_at=access.expires_at,
            refreshable_until=refreshable_until,
        )

    async def logout(self, refresh_token: str) -> None:
        """Revoke the caller's session. Idempotent for already revoked sessions.

        Raises:
            InvalidTokenException: token does not belong to any session.
        """
        session = await self._sessions.find_by_token(refresh_token)
        if session is None:
            raise InvalidTokenException()
        await self._sessions.revoke(session.id, SessionRevokeReason.LOGOUT)
        await self._uow.commit()

    async def logout_session(self, principal_id: str, session_id: str) -> None:
        """Revoke one of principal's own sessions by id (idempotent)."""
        session = await self._sessions.get(session_id)
        if session is None or session.principal_id != principal_id:
            raise ResourceNotFoundException("session", session_id)
        await self._sessions.revoke(session.id, SessionRevokeReason.LOGOUT)
        await self._uow.commit()

    async def logout_all(self, principal_id: str) -> int:
        """Revoke every session of principal ("log out of all devices")."""
        count = await self._sessions.revoke_all_for_principal(
            principal_id, SessionRevokeReason.LOGOUT_ALL
        )
        await self._uow.commit()
        return count

    # ---- Passwords ----

    @traced("auth.change_password")
    async def change_password(
        self, principal_id: str, current_password: str, new_password: str
    ) -> AckResult:
        """Replace the credential and revoke every session in the same commit.

        Raises:
            ResourceNotFoundException: unknown principal.
            InvalidCredentialsException: current_password does not verify.
            SamePasswordException: new equals current (policy).
            ValidationException: new password fails length rules.
        """
        principal = await self._require_principal(principal_id)
        current_hash = principal.credential_hash
        if current_hash is None:
            raise InvalidCredentialsException()
        secret = _parse(PlainPassword, new_password, "new_password")
        if not await self._verify_password(current_password, current_hash):
            raise InvalidCredentialsException()
        if self._policy.reject_same_password and secret.value == current_password:
            raise SamePasswordException()

        new_hash = await self._hash_password(secret.value)
        if not await self._principals.set_credential(
            principal.id, new_hash, self._clock.now(), expected_hash=current_hash
        ):
            # Replaced concurrently: current_password no longer describes the credential.
            raise InvalidCredentialsException()
        await self._sessions.revoke_all_for_principal(
            principal.id, SessionRevokeReason.PASSWORD_CHANGED
        )
        await self._uow.commit()
        logger.info("Password changed for principal %s", principal.id)
        return AckResult(message=PASSWORD_CHANGED_ACK)

    @traced("auth.request_password_reset")
    async def request_password_reset(
        self, email: str, *, role: PrincipalRole = PrincipalRole.MEMBER
    ) -> AckResult:
        """Issue a password_reset token if email matches a principal that can sign in.

        Always returns the same acknowledgement. The HTTP layer runs this after
        the response has been sent, so response timing does not depend on
        whether the address belongs to an account.
        """
        ack = AckResult(message=PASSWORD_RESET_ACK)
        try:
            address = EmailAddress(email)
        except ValueError:
            return ack
        principal = await self._principals.get_by_email(address.normalized, role)
        if (
            principal is None
            or principal.email is None
            or not principal.can_authenticate()
            or not principal.has_credential()
        ):
            logger.debug("Password reset requested for an ineligible address")
            return ack

        raw_token, token = await self._verification.issue(
            principal.id, TokenPurpose.PASSWORD_RESET, self._policy.password_reset_token_ttl
        )
        await self._uow.commit()
        await self._notifier.send_password_reset(principal.email, raw_token, token.expires_at)
        return ack

    @traced("auth.confirm_password_reset")
    async def confirm_password_reset(self, token: str, new_password: str) -> AckResult:
        """Consume a password_reset token, set the new credential, revoke all sessions.

        A completed reset also clears any login lock.

        Raises:
            InvalidTokenException: token unknown, used, superseded or expired,
                or its principal can no longer sign in.
            ValidationException: new password fails length rules.
        """
        secret = _parse(PlainPassword, new_password, "new_password")
        record = await self._verification.consume(token, TokenPurpose.PASSWORD_RESET)
        principal = await self._principals.get_by_id(record.principal_id)
        if (
            principal is None
            or principal.credential_hash is None
            or not principal.can_authenticate()
        ):
            raise InvalidTokenException()

        new_hash = await self._hash_password(secret.value)
        if not await self._principals.set_credential(
            principal.id,
            new_hash,
            self._clock.now(),
            expected_hash=principal.credential_hash,
            clear_lock=True,
        ):
            raise InvalidTokenException()
        await self._sessions.revoke_all_for_principal(
            principal.id, SessionRevokeReason.PASSWORD_RESET
        )
        await self._uow.commit()
        logger.info("Password reset completed for principal %s", principal.id)
        return AckResult(message=PASSWORD_RESET_DONE_ACK)

    # ---- Email verification ----

    @traced("auth.request_email_verification")
    async def request_email_verification(
        self, email: str, *, role: PrincipalRole = PrincipalRole.MEMBER
    ) -> AckResult:
        """(Re)send an email_verify token, at most once per cooldown window.

        Unknown addresses and already verified principals get the same
        acknowledgement and no token.

        Raises:
            RateLimitedException: a token was requested within the cooldown.
        """
        ack = AckResult(message=EMAIL_VERIFICATION_ACK)
        try:
            address = EmailAddress(email)
        except ValueError:
            return ack
        principal = await self._principals.get_by_email(address.normalized, role)
        if (
            principal is None
            or principal.email is None
            or principal.email_verified
            or not principal.can_authenticate()
        ):
            return ack

        now = self._clock.now()
        cooldown = self._policy.verification_resend_cooldown
        # The guarded stamp decides; two parallel requests cannot both pass.
        if not await self._principals.claim_verification_request(principal.id, now, cooldown):
            current = await self._principals.get_by_id(principal.id)
            if current is None:
                return ack
            last = current.verification_requested_at or now
            remaining = (cooldown - (now - last)).total_seconds()
            raise RateLimitedException(max(1, math.ceil(remaining)))

        raw_token, token = await self._verification.issue(
            principal.id, TokenPurpose.EMAIL_VERIFY, self._policy.email_verify_token_ttl
        )
        await self._uow.commit()
        await self._notifier.send_email_verification(principal.email, raw_token, token.expires_at)
        return ack

    @traced("auth.confirm_email_verification")
    async def confirm_email_verification(self, token: str) -> EmailVerificationResult:
        """Consume an email_verify token and mark the email verified.

        Returns status "already_verified" when the principal was verified by
        other means in the meantime.

        Raises:
            InvalidTokenException: token unknown, used, superseded or expired,
                or its principal is gone.
        """
        record = await self._verification.consume(token, TokenPurpose.EMAIL_VERIFY)
        principal = await self._principals.get_by_id(record.principal_id)
        if principal is None:
            raise InvalidTokenException()
        changed = await self._principals.mark_email_verified(principal.id, self._clock.now())
        await self._uow.commit()
        return EmailVerificationResult(
            status=EMAIL_VERIFIED if changed else EMAIL_ALREADY_VERIFIED,
            principal_id=principal.id,
        )

    # ---- Bearer authentication and self-service reads ----

    async def authenticate_access_token(self, token: str) -> PrincipalEntity:
        """Resolve a bearer access token to a principal that may still sign in.

        Raises:
            InvalidTokenException: token invalid or principal suspended/deleted.
        """
        claims = self._tokens.verify(token, TokenType.ACCESS)
        principal = await self._principals.get_by_id(claims.subject)
        if principal is None or not principal.can_authenticate():
            raise InvalidTokenException()
        return principal

    async def get_profile(self, principal_id: str) -> PrincipalResult:
        return principal_to_result(await self._require_principal(principal_id))

    async def list_sessions(self, principal_id: str) -> list[SessionRecord]:
        await self._require_principal(principal_id)
        return await self._sessions.list_active(principal_id)

    async def login_history(
        self, principal_id: str, skip: int = 0, limit: int = 50
    ) -> list[LoginAttemptRecord]:
        await self._require_principal(principal_id)
        return await self._attempts.list_for_principal(principal_id, skip=skip, limit=limit)
