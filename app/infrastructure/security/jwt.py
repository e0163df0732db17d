"""JWT access and refresh tokens (python-jose).

The signing secret, algorithm, issuer and lifetimes come from an explicit
AuthPolicy; the current time comes from an injected Clock. Expiry is checked
against that clock rather than the library's wall-clock check so TTL
behaviour is testable without sleeping.
"""

from datetime import datetime
from typing import Any, cast

from jose import JWTError, jwt

from app.application.dtos.auth import IssuedToken, TokenClaims
from app.application.policy import AuthPolicy
from app.domain.enums import PrincipalRole
from app.domain.exceptions import InvalidTokenException
from app.shared.enums import TokenType
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import Clock, from_timestamp_utc
from app.shared.utils.generators import generate_secure_token

logger = get_logger(__name__)

_DECODE_OPTIONS = {
    "verify_exp": False,
    "require_exp": True,
    "require_iat": True,
    "require_sub": True,
    "require_iss": True,
    "require_jti": True,
}


class JWTTokenService:
    """Sign and verify access/refresh tokens (ITokenService)."""

    def __init__(self, policy: AuthPolicy, clock: Clock) -> None:
        self._policy = policy
        self._clock = clock

    def _encode(self, claims: dict[str, Any]) -> str:
        encoded = jwt.encode(
            claims,
            self._policy.signing_secret,
            algorithm=self._policy.algorithm,
        )
        return cast(str, encoded)

    def _base_claims(
        self, subject: str, token_type: TokenType, expires_at: datetime
    ) -> dict[str, Any]:
        now = self._clock.now()
        return {
            "sub": subject,
            "iss": self._policy.issuer,
            "typ": token_type.value,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": generate_secure_token(16),
        }

    def issue_access_token(self, principal_id: str, role: PrincipalRole) -> IssuedToken:
        """Create a short-lived access token carrying principal id and role."""
        expires_at = self._clock.now() + self._policy.access_token_ttl
        claims = self._base_claims(principal_id, TokenType.ACCESS, expires_at)
        claims["role"] = role.value
        return IssuedToken(
            token=self._encode(claims), expires_at=from_timestamp_utc(claims["exp"])
        )

    def issue_refresh_token(
        self,
        principal_id: str,
        session_id: str,
        family_id: str,
        expires_at: datetime,
    ) -> IssuedToken:
        """Create a refresh token bound to a session (sid) and rotation family (fam)."""
        claims = self._base_claims(principal_id, TokenType.REFRESH, expires_at)
        claims["sid"] = session_id
        claims["fam"] = family_id
        return IssuedToken(
            token=self._encode(claims), expires_at=from_timestamp_utc(claims["exp"])
        )

    def verify(self, token: str, expected_type: TokenType | None = None) -> TokenClaims:
        """Verify signature, issuer, required claims, type and expiry.

        Args:
            token: Encoded JWT (e.g. from the Authorization header).
            expected_type: Reject tokens whose typ differs (access vs refresh).

        Returns:
            Verified claims.

        Raises:
            InvalidTokenException: On any failure; the token is never partially trusted.
        """
        try:
            payload = jwt.decode(
                token,
                self._policy.signing_secret,
                algorithms=[self._policy.algorithm],
                issuer=self._policy.issuer,
                options=_DECODE_OPTIONS,
            )
        except JWTError as e:
            logger.debug("Token rejected: %s", e)
            raise InvalidTokenException() from e

        try:
            token_type = TokenType(payload.get("typ"))
            expires_at = from_timestamp_utc(payload["exp"])
            issued_at = from_timestamp_utc(payload["iat"])
            role = PrincipalRole(payload["role"]) if "role" in payload else None
        except (TypeError, ValueError, OverflowError) as e:
            logger.debug("Token rejected: malformed claims")
            raise InvalidTokenException() from e

        if expected_type is not None and token_type != expected_type:
            logger.debug("Token rejected: expected %s, got %s", expected_type.value, token_type.value)
            raise InvalidTokenException()
        if self._clock.now() >= expires_at:
            logger.debug("Token rejected: expired")
            raise InvalidTokenException()
        if token_type == TokenType.ACCESS and role is None:
            raise InvalidTokenException()
        if token_type == TokenType.REFRESH and not (payload.get("sid") and payload.get("fam")):
            raise InvalidTokenException()

        return TokenClaims(
            subject=str(payload["sub"]),
            token_type=token_type,
            issued_at=issued_at,
            expires_at=expires_at,
            jti=str(payload["jti"]),
            role=role,
            session_id=payload.get("sid"),
            family_id=payload.get("fam"),
        )
