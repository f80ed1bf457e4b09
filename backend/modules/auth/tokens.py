"""
Session token service.

Issues and verifies HS256-signed JWTs for the two principal kinds. The
kind is stored in the signed payload under "type" and checked on every
verification, so a valid student token never passes as an admin token.

verify() is boolean-shaped: it returns the claims or None and never
says why a token was refused.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import logging

import jwt
from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings
from .exceptions import AuthNotConfiguredError
from .models import AdminClaims, StudentClaims, TokenClaims, TokenKind

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

_CLAIMS_MODELS: dict[TokenKind, type] = {
    TokenKind.STUDENT: StudentClaims,
    TokenKind.ADMIN: AdminClaims,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Implementation of ITokenService on PyJWT.

    The secret is injected once at construction. An empty secret is never
    replaced by a default: issuing raises AuthNotConfiguredError and
    verifying returns None.
    """

    def __init__(
        self,
        secret: str,
        student_ttl: timedelta = timedelta(days=7),
        admin_ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._secret = secret
        self._ttls = {
            TokenKind.STUDENT: student_ttl,
            TokenKind.ADMIN: admin_ttl,
        }
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        """Build the service from the process settings."""
        return cls(
            secret=settings.jwt_secret,
            student_ttl=timedelta(seconds=settings.student_token_ttl_seconds),
            admin_ttl=timedelta(seconds=settings.admin_token_ttl_seconds),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._secret)

    def ttl_for(self, kind: TokenKind) -> timedelta:
        """Lifetime of tokens of the given kind."""
        return self._ttls[kind]

    def issue(self, kind: TokenKind, claims: TokenClaims) -> str:
        """
        Sign a new token.

        Args:
            kind: Principal kind; selects lifetime and is embedded as "type"
            claims: StudentClaims for students, AdminClaims for admins

        Returns:
            Encoded JWT

        Raises:
            AuthNotConfiguredError: If no signing secret is configured
            ValueError: If the claims model does not match the kind
        """
        if not self._secret:
            raise AuthNotConfiguredError("jwt_secret")

        if not isinstance(claims, _CLAIMS_MODELS[kind]):
            raise ValueError(f"Claims of type {type(claims).__name__} cannot be issued as {kind.value}")

        issued_at = self._clock()
        expires_at = issued_at + self._ttls[kind]

        payload = claims.model_dump(mode="json")
        payload.update(
            {
                "type": kind.value,
                "iat": int(issued_at.timestamp()),
                "exp": int(expires_at.timestamp()),
            }
        )
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: Optional[str], expected_kind: TokenKind) -> Optional[TokenClaims]:
        """
        Verify a token and return its claims.

        Returns None for a bad signature, a malformed token, an elapsed
        expiry, or a kind other than expected_kind.
        """
        if not token or not self._secret:
            return None

        try:
            # Expiry is checked below against the injected clock.
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["exp", "iat", "type"],
                },
            )
        except jwt.InvalidTokenError:
            return None

        if payload.get("type") != expected_kind.value:
            return None

        expires_at = payload.get("exp")
        if not isinstance(expires_at, (int, float)) or isinstance(expires_at, bool):
            return None
        if self._clock().timestamp() > expires_at:
            return None

        try:
            return _CLAIMS_MODELS[expected_kind].model_validate(payload)
        except PydanticValidationError:
            logger.warning(f"Signed {expected_kind.value} token carried malformed claims")
            return None
