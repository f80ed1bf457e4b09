"""
Authentication module interface.

Other modules should depend on these protocols, not the concrete
implementations. This enables testing with mocks.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import StudentLogin, TokenClaims, TokenKind


@runtime_checkable
class ITokenService(Protocol):
    """Issues and verifies typed, expiring session tokens."""

    def issue(self, kind: TokenKind, claims: TokenClaims) -> str:
        """
        Sign a token for a principal kind.

        Raises:
            AuthNotConfiguredError: If no signing secret is configured
        """
        ...

    def verify(self, token: Optional[str], expected_kind: TokenKind) -> Optional[TokenClaims]:
        """
        Verify a token of the expected kind.

        Returns:
            The claims, or None for any failure (signature, structure,
            expiry, kind mismatch). Never raises.
        """
        ...


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for login operations.

    This protocol defines the contract that the auth module exposes
    to the API layer.
    """

    async def login_student(self, email: str, password: str) -> StudentLogin:
        """
        Authenticate a student by email and password.

        Args:
            email: Email address (case-insensitive)
            password: Plain-text password

        Returns:
            StudentLogin with a signed student token and the principal

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            SubscriptionCanceledError: Student is canceled
            PaymentPastDueError: Student is past due
        """
        ...

    async def login_admin(self, email: str, password: str) -> str:
        """
        Authenticate the configured admin.

        Returns:
            A signed admin token

        Raises:
            AuthNotConfiguredError: Admin credentials are not configured
            InvalidCredentialsError: Wrong email or password
        """
        ...
