"""
Authentication module.

Handles session tokens, password checks, session resolution from cookies
and the subscription access gate.

Public API:
- ITokenService / IAuthService: Interfaces for token and login operations
- TokenKind, StudentClaims, AdminClaims: Token contents
- AccessDecision, DenialReason: Access gate verdicts
- Auth exceptions: InvalidCredentialsError, PaymentPastDueError, etc.
"""

from .interfaces import IAuthService, ITokenService
from .models import (
    AccessDecision,
    AdminClaims,
    DenialReason,
    StudentClaims,
    TokenKind,
)
from .exceptions import (
    InvalidTokenError,
    MissingTokenError,
    InvalidCredentialsError,
    AuthNotConfiguredError,
    InsufficientPermissionsError,
    SubscriptionCanceledError,
    SubscriptionPendingError,
    PaymentPastDueError,
)

__all__ = [
    # Interfaces
    "IAuthService",
    "ITokenService",
    # Models
    "AccessDecision",
    "AdminClaims",
    "DenialReason",
    "StudentClaims",
    "TokenKind",
    # Exceptions
    "InvalidTokenError",
    "MissingTokenError",
    "InvalidCredentialsError",
    "AuthNotConfiguredError",
    "InsufficientPermissionsError",
    "SubscriptionCanceledError",
    "SubscriptionPendingError",
    "PaymentPastDueError",
]
