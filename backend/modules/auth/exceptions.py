"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    PaymentRequiredError,
)


class InvalidTokenError(AuthenticationError):
    """Raised when a session token is missing its kind, invalid or expired."""

    def __init__(self, message: str = "Invalid or expired session"):
        super().__init__(message, code="INVALID_TOKEN")


class MissingTokenError(AuthenticationError):
    """Raised when no session cookie is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Raised when an email/password pair does not match."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class AuthNotConfiguredError(AuthenticationError):
    """Raised when a signing secret or admin credential is not configured."""

    def __init__(self, missing: str):
        super().__init__(
            "Server authentication not configured",
            code="AUTH_NOT_CONFIGURED",
            details={"missing": missing},
        )


class InsufficientPermissionsError(AuthorizationError):
    """Raised when a valid session belongs to the wrong principal kind."""

    def __init__(self, required_role: str, user_role: str):
        super().__init__(
            f"Insufficient permissions. Required: {required_role}, has: {user_role}",
            code="INSUFFICIENT_PERMISSIONS",
            details={"required_role": required_role, "user_role": user_role},
        )


class SubscriptionCanceledError(AuthorizationError):
    """Raised when a canceled student tries to use the course."""

    def __init__(self, student_id: Optional[str] = None):
        super().__init__(
            "Your subscription has been canceled. Please contact support.",
            code="SUBSCRIPTION_CANCELED",
            details={"student_id": student_id} if student_id else {},
        )


class SubscriptionPendingError(AuthorizationError):
    """Raised when pending students are blocked by configuration."""

    def __init__(self, student_id: Optional[str] = None):
        super().__init__(
            "Your subscription has not been activated yet.",
            code="SUBSCRIPTION_PENDING",
            details={"student_id": student_id} if student_id else {},
        )


class PaymentPastDueError(PaymentRequiredError):
    """
    Raised when a past-due student tries to use the course.

    Carries the billing customer reference so the client can send the
    student to a payment-method update flow.
    """

    def __init__(self, billing_customer_ref: Optional[str] = None):
        super().__init__(
            "Your payment is past due. Please update your payment method.",
            code="PAYMENT_PAST_DUE",
            details={"past_due": True, "billing_customer_ref": billing_customer_ref},
        )
