"""
Billing module exceptions.

These exceptions are raised by the billing module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import AcademyError, ExternalServiceError, ValidationError


class BillingError(AcademyError):
    """Base exception for billing-related errors."""

    pass


class WebhookVerificationError(BillingError):
    """Raised when Stripe webhook signature verification fails."""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            "Webhook signature verification failed",
            code="WEBHOOK_VERIFICATION_FAILED",
            details={"reason": reason} if reason else {},
        )


class MalformedEventError(ValidationError):
    """Raised when a verified event payload lacks the fields its type needs."""

    def __init__(self, event_type: str, reason: str):
        super().__init__(
            f"Malformed {event_type} event: {reason}",
            code="MALFORMED_EVENT",
            details={"event_type": event_type, "reason": reason},
        )


class BillingProviderError(ExternalServiceError):
    """Raised when a Stripe API call fails."""

    def __init__(self, message: str, stripe_error: Optional[str] = None):
        super().__init__(
            message,
            service="stripe",
            code="BILLING_PROVIDER_ERROR",
            details={"stripe_error": stripe_error} if stripe_error else {},
        )


class NoBillingCustomerError(ValidationError):
    """Raised when a billing operation needs a customer the student lacks."""

    def __init__(self, student_id: str):
        super().__init__(
            "Student has no billing customer",
            code="NO_BILLING_CUSTOMER",
            details={"student_id": student_id},
        )
