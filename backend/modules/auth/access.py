"""
Access gate.

Decides whether a student may use the course, given the live student
record. Rules are evaluated in order and the first match wins:

1. no student            -> UNAUTHENTICATED
2. status canceled       -> SUBSCRIPTION_CANCELED
3. status past_due       -> PAYMENT_PAST_DUE (with billing customer ref)
4. status pending        -> allowed unless allow_pending is False
5. otherwise (active)    -> allowed
"""

from typing import Optional

from shared.models import SubscriptionStatus
from modules.students.models import Student

from .exceptions import (
    MissingTokenError,
    PaymentPastDueError,
    SubscriptionCanceledError,
    SubscriptionPendingError,
)
from .models import AccessDecision, DenialReason


class AccessGate:
    """Stateless decision table over a student's subscription status."""

    def __init__(self, allow_pending: bool = True):
        self._allow_pending = allow_pending

    def check_access(self, student: Optional[Student]) -> AccessDecision:
        """Evaluate the decision table for a student (or its absence)."""
        if student is None:
            return AccessDecision.deny(DenialReason.UNAUTHENTICATED)

        status = student.subscription_status
        if status == SubscriptionStatus.CANCELED:
            return AccessDecision.deny(DenialReason.SUBSCRIPTION_CANCELED)
        if status == SubscriptionStatus.PAST_DUE:
            return AccessDecision.deny(
                DenialReason.PAYMENT_PAST_DUE,
                billing_customer_ref=student.billing_customer_ref,
            )
        if status == SubscriptionStatus.PENDING and not self._allow_pending:
            return AccessDecision.deny(DenialReason.SUBSCRIPTION_PENDING)
        return AccessDecision.allow()

    def enforce(self, student: Optional[Student]) -> Student:
        """
        Raise the exception matching a denial, or return the student.

        Raises:
            MissingTokenError: No student
            SubscriptionCanceledError: Status canceled
            PaymentPastDueError: Status past_due
            SubscriptionPendingError: Status pending while pending is blocked
        """
        decision = self.check_access(student)
        if decision.allowed:
            return student

        student_id = student.id if student else None
        if decision.reason == DenialReason.SUBSCRIPTION_CANCELED:
            raise SubscriptionCanceledError(student_id)
        if decision.reason == DenialReason.PAYMENT_PAST_DUE:
            raise PaymentPastDueError(decision.billing_customer_ref)
        if decision.reason == DenialReason.SUBSCRIPTION_PENDING:
            raise SubscriptionPendingError(student_id)
        raise MissingTokenError()
