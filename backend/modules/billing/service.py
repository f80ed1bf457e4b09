"""
Billing webhook ingestion.

Processes Stripe webhooks with:
- Signature verification before any parsing or dispatch
- Typed event dispatch with a default for unrecognized types
- Idempotent handlers: redelivering an event leaves the same state and
  never duplicates a payment record
- Last-write-wins status updates (optionally skipping stale events)

Status transitions applied here are constrained by event meaning:
canceled is terminal for every event except a completed checkout.
"""

from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, Optional
import json
import logging

from shared.config import Settings
from shared.models import StudentTier, SubscriptionStatus
from modules.students.interfaces import IStudentRepository
from modules.students.models import PaymentRecord, PaymentStatus, PendingEnrollment, Student

from .events import cents_to_amount, parse_event
from .exceptions import MalformedEventError, WebhookVerificationError
from .interfaces import IBillingProvider
from .models import (
    BillingEvent,
    CheckoutCompleted,
    IngestionResult,
    InvoicePaymentFailed,
    InvoicePaymentSucceeded,
    RejectionReason,
    SubscriptionDeleted,
    SubscriptionUpdated,
)

logger = logging.getLogger(__name__)

# Stripe subscription status -> local status. Anything else maps to active.
_PROCESSOR_STATUS_MAP = {
    "past_due": SubscriptionStatus.PAST_DUE,
    "canceled": SubscriptionStatus.CANCELED,
    "unpaid": SubscriptionStatus.CANCELED,
}


def map_processor_status(processor_status: str) -> SubscriptionStatus:
    """Map Stripe's subscription status vocabulary to SubscriptionStatus."""
    return _PROCESSOR_STATUS_MAP.get(processor_status, SubscriptionStatus.ACTIVE)


class BillingWebhookService:
    """
    Applies Stripe events to student records.

    Holds no per-request state; concurrent deliveries only meet in the
    store, where the last status write wins.
    """

    def __init__(
        self,
        provider: IBillingProvider,
        students: IStudentRepository,
        settings: Settings,
    ):
        self._provider = provider
        self._students = students
        self._default_tier = StudentTier(settings.default_tier)
        self._reject_stale = settings.reject_stale_billing_events
        self._price_tiers: dict[str, StudentTier] = {
            price: StudentTier.SELF_PACED
            for price in (
                settings.stripe_price_self_paced,
                settings.stripe_price_self_paced_installment,
            )
            if price
        }
        self._handlers: dict[type, Callable[[BillingEvent], Awaitable[None]]] = {
            CheckoutCompleted: self._handle_checkout_completed,
            InvoicePaymentFailed: self._handle_payment_failed,
            InvoicePaymentSucceeded: self._handle_payment_succeeded,
            SubscriptionDeleted: self._handle_subscription_deleted,
            SubscriptionUpdated: self._handle_subscription_updated,
        }

    def tier_for_price(self, price_id: Optional[str]) -> StudentTier:
        """Look up the tier bought with a price, falling back to the default tier."""
        if price_id and price_id in self._price_tiers:
            return self._price_tiers[price_id]
        return self._default_tier

    async def ingest(
        self,
        raw_payload: bytes,
        signature_header: Optional[str],
    ) -> IngestionResult:
        """
        Verify, parse and apply one webhook delivery.

        Returns:
            IngestionResult; never raises
        """
        if not signature_header:
            logger.warning("Webhook rejected: no signature header")
            return IngestionResult.rejected(RejectionReason.MISSING_SIGNATURE)

        try:
            self._provider.verify_signature(raw_payload, signature_header)
        except WebhookVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e.details.get('reason', e.message)}")
            return IngestionResult.rejected(RejectionReason.INVALID_SIGNATURE)

        try:
            event = parse_event(json.loads(raw_payload))
        except (ValueError, MalformedEventError) as e:
            logger.warning(f"Webhook rejected: malformed payload: {e}")
            return IngestionResult.rejected(RejectionReason.MALFORMED_EVENT)

        logger.info(f"Received webhook: {event.type} ({event.event_id})")

        try:
            handled = await self.apply(event)
        except Exception:
            # Answer 500 so Stripe redelivers; handlers tolerate replays.
            logger.exception(f"Error processing webhook {event.type} ({event.event_id})")
            return IngestionResult.rejected(RejectionReason.HANDLER_FAILED, event)

        return IngestionResult(
            accepted=True,
            event_id=event.event_id,
            event_type=event.type,
            handled=handled,
        )

    async def apply(self, event: BillingEvent) -> bool:
        """Dispatch a parsed event to its handler."""
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.info(f"Unhandled event type: {event.type}")
            return False
        await handler(event)
        return True

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    async def _handle_checkout_completed(self, event: CheckoutCompleted) -> None:
        if not event.email:
            logger.warning(f"Checkout {event.session_id} completed without a customer email")
            return

        price_id = event.price_id or self._provider.get_checkout_price_id(event.session_id)
        tier = self.tier_for_price(price_id)
        logger.info(f"Checkout completed: {event.email}, tier: {tier.value}")

        existing = self._students.get_student_by_email(event.email)
        if existing is not None:
            # A new checkout is the only event that brings a canceled student back.
            self._students.update_student(
                existing.id,
                {
                    "subscription_status": SubscriptionStatus.ACTIVE,
                    "tier": tier,
                    "billing_customer_ref": event.customer_ref,
                    "billing_subscription_ref": event.subscription_ref,
                },
            )
            return

        self._students.upsert_pending_enrollment(
            PendingEnrollment(
                email=event.email,
                name=event.name,
                tier=tier,
                billing_customer_ref=event.customer_ref,
                billing_subscription_ref=event.subscription_ref,
                checkout_session_ref=event.session_id,
            )
        )

    async def _handle_payment_failed(self, event: InvoicePaymentFailed) -> None:
        logger.info(f"Payment failed for customer: {event.customer_ref}")
        student = self._find_student(event.customer_ref)
        if student is None:
            return

        self._set_status(student, SubscriptionStatus.PAST_DUE, event.created)
        self._record_payment(
            student,
            external_payment_ref=event.invoice_id,
            amount=cents_to_amount(event.amount_due_cents),
            status=PaymentStatus.FAILED,
            description="Subscription payment failed",
        )

    async def _handle_payment_succeeded(self, event: InvoicePaymentSucceeded) -> None:
        logger.info(f"Payment succeeded for customer: {event.customer_ref}")
        student = self._find_student(event.customer_ref)
        if student is None:
            return

        self._set_status(student, SubscriptionStatus.ACTIVE, event.created)
        self._record_payment(
            student,
            external_payment_ref=event.invoice_id,
            amount=cents_to_amount(event.amount_paid_cents),
            status=PaymentStatus.SUCCEEDED,
            description=event.description or "Subscription payment",
        )

    async def _handle_subscription_deleted(self, event: SubscriptionDeleted) -> None:
        logger.info(f"Subscription canceled for customer: {event.customer_ref}")
        student = self._find_student(event.customer_ref)
        if student is None:
            return
        self._set_status(student, SubscriptionStatus.CANCELED, event.created)

    async def _handle_subscription_updated(self, event: SubscriptionUpdated) -> None:
        student = self._find_student(event.customer_ref)
        if student is None:
            return
        self._set_status(student, map_processor_status(event.processor_status), event.created)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _find_student(self, customer_ref: str) -> Optional[Student]:
        student = self._students.get_student_by_customer_ref(customer_ref)
        if student is None:
            logger.warning(f"No student for billing customer {customer_ref}; ignoring event")
        return student

    def _set_status(
        self,
        student: Student,
        status: SubscriptionStatus,
        event_created: Optional[datetime],
    ) -> bool:
        """
        Write a webhook-driven status. Returns whether the write happened.

        Skips writes out of canceled, and, when stale-event rejection is
        enabled, events older than the record's last update.
        """
        if student.subscription_status == status:
            return False

        if student.subscription_status == SubscriptionStatus.CANCELED:
            logger.info(
                f"Student {student.id} is canceled; ignoring webhook transition to {status.value}"
            )
            return False

        if self._reject_stale and event_created is not None and event_created < student.updated_at:
            logger.info(
                f"Skipping stale event for student {student.id}: "
                f"event at {event_created.isoformat()}, record updated {student.updated_at.isoformat()}"
            )
            return False

        self._students.update_student(student.id, {"subscription_status": status})
        logger.info(
            f"Student {student.id} status {student.subscription_status.value} -> {status.value}"
        )
        return True

    def _record_payment(
        self,
        student: Student,
        external_payment_ref: str,
        amount: Decimal,
        status: PaymentStatus,
        description: str,
    ) -> None:
        if self._students.payment_exists(external_payment_ref, status):
            logger.info(f"Payment {external_payment_ref} ({status.value}) already recorded")
            return
        self._students.append_payment(
            PaymentRecord(
                student_id=student.id,
                external_payment_ref=external_payment_ref,
                amount=amount,
                status=status,
                description=description,
            )
        )
