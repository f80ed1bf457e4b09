"""
Billing module data models.

Billing events arrive from Stripe as loosely-typed JSON. They are parsed
into the closed set of event models below before anything acts on them;
event types we do not handle become UnrecognizedEvent.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


class BillingEventType(str, Enum):
    """Stripe event types the ingestion service acts on."""

    CHECKOUT_COMPLETED = "checkout.session.completed"
    INVOICE_PAYMENT_FAILED = "invoice.payment_failed"
    INVOICE_PAYMENT_SUCCEEDED = "invoice.payment_succeeded"
    SUBSCRIPTION_DELETED = "customer.subscription.deleted"
    SUBSCRIPTION_UPDATED = "customer.subscription.updated"


class _BillingEventBase(BaseModel):
    event_id: str = Field(..., description="Stripe event ID (evt_...)")
    created: Optional[datetime] = Field(None, description="When Stripe created the event")

    model_config = {"frozen": True}


class CheckoutCompleted(_BillingEventBase):
    """A checkout session finished; the customer bought a course tier."""

    type: Literal["checkout.session.completed"] = "checkout.session.completed"
    session_id: str
    customer_ref: Optional[str] = None
    subscription_ref: Optional[str] = None
    email: Optional[str] = None
    name: str = "Student"
    price_id: Optional[str] = Field(
        None,
        description="Purchased price, when present in the payload",
    )


class InvoicePaymentFailed(_BillingEventBase):
    """A subscription invoice could not be charged."""

    type: Literal["invoice.payment_failed"] = "invoice.payment_failed"
    invoice_id: str
    customer_ref: str
    amount_due_cents: int = 0


class InvoicePaymentSucceeded(_BillingEventBase):
    """A subscription invoice was paid."""

    type: Literal["invoice.payment_succeeded"] = "invoice.payment_succeeded"
    invoice_id: str
    customer_ref: str
    amount_paid_cents: int = 0
    description: Optional[str] = None


class SubscriptionDeleted(_BillingEventBase):
    """The Stripe subscription ended."""

    type: Literal["customer.subscription.deleted"] = "customer.subscription.deleted"
    subscription_ref: str
    customer_ref: str


class SubscriptionUpdated(_BillingEventBase):
    """The Stripe subscription changed; processor_status is Stripe's vocabulary."""

    type: Literal["customer.subscription.updated"] = "customer.subscription.updated"
    subscription_ref: str
    customer_ref: str
    processor_status: str


class UnrecognizedEvent(_BillingEventBase):
    """Any event type not listed in BillingEventType."""

    type: str


BillingEvent = Union[
    CheckoutCompleted,
    InvoicePaymentFailed,
    InvoicePaymentSucceeded,
    SubscriptionDeleted,
    SubscriptionUpdated,
    UnrecognizedEvent,
]


class RejectionReason(str, Enum):
    """Why a webhook delivery was refused."""

    MISSING_SIGNATURE = "missing_signature"
    INVALID_SIGNATURE = "invalid_signature"
    MALFORMED_EVENT = "malformed_event"
    HANDLER_FAILED = "handler_failed"


_REJECTION_STATUS = {
    RejectionReason.MISSING_SIGNATURE: 400,
    RejectionReason.INVALID_SIGNATURE: 400,
    RejectionReason.MALFORMED_EVENT: 400,
    RejectionReason.HANDLER_FAILED: 500,
}


class IngestionResult(BaseModel):
    """
    Result of ingesting one webhook delivery.

    A HANDLER_FAILED rejection maps to 500 so Stripe redelivers the event.
    """

    accepted: bool
    event_id: Optional[str] = None
    event_type: Optional[str] = None
    handled: bool = Field(default=False, description="Whether the event type had a handler")
    reason: Optional[RejectionReason] = None

    @classmethod
    def rejected(
        cls,
        reason: RejectionReason,
        event: Optional[BillingEvent] = None,
    ) -> "IngestionResult":
        return cls(
            accepted=False,
            reason=reason,
            event_id=event.event_id if event else None,
            event_type=event.type if event else None,
        )

    @property
    def status_code(self) -> int:
        if self.accepted:
            return 200
        return _REJECTION_STATUS[self.reason]


class InvoiceSummary(BaseModel):
    """A Stripe invoice as shown in the admin payment history."""

    id: str
    amount: Decimal = Field(..., description="Amount paid in major currency units")
    status: Optional[str] = None
    date: datetime
    description: str = "Subscription payment"


class WebhookResponse(BaseModel):
    """Webhook endpoint response body."""

    received: bool = True
    handled: bool = False
