"""
Event parser for translating Stripe webhook payloads to BillingEvents.

Stripe sends `{"id", "type", "created", "data": {"object": {...}}}`. The
parser pulls out only the fields each handler needs. Reference fields
may arrive either as an ID string or as an expanded object.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from .exceptions import MalformedEventError
from .models import (
    BillingEvent,
    BillingEventType,
    CheckoutCompleted,
    InvoicePaymentFailed,
    InvoicePaymentSucceeded,
    SubscriptionDeleted,
    SubscriptionUpdated,
    UnrecognizedEvent,
)

_CENTS = Decimal(100)
_PENNY = Decimal("0.01")


def cents_to_amount(cents: Optional[int]) -> Decimal:
    """Convert Stripe minor units (integer cents) to major units."""
    return (Decimal(cents or 0) / _CENTS).quantize(_PENNY)


def _ref(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, dict):
        return value.get("id")
    return str(value)


def _timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _checkout_price_id(session: dict[str, Any]) -> Optional[str]:
    metadata = session.get("metadata") or {}
    if metadata.get("price_id"):
        return metadata["price_id"]
    line_items = (session.get("line_items") or {}).get("data") or []
    if line_items:
        return _ref((line_items[0] or {}).get("price"))
    return None


def _checkout_completed(event_id: str, created: Optional[datetime], obj: dict) -> BillingEvent:
    details = obj.get("customer_details") or {}
    email = obj.get("customer_email") or details.get("email")
    return CheckoutCompleted(
        event_id=event_id,
        created=created,
        session_id=obj["id"],
        customer_ref=_ref(obj.get("customer")),
        subscription_ref=_ref(obj.get("subscription")),
        email=email.lower() if email else None,
        name=details.get("name") or "Student",
        price_id=_checkout_price_id(obj),
    )


def _invoice_payment_failed(event_id: str, created: Optional[datetime], obj: dict) -> BillingEvent:
    return InvoicePaymentFailed(
        event_id=event_id,
        created=created,
        invoice_id=obj["id"],
        customer_ref=_ref(obj["customer"]),
        amount_due_cents=obj.get("amount_due") or 0,
    )


def _invoice_payment_succeeded(event_id: str, created: Optional[datetime], obj: dict) -> BillingEvent:
    return InvoicePaymentSucceeded(
        event_id=event_id,
        created=created,
        invoice_id=obj["id"],
        customer_ref=_ref(obj["customer"]),
        amount_paid_cents=obj.get("amount_paid") or 0,
        description=obj.get("description"),
    )


def _subscription_deleted(event_id: str, created: Optional[datetime], obj: dict) -> BillingEvent:
    return SubscriptionDeleted(
        event_id=event_id,
        created=created,
        subscription_ref=obj["id"],
        customer_ref=_ref(obj["customer"]),
    )


def _subscription_updated(event_id: str, created: Optional[datetime], obj: dict) -> BillingEvent:
    return SubscriptionUpdated(
        event_id=event_id,
        created=created,
        subscription_ref=obj["id"],
        customer_ref=_ref(obj["customer"]),
        processor_status=obj["status"],
    )


_PARSERS: dict[str, Callable[[str, Optional[datetime], dict], BillingEvent]] = {
    BillingEventType.CHECKOUT_COMPLETED.value: _checkout_completed,
    BillingEventType.INVOICE_PAYMENT_FAILED.value: _invoice_payment_failed,
    BillingEventType.INVOICE_PAYMENT_SUCCEEDED.value: _invoice_payment_succeeded,
    BillingEventType.SUBSCRIPTION_DELETED.value: _subscription_deleted,
    BillingEventType.SUBSCRIPTION_UPDATED.value: _subscription_updated,
}


def parse_event(payload: dict[str, Any]) -> BillingEvent:
    """
    Parse a verified Stripe event payload.

    Args:
        payload: Decoded webhook JSON

    Returns:
        The typed event; UnrecognizedEvent for types without a parser

    Raises:
        MalformedEventError: If the payload lacks a field its type requires
    """
    if not isinstance(payload, dict):
        raise MalformedEventError("unknown", "payload is not an object")

    event_type = payload.get("type")
    event_id = payload.get("id")
    if not event_type or not event_id:
        raise MalformedEventError(str(event_type or "unknown"), "missing id or type")

    try:
        created = _timestamp(payload.get("created"))
        parser = _PARSERS.get(event_type)
        if parser is None:
            return UnrecognizedEvent(event_id=event_id, created=created, type=event_type)
        obj = (payload.get("data") or {}).get("object")
        if not isinstance(obj, dict):
            raise MalformedEventError(event_type, "missing data.object")
        return parser(event_id, created, obj)
    except (KeyError, TypeError, ValueError, PydanticValidationError) as e:
        raise MalformedEventError(event_type, str(e)) from e
