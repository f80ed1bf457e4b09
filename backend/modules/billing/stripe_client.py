"""
Stripe implementation of IBillingProvider.

The API key is passed per call instead of being assigned to the global
`stripe.api_key`, so the module holds no process-wide mutable state.
"""

from datetime import datetime, timezone
from typing import Optional
import logging

import stripe

from shared.config import Settings
from .events import cents_to_amount
from .exceptions import BillingProviderError, WebhookVerificationError
from .models import InvoiceSummary

logger = logging.getLogger(__name__)

# Seconds a signed webhook timestamp stays acceptable (Stripe's default).
SIGNATURE_TOLERANCE = 300


class StripeBillingProvider:
    """Billing provider backed by the Stripe API."""

    def __init__(self, secret_key: str, webhook_secret: str):
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeBillingProvider":
        return cls(
            secret_key=settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
        )

    def verify_signature(self, payload: bytes, signature_header: str) -> None:
        if not self._webhook_secret:
            raise WebhookVerificationError("webhook secret not configured")
        if not signature_header:
            raise WebhookVerificationError("missing signature header")

        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"),
                signature_header,
                self._webhook_secret,
                tolerance=SIGNATURE_TOLERANCE,
            )
        except stripe.SignatureVerificationError as e:
            raise WebhookVerificationError(str(e)) from e
        except UnicodeDecodeError as e:
            raise WebhookVerificationError("payload is not valid UTF-8") from e

    def get_checkout_price_id(self, session_id: str) -> Optional[str]:
        try:
            line_items = stripe.checkout.Session.list_line_items(
                session_id,
                limit=1,
                api_key=self._secret_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Failed to list line items for checkout {session_id}: {e}")
            raise BillingProviderError("Could not read checkout line items", str(e)) from e

        if not line_items.data:
            return None
        price = getattr(line_items.data[0], "price", None)
        return getattr(price, "id", None) if price else None

    def cancel_subscription(self, subscription_ref: str) -> None:
        try:
            stripe.Subscription.cancel(subscription_ref, api_key=self._secret_key)
        except stripe.StripeError as e:
            logger.error(f"Failed to cancel subscription {subscription_ref}: {e}")
            raise BillingProviderError("Could not cancel subscription", str(e)) from e
        logger.info(f"Canceled Stripe subscription {subscription_ref}")

    def list_invoices(self, customer_ref: str, limit: int = 20) -> list[InvoiceSummary]:
        try:
            invoices = stripe.Invoice.list(
                customer=customer_ref,
                limit=limit,
                api_key=self._secret_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Failed to list invoices for {customer_ref}: {e}")
            raise BillingProviderError("Could not list invoices", str(e)) from e

        return [
            InvoiceSummary(
                id=invoice.id,
                amount=cents_to_amount(getattr(invoice, "amount_paid", 0)),
                status=getattr(invoice, "status", None),
                date=datetime.fromtimestamp(invoice.created, tz=timezone.utc),
                description=getattr(invoice, "description", None) or "Subscription payment",
            )
            for invoice in invoices.data
        ]
