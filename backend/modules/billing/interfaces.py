"""
Billing module interfaces.

IBillingProvider is the narrow slice of Stripe this backend uses. The
ingestion service and the student admin service depend on it, never on
the Stripe SDK directly.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import BillingEvent, IngestionResult, InvoiceSummary


@runtime_checkable
class IBillingProvider(Protocol):
    """Interface to the external billing processor."""

    def verify_signature(self, payload: bytes, signature_header: str) -> None:
        """
        Check a webhook signature against the raw request body.

        Raises:
            WebhookVerificationError: If the signature does not match,
                is stale, or no webhook secret is configured
        """
        ...

    def get_checkout_price_id(self, session_id: str) -> Optional[str]:
        """
        Look up the price purchased in a checkout session.

        Returns:
            The first line item's price ID, or None

        Raises:
            BillingProviderError: If the processor call fails
        """
        ...

    def cancel_subscription(self, subscription_ref: str) -> None:
        """
        Cancel a processor subscription immediately.

        Raises:
            BillingProviderError: If the processor call fails
        """
        ...

    def list_invoices(self, customer_ref: str, limit: int = 20) -> list[InvoiceSummary]:
        """
        List a customer's invoices, newest first, amounts in major units.

        Raises:
            BillingProviderError: If the processor call fails
        """
        ...


@runtime_checkable
class IBillingWebhookService(Protocol):
    """
    Interface for webhook ingestion.

    ingest() never raises: every outcome is an IngestionResult whose
    status_code tells the HTTP layer what to answer.
    """

    async def ingest(
        self,
        raw_payload: bytes,
        signature_header: Optional[str],
    ) -> IngestionResult:
        """Verify, parse and apply one webhook delivery."""
        ...

    async def apply(self, event: BillingEvent) -> bool:
        """
        Apply an already-verified event.

        Returns:
            True if the event type has a handler, False otherwise

        Raises:
            StoreUnavailableError / BillingProviderError: On collaborator failure
        """
        ...
