"""
Billing module.

Handles Stripe integration: webhook verification and ingestion, and the
subscription cancel / invoice list calls used by student administration.

Public API:
- IBillingProvider: Interface to the billing processor
- IBillingWebhookService: Interface for webhook ingestion
- Billing events: CheckoutCompleted, InvoicePaymentFailed, etc.
- IngestionResult, RejectionReason: Webhook outcomes
- Billing exceptions: WebhookVerificationError, BillingProviderError, etc.
"""

from .interfaces import IBillingProvider, IBillingWebhookService
from .models import (
    BillingEvent,
    BillingEventType,
    CheckoutCompleted,
    InvoicePaymentFailed,
    InvoicePaymentSucceeded,
    SubscriptionDeleted,
    SubscriptionUpdated,
    UnrecognizedEvent,
    IngestionResult,
    RejectionReason,
    InvoiceSummary,
)
from .exceptions import (
    BillingError,
    WebhookVerificationError,
    MalformedEventError,
    BillingProviderError,
    NoBillingCustomerError,
)

__all__ = [
    # Interfaces
    "IBillingProvider",
    "IBillingWebhookService",
    # Models
    "BillingEvent",
    "BillingEventType",
    "CheckoutCompleted",
    "InvoicePaymentFailed",
    "InvoicePaymentSucceeded",
    "SubscriptionDeleted",
    "SubscriptionUpdated",
    "UnrecognizedEvent",
    "IngestionResult",
    "RejectionReason",
    "InvoiceSummary",
    # Exceptions
    "BillingError",
    "WebhookVerificationError",
    "MalformedEventError",
    "BillingProviderError",
    "NoBillingCustomerError",
]
