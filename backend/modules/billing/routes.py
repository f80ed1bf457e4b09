"""
Stripe webhook endpoint.

The raw request body is passed through untouched; signature verification
needs the exact bytes Stripe signed.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from api.dependencies import get_billing_webhook_service

from .interfaces import IBillingWebhookService
from .models import WebhookResponse

router = APIRouter()


@router.post("/stripe", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    service: IBillingWebhookService = Depends(get_billing_webhook_service),
) -> JSONResponse:
    """
    Ingest one Stripe event.

    400 for a missing or bad signature or a malformed event, 500 when a
    handler fails so Stripe retries, otherwise 200.
    """
    payload = await request.body()
    result = await service.ingest(payload, stripe_signature)

    if not result.accepted:
        return JSONResponse(
            status_code=result.status_code,
            content={"error": result.reason.value, "event_id": result.event_id},
        )
    return JSONResponse(
        status_code=200,
        content=WebhookResponse(handled=result.handled).model_dump(),
    )
