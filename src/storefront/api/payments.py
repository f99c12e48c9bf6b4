"""FastAPI endpoints for payments: intent creation and the provider webhook."""

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from storefront.api.actors import current_actor
from storefront.api.schemas import CreatePaymentIntentRequest, PaymentIntentResponse, WebhookAckResponse
from storefront.errors import Conflict
from storefront.payments.intents import create_payment_intent
from storefront.payments.reconciliation import reconcile
from storefront.shared.actor import Actor
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/intents", status_code=201, response_model=PaymentIntentResponse)
async def create_intent(
    body: CreatePaymentIntentRequest, actor: Actor = Depends(current_actor)
) -> PaymentIntentResponse:
    """Open a payment intent for the caller's unpaid order."""
    intent = create_payment_intent(body.order_id, actor)
    return PaymentIntentResponse(
        order_id=intent.order_id,
        payment_intent_id=intent.payment_intent_id,
        client_secret=intent.client_secret,
        amount=intent.amount,
        currency=intent.currency,
    )


@payment_router.post("/webhook", response_model=WebhookAckResponse)
async def payment_webhook(
    request: Request,
    stripe_signature: str = Header(default=""),
    x_gateway_signature: str = Header(default=""),
):
    """Receive a provider event.

    The raw body is verified before it is parsed. Anything permanently
    classified is acknowledged with 200; contention that outlived the retry
    bound answers 503 so the provider redelivers.
    """
    payload = await request.body()
    signature = stripe_signature or x_gateway_signature

    try:
        ack = reconcile(payload, signature)
    except Conflict as exc:
        logger.warning("Webhook deferred after repeated conflicts", error=str(exc))
        return JSONResponse(status_code=503, content={"error": exc.messages})

    return WebhookAckResponse(event_id=ack.event_id, outcome=ack.outcome)
