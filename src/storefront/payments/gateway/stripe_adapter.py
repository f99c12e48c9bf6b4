"""Stripe payment gateway adapter.

Uses the stripe-python SDK to open PaymentIntents and to verify webhook
signatures with the endpoint's signing secret.
"""

import json
import os

import stripe

from storefront.errors import SignatureInvalid
from storefront.payments.gateway.port import GatewayEvent, PaymentGateway, PaymentIntentResult, normalize_event
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _as_text(payload: bytes | str) -> str:
    return payload.decode("utf-8") if isinstance(payload, bytes) else payload


class StripeGatewayError(Exception):
    """The provider rejected or failed an outbound request."""


class StripeGateway(PaymentGateway):
    """Production gateway backed by Stripe."""

    def __init__(self, api_key: str | None = None, webhook_secret: str | None = None) -> None:
        self.api_key = api_key or os.getenv("STRIPE_SECRET_KEY", "")
        self.webhook_secret = webhook_secret or os.getenv("STRIPE_WEBHOOK_SECRET", "")
        stripe.api_key = self.api_key

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        order_id: str,
        idempotency_key: str,
    ) -> PaymentIntentResult:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                metadata={"order_id": order_id},
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe payment intent creation failed", order_id=order_id, error=str(exc))
            raise StripeGatewayError(str(exc)) from exc

        return PaymentIntentResult(
            payment_intent_id=intent["id"],
            client_secret=intent["client_secret"],
            amount=intent["amount"],
            currency=intent["currency"],
            status=intent.get("status"),
        )

    def construct_event(self, payload: bytes | str, signature: str) -> GatewayEvent:
        try:
            stripe.WebhookSignature.verify_header(
                _as_text(payload),
                signature,
                self.webhook_secret,
                tolerance=stripe.Webhook.DEFAULT_TOLERANCE,
            )
            event = json.loads(_as_text(payload))
        except stripe.SignatureVerificationError as exc:
            logger.warning("Stripe webhook signature invalid", error=str(exc))
            raise SignatureInvalid({"signature": ["Webhook signature verification failed"]}) from exc
        except ValueError as exc:
            logger.warning("Stripe webhook payload invalid", error=str(exc))
            raise SignatureInvalid({"payload": ["Webhook payload could not be parsed"]}) from exc

        return normalize_event(event)
