"""Fake payment gateway for development and testing.

Simulates the provider without any external calls. Webhook payloads are
signed with HMAC-SHA256 over the raw body using the shared secret from
``STOREFRONT_WEBHOOK_SECRET``; tests and local tooling use ``sign()`` to
produce valid signatures.
"""

import hashlib
import hmac
import json
from uuid import uuid4

from storefront import config
from storefront.errors import SignatureInvalid
from storefront.payments.gateway.port import (
    PAYMENT_FAILED,
    PAYMENT_SUCCEEDED,
    GatewayEvent,
    PaymentGateway,
    PaymentIntentResult,
    normalize_event,
)


def _as_bytes(payload: bytes | str) -> bytes:
    return payload.encode("utf-8") if isinstance(payload, str) else payload


class FakeGateway(PaymentGateway):
    """In-memory gateway with HMAC-signed webhooks."""

    def __init__(self, secret: str | None = None) -> None:
        self.secret = secret
        self.calls: list[dict] = []
        self.intents: dict[str, PaymentIntentResult] = {}  # keyed by idempotency key

    @property
    def signing_secret(self) -> str:
        return self.secret if self.secret is not None else config.webhook_secret()

    def sign(self, payload: bytes | str) -> str:
        return hmac.new(self.signing_secret.encode("utf-8"), _as_bytes(payload), hashlib.sha256).hexdigest()

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        order_id: str,
        idempotency_key: str,
    ) -> PaymentIntentResult:
        self.calls.append(
            {
                "method": "create_payment_intent",
                "amount": amount,
                "currency": currency,
                "order_id": order_id,
                "idempotency_key": idempotency_key,
            }
        )

        if idempotency_key in self.intents:
            return self.intents[idempotency_key]

        intent_id = f"pi_fake_{uuid4().hex[:24]}"
        intent = PaymentIntentResult(
            payment_intent_id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:16]}",
            amount=amount,
            currency=currency,
            status="requires_payment_method",
        )
        self.intents[idempotency_key] = intent
        return intent

    def construct_event(self, payload: bytes | str, signature: str) -> GatewayEvent:
        self.calls.append({"method": "construct_event"})

        expected = self.sign(payload)
        if not signature or not hmac.compare_digest(expected, signature):
            raise SignatureInvalid({"signature": ["Webhook signature verification failed"]})

        try:
            event = json.loads(_as_bytes(payload).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise SignatureInvalid({"payload": ["Webhook payload is not valid JSON"]}) from None
        if not isinstance(event, dict):
            raise SignatureInvalid({"payload": ["Webhook payload is not an event object"]})

        return normalize_event(event)

    # ------------------------------------------------------------------
    # Helpers for building provider-shaped events
    # ------------------------------------------------------------------
    @staticmethod
    def build_event(
        event_type: str,
        payment_intent_id: str,
        order_id: str | None,
        event_id: str | None = None,
        receipt_email: str | None = None,
        failure_message: str | None = None,
    ) -> dict:
        intent = {
            "id": payment_intent_id,
            "object": "payment_intent",
            "status": {PAYMENT_SUCCEEDED: "succeeded", PAYMENT_FAILED: "requires_payment_method"}.get(
                event_type, "processing"
            ),
            "receipt_email": receipt_email,
            "metadata": {"order_id": order_id} if order_id else {},
        }
        if failure_message:
            intent["last_payment_error"] = {"message": failure_message}

        return {
            "id": event_id or f"evt_fake_{uuid4().hex[:16]}",
            "object": "event",
            "type": event_type,
            "data": {"object": intent},
        }

    def signed_payload(self, event: dict) -> tuple[str, str]:
        """Serialize ``event`` and return ``(payload, signature)``."""
        payload = json.dumps(event)
        return payload, self.sign(payload)
