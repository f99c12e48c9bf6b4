"""Payment gateway port (abstract interface).

Defines the contract every payment provider adapter implements, so the
reconciliation and intent flows never depend on a concrete provider SDK.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


@dataclass(frozen=True)
class PaymentIntentResult:
    """A payment intent opened with the provider."""

    payment_intent_id: str
    client_secret: str
    amount: int  # smallest currency unit
    currency: str
    status: str | None = None


@dataclass(frozen=True)
class GatewayEvent:
    """A verified provider event, normalized to the fields reconciliation reads."""

    event_id: str
    event_type: str
    payment_intent_id: str | None = None
    order_id: str | None = None
    status: str | None = None
    receipt_email: str | None = None
    failure_message: str | None = None


def normalize_event(event: dict) -> GatewayEvent:
    """Flatten a Stripe-shaped event (``{"id", "type", "data": {"object": ...}}``)."""
    intent = (event.get("data") or {}).get("object") or {}
    metadata = intent.get("metadata") or {}
    last_error = intent.get("last_payment_error") or {}

    return GatewayEvent(
        event_id=str(event.get("id") or ""),
        event_type=str(event.get("type") or ""),
        payment_intent_id=intent.get("id"),
        order_id=metadata.get("order_id"),
        status=intent.get("status"),
        receipt_email=intent.get("receipt_email"),
        failure_message=last_error.get("message"),
    )


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        order_id: str,
        idempotency_key: str,
    ) -> PaymentIntentResult:
        """Open a payment intent for ``amount`` (in the smallest currency unit)."""
        ...

    @abstractmethod
    def construct_event(self, payload: bytes | str, signature: str) -> GatewayEvent:
        """Verify the webhook signature and return the parsed event.

        Raises ``SignatureInvalid`` when the payload cannot be authenticated.
        Nothing in the payload is trusted before this check passes.
        """
        ...
