"""Processed payment events — the idempotency ledger for provider webhooks.

Providers deliver webhooks at least once. Every event that reached a
permanent outcome is recorded here under the provider's event id, inside
the same unit of work as the order mutation it caused, so a replay is
recognised and acknowledged without touching the order again.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


class ReconciliationOutcome(Enum):
    PROCESSED = "processed"
    DUPLICATE = "duplicate"
    ORDER_NOT_FOUND = "order_not_found"
    PAYMENT_FAILED = "payment_failed"
    IGNORED = "ignored"


@storefront.aggregate
class ProcessedPaymentEvent:
    event_id: Identifier(identifier=True, required=True)
    event_type: String(required=True, max_length=100)
    payment_intent_id: String(max_length=255)
    order_id: Identifier()
    outcome: String(required=True, choices=ReconciliationOutcome)
    failure_message: String(max_length=1000)
    processed_at: DateTime()

    @classmethod
    def record(cls, event, outcome, order_id=None):
        return cls(
            event_id=event.event_id,
            event_type=event.event_type,
            payment_intent_id=event.payment_intent_id,
            order_id=order_id,
            outcome=outcome.value,
            failure_message=event.failure_message,
            processed_at=datetime.now(UTC),
        )
