"""Payment reconciliation — applies verified provider events to orders.

Every event is classified into exactly one outcome:

- already in the ledger: duplicate delivery, acknowledged, nothing changes
- ``payment_intent.succeeded`` for a missing order: acknowledged, recorded
- ``payment_intent.succeeded`` for an already-paid order: recorded as duplicate
- ``payment_intent.succeeded`` otherwise: order paid (Pending → Processing)
- ``payment_intent.payment_failed``: recorded, order left payable
- any other type: acknowledged and ignored

Only a version conflict that outlives the retry bound escapes as an error,
so the provider redelivers the event later.
"""

from dataclasses import dataclass

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order import Order
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.port import PAYMENT_FAILED, PAYMENT_SUCCEEDED, GatewayEvent
from storefront.payments.ledger import ProcessedPaymentEvent, ReconciliationOutcome
from storefront.shared.actor import PAYMENT_PROVIDER
from storefront.utils.logging import get_logger, log_context
from storefront.utils.retry import run_with_conflict_retry

logger = get_logger(__name__)

HANDLED_EVENT_TYPES = frozenset({PAYMENT_SUCCEEDED, PAYMENT_FAILED})


@dataclass(frozen=True)
class Ack:
    """Acknowledgement returned to the provider once an event is settled."""

    event_id: str
    event_type: str
    outcome: str
    order_id: str | None = None


@storefront.command(part_of="ProcessedPaymentEvent")
class ReconcilePayment:
    event_id = String(required=True, max_length=255)
    event_type = String(required=True, max_length=100)
    payment_intent_id = String(max_length=255)
    order_id = Identifier()
    status = String(max_length=50)
    receipt_email = String(max_length=255)
    failure_message = String(max_length=1000)


def _find_order(order_id, payment_intent_id):
    repo = current_domain.repository_for(Order)
    if order_id:
        try:
            return repo.get(order_id)
        except ObjectNotFoundError:
            return None

    if payment_intent_id:
        matches = repo._dao.query.filter(payment_intent_id=payment_intent_id).all().items
        if matches:
            return matches[0]
    return None


@storefront.command_handler(part_of=ProcessedPaymentEvent)
class ReconcilePaymentHandler:
    @handle(ReconcilePayment)
    def reconcile(self, command):
        ledger = current_domain.repository_for(ProcessedPaymentEvent)
        event = GatewayEvent(
            event_id=command.event_id,
            event_type=command.event_type,
            payment_intent_id=command.payment_intent_id,
            order_id=command.order_id,
            status=command.status,
            receipt_email=command.receipt_email,
            failure_message=command.failure_message,
        )

        try:
            ledger.get(event.event_id)
            return ReconciliationOutcome.DUPLICATE.value, event.order_id
        except ObjectNotFoundError:
            pass

        order = _find_order(event.order_id, event.payment_intent_id)
        order_id = str(order.id) if order else event.order_id

        if order is None:
            outcome = ReconciliationOutcome.ORDER_NOT_FOUND
        elif event.event_type == PAYMENT_FAILED:
            outcome = ReconciliationOutcome.PAYMENT_FAILED
        elif order.is_paid:
            outcome = ReconciliationOutcome.DUPLICATE
        else:
            order.record_payment(
                payment_intent_id=event.payment_intent_id,
                receipt_status=event.status,
                receipt_email=event.receipt_email,
                changed_by=PAYMENT_PROVIDER,
            )
            current_domain.repository_for(Order).add(order)
            outcome = ReconciliationOutcome.PROCESSED

        ledger.add(ProcessedPaymentEvent.record(event, outcome, order_id=order_id))
        return outcome.value, order_id


def apply_event(event: GatewayEvent) -> Ack:
    """Reconcile an already-verified provider event."""
    if event.event_type not in HANDLED_EVENT_TYPES:
        logger.info("Payment event ignored", event_id=event.event_id, event_type=event.event_type)
        return Ack(event_id=event.event_id, event_type=event.event_type, outcome=ReconciliationOutcome.IGNORED.value)

    with log_context(payment_event_id=event.event_id, payment_intent_id=event.payment_intent_id):
        return _reconcile_handled(event)


def _reconcile_handled(event: GatewayEvent) -> Ack:
    command = ReconcilePayment(
        event_id=event.event_id,
        event_type=event.event_type,
        payment_intent_id=event.payment_intent_id,
        order_id=event.order_id,
        status=event.status,
        receipt_email=event.receipt_email,
        failure_message=event.failure_message,
    )
    outcome, order_id = run_with_conflict_retry(
        lambda: current_domain.process(command, asynchronous=False),
        description="Payment reconciliation",
    )

    noteworthy = {ReconciliationOutcome.ORDER_NOT_FOUND.value, ReconciliationOutcome.PAYMENT_FAILED.value}
    log = logger.warning if outcome in noteworthy else logger.info
    log(
        "Payment event reconciled",
        event_id=event.event_id,
        event_type=event.event_type,
        payment_intent_id=event.payment_intent_id,
        order_id=order_id,
        outcome=outcome,
        failure_message=event.failure_message,
    )
    return Ack(event_id=event.event_id, event_type=event.event_type, outcome=outcome, order_id=order_id)


def reconcile(payload: bytes | str, signature: str) -> Ack:
    """Verify a raw webhook delivery and reconcile it.

    Raises ``SignatureInvalid`` before reading anything when the signature
    does not match, and ``Conflict`` when concurrent updates exhausted the
    retry bound.
    """
    event = get_gateway().construct_event(payload, signature)
    return apply_event(event)
