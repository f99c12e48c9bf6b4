"""Payment intents — the outbound half of the payment flow.

A customer asks to pay for their order; the provider opens an intent for
the order total and returns a client secret for the checkout page. The
order id travels in the intent metadata, so the provider's webhook can be
matched back to the order during reconciliation.
"""

from dataclasses import dataclass

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront import config
from storefront.domain import storefront
from storefront.errors import Forbidden, InvalidTransition, OrderNotFound
from storefront.ordering.order import Order, OrderStatus
from storefront.payments.gateway import get_gateway
from storefront.shared.actor import Actor
from storefront.shared.money import to_cents
from storefront.utils.logging import get_logger
from storefront.utils.retry import run_with_conflict_retry

logger = get_logger(__name__)


@dataclass(frozen=True)
class PaymentIntentCreated:
    order_id: str
    payment_intent_id: str
    client_secret: str
    amount: int
    currency: str


@storefront.command(part_of="Order")
class AttachPaymentIntent:
    order_id = Identifier(required=True)
    payment_intent_id = String(required=True, max_length=255)


@storefront.command_handler(part_of=Order)
class AttachPaymentIntentHandler:
    @handle(AttachPaymentIntent)
    def attach(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.payment_intent_id == command.payment_intent_id:
            return
        order.attach_payment_intent(command.payment_intent_id)
        repo.add(order)


def ensure_payable(order, actor: Actor) -> None:
    if str(order.customer_id) != str(actor.id):
        raise Forbidden({"order": ["Only the customer who placed the order can pay for it"]})
    if order.is_paid:
        raise InvalidTransition({"is_paid": ["Order has already been paid for"]})
    if order.status == OrderStatus.CANCELLED.value:
        raise InvalidTransition({"status": ["Cancelled orders cannot be paid"]})


def create_payment_intent(order_id, actor: Actor) -> PaymentIntentCreated:
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound({"order_id": [f"Order {order_id} does not exist"]}) from None

    ensure_payable(order, actor)

    amount = to_cents(order.total_price)
    currency = config.currency()
    intent = get_gateway().create_payment_intent(
        amount=amount,
        currency=currency,
        order_id=str(order.id),
        idempotency_key=f"order-{order.id}-{amount}",
    )

    command = AttachPaymentIntent(order_id=str(order.id), payment_intent_id=intent.payment_intent_id)
    run_with_conflict_retry(
        lambda: current_domain.process(command, asynchronous=False),
        description="Payment intent attachment",
    )

    logger.info(
        "Payment intent created",
        order_id=str(order.id),
        payment_intent_id=intent.payment_intent_id,
        amount=amount,
        currency=currency,
    )
    return PaymentIntentCreated(
        order_id=str(order.id),
        payment_intent_id=intent.payment_intent_id,
        client_secret=intent.client_secret,
        amount=amount,
        currency=currency,
    )
