"""Customer notifications driven by Order events.

Sends an order confirmation on OrderPlaced, a receipt on OrderPaid and a
status update on every OrderStatusChanged. The automatic Pending →
Processing move that follows a payment is covered by the receipt, so it
does not produce a second email.
"""

import json

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront import config
from storefront.domain import storefront
from storefront.notifications.dispatch import notify_customer
from storefront.notifications.templates import NotificationType
from storefront.ordering.events import OrderPaid, OrderPlaced, OrderStatusChanged
from storefront.ordering.order import Order
from storefront.shared.actor import PAYMENT_PROVIDER
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _customer_email_for(order_id):
    try:
        return current_domain.repository_for(Order).get(order_id).customer_email
    except ObjectNotFoundError:
        logger.warning("Order missing for notification", order_id=str(order_id))
        return None


@storefront.event_handler(part_of=Order)
class OrderNotificationsHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        notify_customer(
            event.customer_email,
            NotificationType.ORDER_CONFIRMATION.value,
            {
                "order_id": str(event.order_id),
                "lines": json.loads(event.lines) if isinstance(event.lines, str) else event.lines,
                "items_price": event.items_price,
                "tax_price": event.tax_price,
                "shipping_price": event.shipping_price,
                "total_price": event.total_price,
                "currency": config.currency().upper(),
            },
        )

    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid) -> None:
        notify_customer(
            _customer_email_for(event.order_id),
            NotificationType.PAYMENT_RECEIPT.value,
            {
                "order_id": str(event.order_id),
                "amount": event.amount,
                "payment_intent_id": event.payment_intent_id,
                "currency": config.currency().upper(),
            },
        )

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        if event.changed_by == PAYMENT_PROVIDER:
            return

        notify_customer(
            event.customer_email,
            NotificationType.STATUS_UPDATE.value,
            {
                "order_id": str(event.order_id),
                "previous_status": event.previous_status,
                "new_status": event.new_status,
            },
        )
