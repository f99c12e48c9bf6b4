"""Domain events for the Order aggregate.

Events are raised inside the unit of work that changed the order and are
dispatched to event handlers (customer notifications) once it commits.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was committed: prices verified, stock reserved, order persisted."""

    __version__ = 1

    order_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    customer_email: String()
    lines: Text(required=True)  # JSON list of line snapshots
    items_price: Float(required=True)
    tax_price: Float(required=True)
    shipping_price: Float(required=True)
    total_price: Float(required=True)
    placed_at: DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentIntentAttached:
    __version__ = 1

    order_id: Identifier(required=True)
    payment_intent_id: String(required=True)
    attached_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    """The payment provider confirmed payment for the order."""

    __version__ = 1

    order_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    payment_intent_id: String(required=True)
    amount: Float(required=True)
    paid_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a different status. Never raised for a same-status update."""

    __version__ = 1

    order_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    customer_email: String()
    previous_status: String(required=True)
    new_status: String(required=True)
    changed_by: String(required=True)
    changed_at: DateTime(required=True)


@storefront.event(part_of="Order")
class DeliveryAgentAssigned:
    __version__ = 1

    order_id: Identifier(required=True)
    delivery_agent_id: Identifier(required=True)
    assigned_by: String(required=True)
    assigned_at: DateTime(required=True)
