"""Order aggregate — the ledger record of a committed cart.

Lines are snapshots: name, unit price and image are copied from the
catalogue at commitment time, so later price edits never rewrite history.
All monetary totals are derived here from the snapshot lines; nothing the
client sends is used for billing.

State Machine:
    PENDING → PROCESSING → OUT_FOR_DELIVERY → DELIVERED
    CANCELLED reachable from any non-terminal state
    DELIVERED and CANCELLED are terminal
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.errors import InvalidTransition
from storefront.shared.money import CENT, to_money


class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)


def is_valid_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS[current]


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the groceries go. Frozen on the order at checkout."""

    address: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    postal_code: String(required=True, max_length=20)
    country: String(required=True, max_length=100)
    phone: String(required=True, max_length=30)


@storefront.value_object(part_of="Order")
class PaymentResult:
    """Receipt returned by the payment provider on confirmation."""

    payment_intent_id: String(required=True, max_length=255)
    status: String(max_length=50)
    update_time: String(max_length=50)
    email_address: String(max_length=255)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """One product on the order, priced at the authoritative price of the moment."""

    product_id: Identifier(required=True)
    name: String(required=True, max_length=200)
    quantity: Integer(required=True, min_value=1)
    unit_price: Float(required=True, min_value=0.01)
    image_url: String(max_length=500)

    @property
    def line_total(self):
        return to_money(self.unit_price) * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id: Identifier(required=True)
    customer_email: String(max_length=255)
    lines: HasMany(OrderLine)
    shipping_address: ValueObject(ShippingAddress, required=True)
    payment_method: String(required=True, max_length=50)
    items_price: Float(default=0.0, min_value=0.0)
    tax_price: Float(default=0.0, min_value=0.0)
    shipping_price: Float(default=0.0, min_value=0.0)
    total_price: Float(default=0.0, min_value=0.0)
    is_paid: Boolean(default=False)
    paid_at: DateTime()
    payment_result: ValueObject(PaymentResult)
    payment_intent_id: String(max_length=255)
    status: String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    delivery_agent_id: Identifier()
    delivered_at: DateTime()
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def total_is_sum_of_components(self):
        expected = to_money(self.items_price) + to_money(self.tax_price) + to_money(self.shipping_price)
        if abs(to_money(self.total_price) - expected) >= CENT:
            raise ValidationError({"total_price": ["Total must equal items + tax + shipping"]})

    @invariant.post
    def paid_orders_carry_payment_time(self):
        if self.is_paid and self.paid_at is None:
            raise ValidationError({"paid_at": ["A paid order must record when it was paid"]})

    @invariant.post
    def delivery_time_only_while_delivered(self):
        if self.delivered_at is not None and self.status != OrderStatus.DELIVERED.value:
            raise ValidationError({"delivered_at": ["Only delivered orders carry a delivery time"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        customer_email,
        lines,
        shipping_address,
        payment_method,
        tax_rate,
        shipping_price,
    ):
        """Create a Pending order from authoritative line snapshots.

        ``lines`` is a list of dicts with product_id, name, quantity,
        unit_price and image_url, already validated against the catalogue.
        """
        from storefront.ordering.events import OrderPlaced

        if not lines:
            raise ValidationError({"lines": ["An order needs at least one line"]})

        items_price = sum((to_money(line["unit_price"]) * line["quantity"] for line in lines), to_money(0))
        items_price = to_money(items_price)
        tax_price = to_money(items_price * tax_rate)
        shipping = to_money(shipping_price)
        total_price = items_price + tax_price + shipping

        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            customer_email=customer_email,
            shipping_address=shipping_address,
            payment_method=payment_method,
            items_price=float(items_price),
            tax_price=float(tax_price),
            shipping_price=float(shipping),
            total_price=float(total_price),
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        for line in lines:
            order.add_lines(
                OrderLine(
                    product_id=line["product_id"],
                    name=line["name"],
                    quantity=line["quantity"],
                    unit_price=float(to_money(line["unit_price"])),
                    image_url=line.get("image_url"),
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=order.id,
                customer_id=customer_id,
                customer_email=customer_email,
                lines=json.dumps(
                    [
                        {
                            "product_id": str(line["product_id"]),
                            "name": line["name"],
                            "quantity": line["quantity"],
                            "unit_price": float(to_money(line["unit_price"])),
                        }
                        for line in lines
                    ]
                ),
                items_price=order.items_price,
                tax_price=order.tax_price,
                shipping_price=order.shipping_price,
                total_price=order.total_price,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def attach_payment_intent(self, payment_intent_id):
        from storefront.ordering.events import PaymentIntentAttached

        if self.is_paid:
            raise InvalidTransition({"is_paid": ["Order has already been paid for"]})
        if self.status == OrderStatus.CANCELLED.value:
            raise InvalidTransition({"status": ["Cancelled orders cannot be paid"]})

        self.payment_intent_id = payment_intent_id
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentIntentAttached(
                order_id=self.id,
                payment_intent_id=payment_intent_id,
                attached_at=self.updated_at,
            )
        )

    def record_payment(self, payment_intent_id, receipt_status=None, receipt_email=None, changed_by="payment-provider"):
        """Mark the order paid. ``is_paid`` only ever moves from False to True."""
        from storefront.ordering.events import OrderPaid

        if self.is_paid:
            raise InvalidTransition({"is_paid": ["Order has already been paid for"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_paid = True
            self.paid_at = now
            self.payment_result = PaymentResult(
                payment_intent_id=payment_intent_id,
                status=receipt_status,
                update_time=now.isoformat(),
                email_address=receipt_email,
            )
            if not self.payment_intent_id:
                self.payment_intent_id = payment_intent_id
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=self.id,
                customer_id=self.customer_id,
                payment_intent_id=payment_intent_id,
                amount=self.total_price,
                paid_at=now,
            )
        )

        if self.status == OrderStatus.PENDING.value:
            self.transition_to(OrderStatus.PROCESSING, changed_by=changed_by)

    # -------------------------------------------------------------------
    # Status and delivery
    # -------------------------------------------------------------------
    def transition_to(self, new_status, changed_by):
        """Move to ``new_status`` without any role checks.

        Callers go through the status transition authority, which decides
        who may request what. Returns False when the status is unchanged.
        """
        from storefront.ordering.events import OrderStatusChanged

        target = OrderStatus(new_status)
        previous = self.status
        if previous == target.value:
            return False

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            if target == OrderStatus.DELIVERED:
                if self.delivered_at is None:
                    self.delivered_at = now
            else:
                self.delivered_at = None
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=self.id,
                customer_id=self.customer_id,
                customer_email=self.customer_email,
                previous_status=previous,
                new_status=target.value,
                changed_by=changed_by,
                changed_at=now,
            )
        )
        return True

    def assign_delivery_agent(self, delivery_agent_id, assigned_by):
        """Assign the agent once. Re-assigning the same agent is a no-op."""
        from storefront.ordering.events import DeliveryAgentAssigned

        if OrderStatus(self.status) in TERMINAL_STATES:
            raise InvalidTransition({"status": [f"Cannot assign a delivery agent to a {self.status} order"]})

        if self.delivery_agent_id:
            if str(self.delivery_agent_id) == str(delivery_agent_id):
                return False
            raise InvalidTransition({"delivery_agent_id": ["A delivery agent is already assigned to this order"]})

        now = datetime.now(UTC)
        self.delivery_agent_id = delivery_agent_id
        self.updated_at = now

        self.raise_(
            DeliveryAgentAssigned(
                order_id=self.id,
                delivery_agent_id=delivery_agent_id,
                assigned_by=assigned_by,
                assigned_at=now,
            )
        )
        return True
