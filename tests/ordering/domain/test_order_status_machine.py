"""Tests for Order status transitions, delivery timestamps and agent assignment."""

from decimal import Decimal

import pytest
from storefront.errors import Forbidden, InvalidTransition
from storefront.ordering.events import DeliveryAgentAssigned, OrderStatusChanged
from storefront.ordering.order import Order, OrderStatus, ShippingAddress, is_valid_transition
from storefront.ordering.status import authorize_transition
from storefront.shared.actor import Actor

ADMIN = Actor(id="admin-001", role="admin")
AGENT = Actor(id="agent-001", role="delivery-agent")
OTHER_AGENT = Actor(id="agent-002", role="delivery-agent")
CUSTOMER = Actor(id="cust-001", role="customer")


def _make_order():
    order = Order.place(
        customer_id="cust-001",
        customer_email="cust-001@example.com",
        lines=[{"product_id": "prod-1", "name": "Eggs (12)", "quantity": 1, "unit_price": Decimal("3.20")}],
        shipping_address=ShippingAddress(
            address="12 Market Street", city="Springfield", postal_code="12345", country="US", phone="555"
        ),
        payment_method="card",
        tax_rate=Decimal("0.05"),
        shipping_price=Decimal("10.00"),
    )
    order._events.clear()
    return order


def _order_at(status, agent_id=None):
    order = _make_order()
    if agent_id:
        order.assign_delivery_agent(agent_id, assigned_by="admin-001")
    if status != OrderStatus.PENDING:
        order.transition_to(status, changed_by="admin")
    order._events.clear()
    return order


class TestTransitionTable:
    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.PROCESSING),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.PROCESSING, OrderStatus.OUT_FOR_DELIVERY),
            (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED),
            (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED),
        ],
    )
    def test_valid(self, current, target):
        assert is_valid_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.DELIVERED),
            (OrderStatus.PROCESSING, OrderStatus.PENDING),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.PROCESSING),
        ],
    )
    def test_invalid(self, current, target):
        assert not is_valid_transition(current, target)


class TestDeliveredTimestamp:
    def test_entering_delivered_sets_timestamp(self):
        order = _order_at(OrderStatus.OUT_FOR_DELIVERY)
        order.transition_to(OrderStatus.DELIVERED, changed_by="delivery-agent")
        assert order.delivered_at is not None

    def test_delivered_again_is_a_no_op(self):
        order = _order_at(OrderStatus.DELIVERED)
        first = order.delivered_at

        changed = order.transition_to(OrderStatus.DELIVERED, changed_by="admin")

        assert changed is False
        assert order.delivered_at == first
        assert order._events == []

    def test_leaving_delivered_clears_timestamp(self):
        order = _order_at(OrderStatus.DELIVERED)
        order.transition_to(OrderStatus.OUT_FOR_DELIVERY, changed_by="admin")
        assert order.delivered_at is None

    def test_change_raises_status_changed(self):
        order = _order_at(OrderStatus.PROCESSING)
        order.transition_to(OrderStatus.OUT_FOR_DELIVERY, changed_by="delivery-agent")

        event = order._events[0]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "Processing"
        assert event.new_status == "Out for Delivery"
        assert event.changed_by == "delivery-agent"


class TestAuthority:
    def test_admin_may_override_table(self):
        order = _order_at(OrderStatus.CANCELLED)
        authorize_transition(order, ADMIN, OrderStatus.PROCESSING)

    def test_customer_forbidden(self):
        order = _order_at(OrderStatus.PENDING)
        with pytest.raises(Forbidden):
            authorize_transition(order, CUSTOMER, OrderStatus.CANCELLED)

    def test_agent_on_unassigned_order_forbidden(self):
        order = _order_at(OrderStatus.PROCESSING)
        with pytest.raises(Forbidden):
            authorize_transition(order, AGENT, OrderStatus.OUT_FOR_DELIVERY)

    def test_agent_on_someone_elses_order_forbidden(self):
        order = _order_at(OrderStatus.PROCESSING, agent_id="agent-001")
        with pytest.raises(Forbidden):
            authorize_transition(order, OTHER_AGENT, OrderStatus.OUT_FOR_DELIVERY)

    def test_agent_cannot_set_processing(self):
        order = _order_at(OrderStatus.PENDING, agent_id="agent-001")
        with pytest.raises(Forbidden):
            authorize_transition(order, AGENT, OrderStatus.PROCESSING)

    def test_agent_must_follow_table(self):
        order = _order_at(OrderStatus.PENDING, agent_id="agent-001")
        with pytest.raises(InvalidTransition):
            authorize_transition(order, AGENT, OrderStatus.DELIVERED)

    def test_agent_along_table_allowed(self):
        order = _order_at(OrderStatus.PROCESSING, agent_id="agent-001")
        authorize_transition(order, AGENT, OrderStatus.OUT_FOR_DELIVERY)

    def test_agent_repeating_current_status_allowed(self):
        order = _order_at(OrderStatus.DELIVERED, agent_id="agent-001")
        authorize_transition(order, AGENT, OrderStatus.DELIVERED)


class TestDeliveryAgentAssignment:
    def test_assign_once(self):
        order = _make_order()
        assert order.assign_delivery_agent("agent-001", assigned_by="admin-001") is True
        assert order.delivery_agent_id == "agent-001"
        assert isinstance(order._events[0], DeliveryAgentAssigned)

    def test_same_agent_is_a_no_op(self):
        order = _order_at(OrderStatus.PROCESSING, agent_id="agent-001")
        assert order.assign_delivery_agent("agent-001", assigned_by="admin-001") is False
        assert order._events == []

    def test_different_agent_refused(self):
        order = _order_at(OrderStatus.PROCESSING, agent_id="agent-001")
        with pytest.raises(InvalidTransition):
            order.assign_delivery_agent("agent-002", assigned_by="admin-001")

    @pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_terminal_orders_cannot_be_assigned(self, status):
        order = _order_at(status)
        with pytest.raises(InvalidTransition):
            order.assign_delivery_agent("agent-001", assigned_by="admin-001")
