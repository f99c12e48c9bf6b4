"""Status transition authority — who may move an order where.

Admins may set any status and assign delivery agents. Delivery agents may
only move orders assigned to them, only towards delivery outcomes, and only
along the order state machine. Customers never change status directly; the
only automatic transition (Pending → Processing) belongs to payment
reconciliation.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import Forbidden, InvalidTransition, OrderNotFound
from storefront.ordering.order import Order, OrderStatus, is_valid_transition
from storefront.shared.actor import Actor, ActorRole
from storefront.utils.logging import get_logger, log_context
from storefront.utils.retry import run_with_conflict_retry

logger = get_logger(__name__)

AGENT_TARGETS = frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError({"status": [f"Unknown status '{value}'. Expected one of: {allowed}"]}) from None


def authorize_transition(order, actor: Actor, target: OrderStatus) -> None:
    """Raise unless ``actor`` may move ``order`` to ``target``."""
    if actor.is_admin:
        return

    if actor.is_delivery_agent:
        if not order.delivery_agent_id or str(order.delivery_agent_id) != str(actor.id):
            raise Forbidden({"order": ["Order is not assigned to you"]})
        if target not in AGENT_TARGETS:
            raise Forbidden({"status": [f"Delivery agents cannot set status '{target.value}'"]})
        if order.status != target.value and not is_valid_transition(OrderStatus(order.status), target):
            raise InvalidTransition({"status": [f"Cannot move order from '{order.status}' to '{target.value}'"]})
        return

    raise Forbidden({"role": [f"Role '{actor.role}' cannot change order status"]})


def _load_order(order_id):
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound({"order_id": [f"Order {order_id} does not exist"]}) from None


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=50)


@storefront.command(part_of="Order")
class AssignDeliveryAgent:
    order_id = Identifier(required=True)
    delivery_agent_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=50)


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        actor = Actor(id=str(command.actor_id), role=command.actor_role)
        target = parse_status(command.status)

        repo = current_domain.repository_for(Order)
        order = _load_order(command.order_id)
        authorize_transition(order, actor, target)

        changed = order.transition_to(target, changed_by=actor.role)
        if changed:
            repo.add(order)
        return changed

    @handle(AssignDeliveryAgent)
    def assign_delivery_agent(self, command):
        if command.actor_role != ActorRole.ADMIN.value:
            raise Forbidden({"role": ["Only admins can assign delivery agents"]})

        repo = current_domain.repository_for(Order)
        order = _load_order(command.order_id)

        assigned = order.assign_delivery_agent(command.delivery_agent_id, assigned_by=str(command.actor_id))
        if assigned:
            repo.add(order)
        return assigned


def update_order_status(order_id, new_status, actor: Actor):
    """Apply a status change on behalf of ``actor``. Returns the resulting status."""
    command = UpdateOrderStatus(
        order_id=order_id,
        status=new_status,
        actor_id=actor.id,
        actor_role=actor.role,
    )
    with log_context(order_id=order_id, actor_id=actor.id):
        changed = run_with_conflict_retry(
            lambda: current_domain.process(command, asynchronous=False),
            description="Order status update",
        )
        logger.info("Order status update", status=new_status, actor_role=actor.role, changed=bool(changed))
    return new_status


def assign_delivery_agent(order_id, delivery_agent_id, actor: Actor):
    command = AssignDeliveryAgent(
        order_id=order_id,
        delivery_agent_id=delivery_agent_id,
        actor_id=actor.id,
        actor_role=actor.role,
    )
    assigned = run_with_conflict_retry(
        lambda: current_domain.process(command, asynchronous=False),
        description="Delivery agent assignment",
    )
    logger.info(
        "Delivery agent assignment",
        order_id=str(order_id),
        delivery_agent_id=str(delivery_agent_id),
        assigned=bool(assigned),
    )
    return assigned
