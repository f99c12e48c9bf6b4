"""FastAPI endpoints for orders: commitment, reads, status and delivery."""

from fastapi import APIRouter, Depends
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.actors import current_actor
from storefront.api.schemas import (
    AssignDeliveryAgentRequest,
    OrderIdResponse,
    OrderLineResponse,
    OrderResponse,
    OrderStatusResponse,
    PlaceOrderRequest,
    ShippingAddressSchema,
    StatusResponse,
    UpdateStatusRequest,
)
from storefront.errors import Forbidden, OrderNotFound
from storefront.ordering.commitment import commit_order
from storefront.ordering.order import Order
from storefront.ordering.status import assign_delivery_agent, update_order_status
from storefront.shared.actor import Actor

order_router = APIRouter(prefix="/orders", tags=["orders"])


def _iso(value):
    return value.isoformat() if value else None


def _load_order(order_id: str) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound({"order_id": [f"Order {order_id} does not exist"]}) from None


def _can_view(order: Order, actor: Actor) -> bool:
    if actor.is_admin:
        return True
    if actor.is_delivery_agent:
        return bool(order.delivery_agent_id) and str(order.delivery_agent_id) == actor.id
    return str(order.customer_id) == actor.id


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest, actor: Actor = Depends(current_actor)) -> OrderIdResponse:
    if actor.is_delivery_agent:
        raise Forbidden({"role": ["Delivery agents cannot place orders"]})

    order_id = commit_order(
        customer_id=actor.id,
        customer_email=actor.email,
        cart_lines=[line.model_dump() for line in body.lines],
        shipping_address=body.shipping_address.model_dump(),
        payment_method=body.payment_method,
    )
    return OrderIdResponse(order_id=order_id)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    order = _load_order(order_id)
    if not _can_view(order, actor):
        # Same answer as a missing order, so foreign order ids are not disclosed
        raise OrderNotFound({"order_id": [f"Order {order_id} does not exist"]})

    address = order.shipping_address
    return OrderResponse(
        order_id=str(order.id),
        customer_id=str(order.customer_id),
        lines=[
            OrderLineResponse(
                product_id=str(line.product_id),
                name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                image_url=line.image_url,
            )
            for line in order.lines
        ],
        shipping_address=ShippingAddressSchema(
            address=address.address,
            city=address.city,
            postal_code=address.postal_code,
            country=address.country,
            phone=address.phone,
        ),
        payment_method=order.payment_method,
        items_price=order.items_price,
        tax_price=order.tax_price,
        shipping_price=order.shipping_price,
        total_price=order.total_price,
        is_paid=bool(order.is_paid),
        paid_at=_iso(order.paid_at),
        payment_intent_id=order.payment_intent_id,
        status=order.status,
        delivery_agent_id=str(order.delivery_agent_id) if order.delivery_agent_id else None,
        delivered_at=_iso(order.delivered_at),
    )


@order_router.put("/{order_id}/status", response_model=OrderStatusResponse)
async def update_status(
    order_id: str, body: UpdateStatusRequest, actor: Actor = Depends(current_actor)
) -> OrderStatusResponse:
    update_order_status(order_id, body.status, actor)
    order = _load_order(order_id)
    return OrderStatusResponse(order_id=str(order.id), status=order.status, delivered_at=_iso(order.delivered_at))


@order_router.put("/{order_id}/delivery-agent", response_model=StatusResponse)
async def set_delivery_agent(
    order_id: str, body: AssignDeliveryAgentRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    assigned = assign_delivery_agent(order_id, body.delivery_agent_id, actor)
    return StatusResponse(status="assigned" if assigned else "unchanged")
