"""Order commitment — turns a customer's cart into a persisted order.

The handler runs inside a single unit of work: every product is loaded,
the claimed prices and stock are checked, the order is built from the
authoritative catalogue values and each product's stock is decremented.
If anything raises, the unit of work is rolled back and neither the order
nor any stock change is persisted.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront import config
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import PriceMismatch, ProductNotFound
from storefront.ordering.order import Order, ShippingAddress
from storefront.shared.money import CENT, as_decimal, prices_match
from storefront.utils.logging import get_logger, log_context
from storefront.utils.retry import run_with_conflict_retry

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    customer_email = String(max_length=255)
    lines = Text(required=True)  # JSON: list of {product_id, price, quantity}
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True, max_length=50)


def _claimed(price):
    amount = as_decimal(price)
    return amount.quantize(CENT) if amount == amount.quantize(CENT) else amount


def merge_cart_lines(cart_lines):
    """Collapse repeated products into one line with the summed quantity.

    Returns a list of ``{"product_id", "price", "quantity"}`` dicts in first
    seen order. Repeated products must claim the same price.
    """
    if not cart_lines or not isinstance(cart_lines, list):
        raise ValidationError({"lines": ["Cart is empty"]})

    merged = {}
    for index, line in enumerate(cart_lines):
        if not isinstance(line, dict):
            raise ValidationError({"lines": [f"Line {index} is malformed"]})
        product_id = line.get("product_id")
        quantity = line.get("quantity")
        price = line.get("price")

        if not product_id:
            raise ValidationError({"lines": [f"Line {index} is missing a product id"]})
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError({"lines": [f"Quantity for product {product_id} must be a positive integer"]})
        try:
            if price is None or isinstance(price, bool) or as_decimal(price) <= 0:
                raise ValueError(price)
        except (ValueError, ArithmeticError):
            raise ValidationError({"lines": [f"Price for product {product_id} must be a positive amount"]}) from None

        key = str(product_id)
        if key in merged:
            if as_decimal(merged[key]["price"]) != as_decimal(price):
                raise ValidationError({"lines": [f"Product {product_id} appears with conflicting prices"]})
            merged[key]["quantity"] += quantity
        else:
            merged[key] = {"product_id": key, "price": price, "quantity": quantity}

    return list(merged.values())


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_lines = json.loads(command.lines) if isinstance(command.lines, str) else command.lines
        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )
        if not isinstance(shipping_address, dict):
            raise ValidationError({"shipping_address": ["Shipping address is required"]})
        requested = merge_cart_lines(cart_lines)

        product_repo = current_domain.repository_for(Product)
        products = []
        snapshots = []
        for line in requested:
            try:
                product = product_repo.get(line["product_id"])
            except ObjectNotFoundError:
                raise ProductNotFound({"product_id": [f"Product {line['product_id']} does not exist"]}) from None

            if not prices_match(line["price"], product.selling_price):
                raise PriceMismatch(
                    {
                        "price": [
                            f"Price for '{product.name}' ({product.id}) has changed: "
                            f"cart has {_claimed(line['price'])}, current price is {product.selling_price}"
                        ]
                    }
                )

            products.append((product, line["quantity"]))
            snapshots.append(
                {
                    "product_id": product.id,
                    "name": product.name,
                    "quantity": line["quantity"],
                    "unit_price": product.selling_price,
                    "image_url": product.image_url,
                }
            )

        order = Order.place(
            customer_id=command.customer_id,
            customer_email=command.customer_email,
            lines=snapshots,
            shipping_address=ShippingAddress(**shipping_address),
            payment_method=command.payment_method,
            tax_rate=config.tax_rate(),
            shipping_price=config.shipping_price(),
        )

        # Raises InsufficientStock before anything is persisted
        for product, quantity in products:
            product.decrement_stock(quantity, order_id=order.id)

        current_domain.repository_for(Order).add(order)
        for product, _ in products:
            product_repo.add(product)

        return str(order.id)


def _product_ids(cart_lines):
    return [str(line.get("product_id")) for line in cart_lines or [] if isinstance(line, dict)]


def commit_order(customer_id, customer_email, cart_lines, shipping_address, payment_method):
    """Commit a cart, re-running the transaction when it loses a stock race.

    ``cart_lines`` is a list of ``{"product_id", "price", "quantity"}``
    dicts where ``price`` is the unit price the customer saw. Returns the
    new order id.
    """
    command = PlaceOrder(
        customer_id=customer_id,
        customer_email=customer_email,
        lines=json.dumps(cart_lines, default=str),
        shipping_address=json.dumps(shipping_address),
        payment_method=payment_method,
    )

    with log_context(customer_id=customer_id):
        try:
            order_id = run_with_conflict_retry(
                lambda: current_domain.process(command, asynchronous=False),
                description="Order commitment",
            )
        except Exception as exc:
            logger.info(
                "Order commitment rejected",
                product_ids=_product_ids(cart_lines),
                reason=type(exc).__name__,
                detail=str(exc),
            )
            raise

        logger.info("Order committed", order_id=order_id, product_ids=_product_ids(cart_lines))
    return order_id
