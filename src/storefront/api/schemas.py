"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. Business validation (empty carts, quantities,
prices) happens in the domain so every rejection has the same shape.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class CreateCategoryRequest(BaseModel):
    name: str
    description: str | None = None
    parent_category_id: str | None = None
    image_url: str | None = None


class AddProductRequest(BaseModel):
    name: str
    description: str | None = None
    price: float
    stock_quantity: int = 0
    category_id: str | None = None
    image_url: str | None = None
    is_on_sale: bool = False
    discount_price: float | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Organic Bananas (1kg)",
                    "price": 2.49,
                    "stock_quantity": 120,
                    "is_on_sale": False,
                }
            ]
        }
    }


class ChangePriceRequest(BaseModel):
    price: float
    is_on_sale: bool = False
    discount_price: float | None = None


class RestockRequest(BaseModel):
    quantity: int


class CategoryIdResponse(BaseModel):
    category_id: str


class ProductIdResponse(BaseModel):
    product_id: str


class ProductResponse(BaseModel):
    product_id: str
    name: str
    description: str | None = None
    price: float
    selling_price: float
    stock_quantity: int
    category_id: str | None = None
    image_url: str | None = None
    is_on_sale: bool
    discount_price: float | None = None


class StockResponse(BaseModel):
    product_id: str
    stock_quantity: int


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    product_id: str
    price: float  # unit price the customer saw
    quantity: int


class ShippingAddressSchema(BaseModel):
    address: str
    city: str
    postal_code: str
    country: str
    phone: str


class PlaceOrderRequest(BaseModel):
    lines: list[CartLineSchema]
    shipping_address: ShippingAddressSchema
    payment_method: str = "card"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "lines": [{"product_id": "prod-001", "price": 5.00, "quantity": 2}],
                    "shipping_address": {
                        "address": "12 Market Street",
                        "city": "Springfield",
                        "postal_code": "12345",
                        "country": "US",
                        "phone": "+1-555-0100",
                    },
                    "payment_method": "card",
                }
            ]
        }
    }


class OrderIdResponse(BaseModel):
    order_id: str


class OrderLineResponse(BaseModel):
    product_id: str
    name: str
    quantity: int
    unit_price: float
    image_url: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    lines: list[OrderLineResponse]
    shipping_address: ShippingAddressSchema
    payment_method: str
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    is_paid: bool
    paid_at: str | None = None
    payment_intent_id: str | None = None
    status: str
    delivery_agent_id: str | None = None
    delivered_at: str | None = None


class UpdateStatusRequest(BaseModel):
    status: str


class AssignDeliveryAgentRequest(BaseModel):
    delivery_agent_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str
    delivered_at: str | None = None


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class CreatePaymentIntentRequest(BaseModel):
    order_id: str


class PaymentIntentResponse(BaseModel):
    order_id: str
    payment_intent_id: str
    client_secret: str
    amount: int = Field(description="Amount in the smallest currency unit")
    currency: str


class WebhookAckResponse(BaseModel):
    received: bool = True
    event_id: str
    outcome: str
