"""Storefront HTTP API package."""

from storefront.api.catalogue import category_router, product_router
from storefront.api.errors import register_error_handlers
from storefront.api.orders import order_router
from storefront.api.payments import payment_router

__all__ = ["category_router", "product_router", "order_router", "payment_router", "register_error_handlers"]
