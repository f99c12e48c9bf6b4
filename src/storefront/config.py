"""Business configuration for the storefront.

Infrastructure settings (databases, brokers, processing modes) live in
domain.toml. The values here are pricing and integration knobs that the
commitment and payment flows read at call time, so tests can monkeypatch
the environment.
"""

import os
from decimal import Decimal

DEFAULT_TAX_RATE = "0.05"
DEFAULT_SHIPPING_PRICE = "10.00"
DEFAULT_CURRENCY = "usd"
DEFAULT_MAX_CONFLICT_RETRIES = 3


def tax_rate() -> Decimal:
    return Decimal(os.getenv("STOREFRONT_TAX_RATE", DEFAULT_TAX_RATE))


def shipping_price() -> Decimal:
    return Decimal(os.getenv("STOREFRONT_SHIPPING_PRICE", DEFAULT_SHIPPING_PRICE))


def currency() -> str:
    return os.getenv("STOREFRONT_CURRENCY", DEFAULT_CURRENCY).lower()


def max_conflict_retries() -> int:
    """Number of times a transaction is re-run after a version conflict."""
    return int(os.getenv("STOREFRONT_MAX_CONFLICT_RETRIES", DEFAULT_MAX_CONFLICT_RETRIES))


def payment_gateway_name() -> str:
    return os.getenv("STOREFRONT_PAYMENT_GATEWAY", "fake").lower()


def webhook_secret() -> str:
    """Shared secret used by the fake gateway to sign webhook payloads."""
    return os.getenv("STOREFRONT_WEBHOOK_SECRET", "whsec_storefront_dev")


def email_backend_name() -> str:
    return os.getenv("STOREFRONT_EMAIL_BACKEND", "fake").lower()
