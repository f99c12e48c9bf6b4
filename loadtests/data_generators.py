"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names of the API's Pydantic request schemas and
pass the domain's validation rules.
"""

import random
import uuid

from faker import Faker

fake = Faker()


def actor_headers(role: str = "customer", actor_id: str | None = None) -> dict:
    """Headers the upstream identity provider would inject."""
    actor_id = actor_id or f"{role}-{uuid.uuid4().hex[:8]}"
    headers = {"X-Actor-Id": actor_id, "X-Actor-Role": role}
    if role == "customer":
        headers["X-Actor-Email"] = f"{actor_id}@{fake.free_email_domain()}"
    return headers


ADMIN_HEADERS = {"X-Actor-Id": "admin-loadtest", "X-Actor-Role": "admin"}


def product_data(stock_quantity: int | None = None) -> dict:
    price = round(random.uniform(0.5, 25.0), 2)
    return {
        "name": f"{fake.word().title()} {fake.word()} {uuid.uuid4().hex[:6]}",
        "description": fake.sentence(),
        "price": price,
        "stock_quantity": random.randint(50, 500) if stock_quantity is None else stock_quantity,
    }


def shipping_address() -> dict:
    return {
        "address": fake.street_address(),
        "city": fake.city(),
        "postal_code": fake.postcode(),
        "country": fake.country_code(),
        "phone": f"+1-{random.randint(200, 999)}-{random.randint(200, 999)}-{random.randint(1000, 9999)}",
    }


def order_data(product_id: str, price: float, quantity: int = 1) -> dict:
    return {
        "lines": [{"product_id": product_id, "price": price, "quantity": quantity}],
        "shipping_address": shipping_address(),
        "payment_method": "card",
    }


def payment_event(event_type: str, order_id: str, payment_intent_id: str, event_id: str | None = None) -> dict:
    """A provider-shaped event as the fake gateway expects it."""
    return {
        "id": event_id or f"evt_lt_{uuid.uuid4().hex[:16]}",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": payment_intent_id,
                "object": "payment_intent",
                "status": "succeeded" if event_type == "payment_intent.succeeded" else "requires_payment_method",
                "metadata": {"order_id": order_id},
            }
        },
    }
