"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; the contended product
is the only thing shared between users.
"""

from dataclasses import dataclass, field


@dataclass
class ContendedProduct:
    """The product every racing user tries to buy."""

    product_id: str | None = None
    price: float = 0.0
    initial_stock: int = 0


@dataclass
class CheckoutState:
    """Tracks one simulated customer's orders."""

    headers: dict = field(default_factory=dict)
    order_ids: list[str] = field(default_factory=list)
    rejected_for_stock: int = 0
