"""Racing commitments for the last units of a product.

``TestStaleWrite`` produces a real version conflict: a stale Product copy
is written after a competing checkout has already committed. The other
classes fail chosen attempts with ``ExpectedVersionError`` so the retry
bound can be exercised precisely.
"""

import json

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError
from storefront.catalogue.product import Product
from storefront.errors import Conflict, InsufficientStock
from storefront.ordering import commitment
from storefront.ordering.order import Order
from storefront.utils.retry import run_with_conflict_retry


class _RacingDomain:
    """Delegates to the real domain, losing the first ``losses`` attempts."""

    def __init__(self, losses, before_loss=None):
        self.losses = losses
        self.before_loss = before_loss
        self.attempts = 0

    def process(self, command, asynchronous=False):
        self.attempts += 1
        if self.attempts <= self.losses:
            if self.before_loss:
                self.before_loss()
            raise ExpectedVersionError("Wrong expected version")
        return current_domain.process(command, asynchronous=asynchronous)

    def __getattr__(self, name):
        return getattr(current_domain, name)


def _stock(product_id):
    return current_domain.repository_for(Product).get(product_id).stock_quantity


def _orders():
    return current_domain.repository_for(Order)._dao.query.all().items


class TestLastUnitRace:
    def test_loser_rereads_stock_and_fails(self, make_product, place_order, monkeypatch):
        product_id = make_product(price=5.00, stock_quantity=1)
        line = [{"product_id": product_id, "price": 5.00, "quantity": 1}]

        def winner_commits():
            place_order(line, customer_id="cust-winner")

        monkeypatch.setattr(commitment, "current_domain", _RacingDomain(losses=1, before_loss=winner_commits))

        with pytest.raises(InsufficientStock):
            place_order(line, customer_id="cust-loser")

        assert _stock(product_id) == 0
        orders = _orders()
        assert len(orders) == 1
        assert orders[0].customer_id == "cust-winner"

    def test_both_succeed_when_stock_allows(self, make_product, place_order, monkeypatch):
        product_id = make_product(price=5.00, stock_quantity=2)
        line = [{"product_id": product_id, "price": 5.00, "quantity": 1}]

        monkeypatch.setattr(
            commitment,
            "current_domain",
            _RacingDomain(losses=1, before_loss=lambda: place_order(line, customer_id="cust-a")),
        )
        place_order(line, customer_id="cust-b")

        assert _stock(product_id) == 0
        assert len(_orders()) == 2

    def test_sequential_last_unit(self, make_product, place_order):
        product_id = make_product(price=5.00, stock_quantity=1)
        line = [{"product_id": product_id, "price": 5.00, "quantity": 1}]

        place_order(line, customer_id="cust-first")
        with pytest.raises(InsufficientStock):
            place_order(line, customer_id="cust-second")

        assert _stock(product_id) == 0
        assert len(_orders()) == 1


class TestBoundedRetry:
    def test_conflict_after_retries_exhausted(self, make_product, place_order, monkeypatch):
        monkeypatch.setenv("STOREFRONT_MAX_CONFLICT_RETRIES", "2")
        product_id = make_product(price=5.00, stock_quantity=5)
        racing = _RacingDomain(losses=10)
        monkeypatch.setattr(commitment, "current_domain", racing)

        with pytest.raises(Conflict):
            place_order([{"product_id": product_id, "price": 5.00, "quantity": 1}])

        assert racing.attempts == 3
        assert _stock(product_id) == 5
        assert _orders() == []

    def test_success_within_bound(self, make_product, place_order, monkeypatch):
        product_id = make_product(price=5.00, stock_quantity=5)
        racing = _RacingDomain(losses=3)
        monkeypatch.setattr(commitment, "current_domain", racing)

        place_order([{"product_id": product_id, "price": 5.00, "quantity": 1}])

        assert racing.attempts == 4
        assert _stock(product_id) == 4


class TestStaleWrite:
    LINE = {"price": 5.00, "quantity": 1}

    def _checkout_command(self, product_id, customer_id, shipping_address):
        return commitment.PlaceOrder(
            customer_id=customer_id,
            customer_email=f"{customer_id}@example.com",
            lines=json.dumps([{"product_id": product_id, **self.LINE}]),
            shipping_address=json.dumps(shipping_address),
            payment_method="card",
        )

    def test_stale_product_copy_is_rejected(self, make_product, place_order):
        product_id = make_product(price=5.00, stock_quantity=2)
        repo = current_domain.repository_for(Product)

        stale = repo.get(product_id)
        place_order([{"product_id": product_id, **self.LINE}], customer_id="cust-winner")
        stale.decrement_stock(1, order_id="order-from-stale-read")

        with pytest.raises(ExpectedVersionError):
            repo.add(stale)

        assert _stock(product_id) == 1

    def test_retry_rereads_stock_after_real_conflict(self, make_product, place_order, shipping_address):
        product_id = make_product(price=5.00, stock_quantity=1)
        repo = current_domain.repository_for(Product)
        command = self._checkout_command(product_id, "cust-loser", shipping_address)
        attempts = []

        def loser_checkout():
            attempts.append(len(attempts) + 1)
            if len(attempts) == 1:
                stale = repo.get(product_id)
                place_order([{"product_id": product_id, **self.LINE}], customer_id="cust-winner")
                stale.decrement_stock(1, order_id="order-from-stale-read")
                repo.add(stale)
            return current_domain.process(command, asynchronous=False)

        with pytest.raises(InsufficientStock):
            run_with_conflict_retry(loser_checkout, description="Order commitment")

        assert attempts == [1, 2]
        assert _stock(product_id) == 0
        orders = _orders()
        assert [order.customer_id for order in orders] == ["cust-winner"]
