"""Application tests for webhook reconciliation and its idempotency ledger."""

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError
from storefront.catalogue.product import Product
from storefront.errors import Conflict, SignatureInvalid
from storefront.ordering.order import Order, OrderStatus
from storefront.payments import reconciliation
from storefront.payments.gateway.port import PAYMENT_FAILED, PAYMENT_SUCCEEDED
from storefront.payments.ledger import ProcessedPaymentEvent
from storefront.payments.reconciliation import reconcile


@pytest.fixture()
def product_id(make_product):
    return make_product(price=5.00, stock_quantity=10)


@pytest.fixture()
def order_id(product_id, place_order):
    return place_order([{"product_id": product_id, "price": 5.00, "quantity": 2}])


def _deliver(gateway, event_type, order_id, event_id="evt_001", payment_intent_id="pi_001", **extra):
    event = gateway.build_event(event_type, payment_intent_id, order_id, event_id=event_id, **extra)
    payload, signature = gateway.signed_payload(event)
    return reconcile(payload, signature)


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _ledger():
    return current_domain.repository_for(ProcessedPaymentEvent)._dao.query.all().items


class TestPaymentSucceeded:
    def test_marks_order_paid_and_processing(self, gateway, order_id):
        ack = _deliver(gateway, PAYMENT_SUCCEEDED, order_id, receipt_email="cust-001@example.com")

        assert ack.outcome == "processed"
        order = _order(order_id)
        assert order.is_paid is True
        assert order.paid_at is not None
        assert order.status == OrderStatus.PROCESSING.value
        assert order.payment_result.payment_intent_id == "pi_001"
        assert order.payment_result.email_address == "cust-001@example.com"

    def test_replay_is_acknowledged_without_changes(self, gateway, order_id):
        _deliver(gateway, PAYMENT_SUCCEEDED, order_id)
        first = _order(order_id)

        ack = _deliver(gateway, PAYMENT_SUCCEEDED, order_id)

        assert ack.outcome == "duplicate"
        second = _order(order_id)
        assert second.paid_at == first.paid_at
        assert second.status == OrderStatus.PROCESSING.value
        assert len(_ledger()) == 1

    def test_second_event_for_paid_order_is_duplicate(self, gateway, order_id):
        _deliver(gateway, PAYMENT_SUCCEEDED, order_id, event_id="evt_001")
        paid_at = _order(order_id).paid_at

        ack = _deliver(gateway, PAYMENT_SUCCEEDED, order_id, event_id="evt_002")

        assert ack.outcome == "duplicate"
        assert _order(order_id).paid_at == paid_at
        assert {entry.outcome for entry in _ledger()} == {"processed", "duplicate"}

    def test_payment_does_not_touch_stock(self, gateway, order_id, product_id):
        _deliver(gateway, PAYMENT_SUCCEEDED, order_id)
        assert current_domain.repository_for(Product).get(product_id).stock_quantity == 8

    def test_status_only_advances_from_pending(self, gateway, order_id):
        from storefront.ordering.status import update_order_status
        from storefront.shared.actor import Actor

        update_order_status(order_id, "Out for Delivery", Actor(id="admin-001", role="admin"))

        _deliver(gateway, PAYMENT_SUCCEEDED, order_id)

        order = _order(order_id)
        assert order.is_paid is True
        assert order.status == OrderStatus.OUT_FOR_DELIVERY.value

    def test_missing_order_is_acknowledged(self, gateway):
        ack = _deliver(gateway, PAYMENT_SUCCEEDED, "ord-missing")

        assert ack.outcome == "order_not_found"
        assert _ledger()[0].outcome == "order_not_found"

    def test_order_found_by_intent_when_metadata_missing(self, gateway, order_id):
        from storefront.payments.intents import create_payment_intent
        from storefront.shared.actor import Actor

        intent = create_payment_intent(order_id, Actor(id="cust-001", role="customer"))
        ack = _deliver(gateway, PAYMENT_SUCCEEDED, None, payment_intent_id=intent.payment_intent_id)

        assert ack.outcome == "processed"
        assert ack.order_id == order_id
        assert _order(order_id).is_paid is True


class TestPaymentFailed:
    def test_failure_recorded_without_order_change(self, gateway, order_id):
        ack = _deliver(gateway, PAYMENT_FAILED, order_id, failure_message="Card declined")

        assert ack.outcome == "payment_failed"
        order = _order(order_id)
        assert order.is_paid is False
        assert order.status == OrderStatus.PENDING.value
        entry = _ledger()[0]
        assert entry.failure_message == "Card declined"

    def test_order_stays_payable_after_failure(self, gateway, order_id):
        _deliver(gateway, PAYMENT_FAILED, order_id, event_id="evt_fail")
        ack = _deliver(gateway, PAYMENT_SUCCEEDED, order_id, event_id="evt_ok")

        assert ack.outcome == "processed"
        assert _order(order_id).is_paid is True


class TestOtherEvents:
    def test_unknown_type_acknowledged_and_ignored(self, gateway, order_id):
        ack = _deliver(gateway, "charge.refunded", order_id)

        assert ack.outcome == "ignored"
        assert _order(order_id).is_paid is False
        assert _ledger() == []


class TestAuthenticity:
    def test_bad_signature_reads_and_writes_nothing(self, gateway, order_id):
        event = gateway.build_event(PAYMENT_SUCCEEDED, "pi_001", order_id)
        payload, _ = gateway.signed_payload(event)

        with pytest.raises(SignatureInvalid):
            reconcile(payload, "deadbeef")

        assert _order(order_id).is_paid is False
        assert _ledger() == []


class TestContention:
    def test_conflict_escapes_after_bounded_retries(self, gateway, order_id, monkeypatch):
        monkeypatch.setenv("STOREFRONT_MAX_CONFLICT_RETRIES", "1")

        class _AlwaysLosing:
            def process(self, command, asynchronous=False):
                raise ExpectedVersionError("Wrong expected version")

        monkeypatch.setattr(reconciliation, "current_domain", _AlwaysLosing())

        with pytest.raises(Conflict):
            _deliver(gateway, PAYMENT_SUCCEEDED, order_id)

        assert _order(order_id).is_paid is False
        assert _ledger() == []
