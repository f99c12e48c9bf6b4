"""Tests for structured logging context — service stamping and scoped identifiers."""

import structlog
from storefront.utils.logging import SERVICE_NAME, add_service_context, log_context


class TestServiceContext:
    def test_stamps_service_and_environment(self, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "test")
        monkeypatch.delenv("ENV", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)

        event = add_service_context(None, "info", {"event": "Order committed"})

        assert event["service"] == SERVICE_NAME
        assert event["environment"] == "test"

    def test_keeps_explicit_values(self):
        event = add_service_context(None, "info", {"event": "x", "service": "webhook-relay"})
        assert event["service"] == "webhook-relay"


class TestLogContext:
    def test_binds_identifiers_inside_block(self):
        with log_context(order_id="ord-001", payment_event_id="evt_001"):
            assert structlog.contextvars.get_contextvars() == {"order_id": "ord-001", "payment_event_id": "evt_001"}

        assert "order_id" not in structlog.contextvars.get_contextvars()

    def test_none_values_are_skipped(self):
        with log_context(order_id="ord-001", payment_intent_id=None):
            assert "payment_intent_id" not in structlog.contextvars.get_contextvars()

    def test_nested_blocks_restore_outer_binding(self):
        with log_context(customer_id="cust-001"):
            with log_context(order_id="ord-002"):
                assert structlog.contextvars.get_contextvars() == {"customer_id": "cust-001", "order_id": "ord-002"}
            assert structlog.contextvars.get_contextvars() == {"customer_id": "cust-001"}

    def test_binding_is_released_when_block_raises(self):
        try:
            with log_context(order_id="ord-003"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert "order_id" not in structlog.contextvars.get_contextvars()
