import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from protean.integrations.pytest import DomainFixture
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    from protean import current_domain

    with storefront_bed.domain_context():
        yield

        # Clear all databases and drain the event store between tests
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def gateway():
    """A fresh fake payment gateway for every test."""
    from storefront.payments.gateway import reset_gateway, set_gateway
    from storefront.payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway(secret="whsec_test")
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture(autouse=True)
def mailbox():
    """A fresh fake email sender for every test."""
    from storefront.notifications.channel import reset_email_sender, set_email_sender
    from storefront.notifications.channel.fake_email import FakeEmailAdapter

    fake = FakeEmailAdapter()
    set_email_sender(fake)
    yield fake
    reset_email_sender()


SHIPPING_ADDRESS = {
    "address": "12 Market Street",
    "city": "Springfield",
    "postal_code": "12345",
    "country": "US",
    "phone": "+1-555-0100",
}


@pytest.fixture()
def shipping_address():
    return dict(SHIPPING_ADDRESS)


@pytest.fixture()
def make_product():
    """Add a product through the catalogue command and return its id."""
    from protean import current_domain
    from storefront.catalogue.management import AddProduct

    counter = {"n": 0}

    def _make(price=5.00, stock_quantity=10, name=None, **extra):
        counter["n"] += 1
        command = AddProduct(
            name=name or f"Test Product {counter['n']}",
            price=price,
            stock_quantity=stock_quantity,
            **extra,
        )
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture()
def place_order(shipping_address):
    """Commit a cart for a customer and return the order id."""
    from storefront.ordering.commitment import commit_order

    def _place(lines, customer_id="cust-001", customer_email="cust-001@example.com"):
        return commit_order(
            customer_id=customer_id,
            customer_email=customer_email,
            cart_lines=lines,
            shipping_address=shipping_address,
            payment_method="card",
        )

    return _place
