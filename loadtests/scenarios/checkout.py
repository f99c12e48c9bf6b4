"""Checkout contention scenarios.

LastUnitRaceUser: many customers hammer the same product, which starts
with only a few units. Exactly ``initial_stock`` orders may succeed;
every other attempt must be rejected for insufficient stock (400) or
answered with a conflict (409) and never oversell.

WebhookReplayUser: commits an order and delivers the same payment event
several times, checking every replay is acknowledged as a duplicate.
"""

import uuid

from locust import HttpUser, SequentialTaskSet, between, events, task

from loadtests.data_generators import ADMIN_HEADERS, actor_headers, order_data, payment_event, product_data
from loadtests.helpers.response import extract_error_detail, is_stock_rejection
from loadtests.helpers.signing import signed_webhook
from loadtests.helpers.state import CheckoutState, ContendedProduct

CONTENDED_STOCK = 25

contended = ContendedProduct()


@events.test_start.add_listener
def create_contended_product(environment, **_kwargs):
    """Create the product every racing user will try to buy."""
    import requests

    if not environment.host:
        return
    payload = product_data(stock_quantity=CONTENDED_STOCK)
    response = requests.post(f"{environment.host}/products", json=payload, headers=ADMIN_HEADERS, timeout=10)
    response.raise_for_status()
    contended.product_id = response.json()["product_id"]
    contended.price = payload["price"]
    contended.initial_stock = CONTENDED_STOCK
    print(f"[LOADTEST] Contended product {contended.product_id} with {CONTENDED_STOCK} units")


@events.test_stop.add_listener
def verify_no_oversell(environment, **_kwargs):
    import requests

    if not (environment.host and contended.product_id):
        return
    response = requests.get(f"{environment.host}/products/{contended.product_id}", timeout=10)
    stock = response.json().get("stock_quantity")
    print(f"[LOADTEST] Contended product remaining stock: {stock}")
    if stock is None or stock < 0:
        environment.process_exit_code = 1


class LastUnitRaceUser(HttpUser):
    wait_time = between(0.05, 0.2)

    def on_start(self):
        self.state = CheckoutState(headers=actor_headers("customer"))

    @task
    def checkout_contended_product(self):
        if not contended.product_id:
            return
        with self.client.post(
            "/orders",
            json=order_data(contended.product_id, contended.price),
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders (contended)",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["order_id"])
            elif is_stock_rejection(resp) or resp.status_code == 409:
                self.state.rejected_for_stock += 1
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")


class WebhookReplayJourney(SequentialTaskSet):
    def on_start(self):
        self.state = CheckoutState(headers=actor_headers("customer"))
        self.order_id = None
        self.event = None

    @task
    def place_order(self):
        payload = product_data(stock_quantity=5)
        resp = self.client.post("/products", json=payload, headers=ADMIN_HEADERS, name="POST /products")
        if resp.status_code != 201:
            self.interrupt()
            return
        product_id = resp.json()["product_id"]

        with self.client.post(
            "/orders",
            json=order_data(product_id, payload["price"]),
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders",
        ) as order_resp:
            if order_resp.status_code != 201:
                order_resp.failure(f"Checkout failed: {order_resp.status_code} — {extract_error_detail(order_resp)}")
                self.interrupt()
                return
            self.order_id = order_resp.json()["order_id"]

        self.event = payment_event("payment_intent.succeeded", self.order_id, f"pi_lt_{uuid.uuid4().hex[:12]}")

    @task
    def deliver_webhook_repeatedly(self):
        body, headers = signed_webhook(self.event)
        for attempt in range(3):
            with self.client.post(
                "/payments/webhook",
                data=body,
                headers=headers,
                catch_response=True,
                name="POST /payments/webhook (replay)",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Webhook failed: {resp.status_code} — {extract_error_detail(resp)}")
                    continue
                expected = "processed" if attempt == 0 else "duplicate"
                if resp.json().get("outcome") != expected:
                    resp.failure(f"Expected {expected}, got {resp.json().get('outcome')}")

    @task
    def done(self):
        self.interrupt()


class WebhookReplayUser(HttpUser):
    wait_time = between(0.5, 1.5)
    tasks = [WebhookReplayJourney]
