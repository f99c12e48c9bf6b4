"""Integration tests for catalogue endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import category_router, product_router, register_error_handlers

ADMIN = {"X-Actor-Id": "admin-001", "X-Actor-Role": "admin"}
CUSTOMER = {"X-Actor-Id": "cust-001", "X-Actor-Role": "customer"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(category_router)
    app.include_router(product_router)
    register_error_handlers(app)
    return TestClient(app)


def _add_product(client, **overrides):
    body = {"name": "Cheddar 200g", "price": 3.75, "stock_quantity": 12}
    body.update(overrides)
    response = client.post("/products", json=body, headers=ADMIN)
    assert response.status_code == 201
    return response.json()["product_id"]


class TestCategoryEndpoints:
    def test_admin_creates_category(self, client):
        response = client.post("/categories", json={"name": "Cheese"}, headers=ADMIN)
        assert response.status_code == 201
        assert response.json()["category_id"]

    def test_customer_cannot_create_category(self, client):
        response = client.post("/categories", json={"name": "Cheese"}, headers=CUSTOMER)
        assert response.status_code == 403
        assert "error" in response.json()

    def test_missing_actor_headers(self, client):
        response = client.post("/categories", json={"name": "Cheese"})
        assert response.status_code == 401


class TestProductEndpoints:
    def test_add_and_get_product(self, client):
        product_id = _add_product(client)

        response = client.get(f"/products/{product_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Cheddar 200g"
        assert data["selling_price"] == 3.75
        assert data["stock_quantity"] == 12

    def test_get_missing_product(self, client):
        response = client.get("/products/prod-missing")
        assert response.status_code == 404

    def test_invalid_product_rejected(self, client):
        response = client.post("/products", json={"name": "Bad", "price": -1}, headers=ADMIN)
        assert response.status_code == 400

    def test_change_price_and_sale(self, client):
        product_id = _add_product(client)

        response = client.put(
            f"/products/{product_id}/price",
            json={"price": 3.75, "is_on_sale": True, "discount_price": 2.99},
            headers=ADMIN,
        )

        assert response.status_code == 200
        assert client.get(f"/products/{product_id}").json()["selling_price"] == 2.99

    def test_restock(self, client):
        product_id = _add_product(client, stock_quantity=1)

        response = client.post(f"/products/{product_id}/restock", json={"quantity": 4}, headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["stock_quantity"] == 5

    def test_customer_cannot_restock(self, client):
        product_id = _add_product(client)
        response = client.post(f"/products/{product_id}/restock", json={"quantity": 4}, headers=CUSTOMER)
        assert response.status_code == 403
