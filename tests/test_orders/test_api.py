"""
Integration tests for order API endpoints.

Runs against an application with the sample catalog in an in-memory store:
product 1 is RS-001 with stock 78, product 4 is WB-024 with stock 5 and
product 5 is SC-087 with stock 0.
"""

import os
from unittest.mock import patch

import pytest
from fastapi import status

from storefront.core.config import get_settings


def order_payload(*items, **header):
    return {
        "order": header,
        "items": [
            {"productId": product_id, "quantity": quantity, "unitPrice": unit_price}
            for product_id, quantity, unit_price in items
        ],
    }


def stock_of(client, product_id: int) -> int:
    return client.get(f"/api/products/{product_id}").json()["stock"]


class TestCreateOrder:
    """Tests for POST /api/orders."""

    def test_create_order(self, seeded_client):
        response = seeded_client.post(
            "/api/orders",
            json=order_payload((1, 2, "24.99"), customerId=1, total="49.98"),
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["id"] == 1
        assert data["customerId"] == 1
        assert data["status"] == "pending"
        assert data["total"] == "49.98"
        assert data["orderDate"]
        assert len(data["items"]) == 1
        assert data["items"][0]["orderId"] == 1
        assert data["items"][0]["productId"] == 1
        assert data["items"][0]["quantity"] == 2
        assert data["items"][0]["unitPrice"] == "24.99"

        assert stock_of(seeded_client, 1) == 76

    def test_create_order_clamps_stock(self, seeded_client):
        response = seeded_client.post("/api/orders", json=order_payload((4, 8, "129.99")))

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["total"] == "1039.92"
        assert stock_of(seeded_client, 4) == 0

    def test_create_order_for_out_of_stock_product(self, seeded_client):
        response = seeded_client.post("/api/orders", json=order_payload((5, 1, "36.50")))

        assert response.status_code == status.HTTP_201_CREATED
        assert stock_of(seeded_client, 5) == 0

    def test_create_order_accepts_snake_case(self, seeded_client):
        response = seeded_client.post(
            "/api/orders",
            json={
                "order": {"customer_id": 2},
                "items": [{"product_id": 2, "quantity": 1, "unit_price": "32.99"}],
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["customerId"] == 2

    def test_create_order_empty_items(self, seeded_client):
        response = seeded_client.post("/api/orders", json=order_payload(total="0"))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "at least one item" in response.json()["detail"]
        assert seeded_client.get("/api/orders").json() == []

    def test_create_order_unknown_product(self, seeded_client):
        response = seeded_client.post(
            "/api/orders",
            json=order_payload((1, 2, "24.99"), (999, 1, "1.00")),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert seeded_client.get("/api/orders").json() == []
        assert stock_of(seeded_client, 1) == 78

    def test_create_order_unknown_customer(self, seeded_client):
        response = seeded_client.post(
            "/api/orders",
            json=order_payload((1, 1, "24.99"), customerId=999),
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == "Failed to create order"
        assert stock_of(seeded_client, 1) == 78

    @pytest.mark.parametrize(
        "item",
        [
            {"productId": 1, "quantity": 0, "unitPrice": "1.00"},
            {"productId": 1, "quantity": 1, "unitPrice": "-1.00"},
            {"quantity": 1, "unitPrice": "1.00"},
        ],
    )
    def test_create_order_invalid_item(self, seeded_client, item):
        response = seeded_client.post("/api/orders", json={"order": {}, "items": [item]})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "Validation Error"

    def test_create_order_invalid_status(self, seeded_client):
        response = seeded_client.post(
            "/api/orders",
            json=order_payload((1, 1, "24.99"), status="shipped"),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_order_rate_limited(self, seeded_client):
        get_settings.cache_clear()
        try:
            with patch.dict(os.environ, {"APP_ORDER_RATE_LIMIT": "2/minute"}):
                responses = [
                    seeded_client.post("/api/orders", json=order_payload((1, 1, "24.99")))
                    for _ in range(3)
                ]
        finally:
            get_settings.cache_clear()

        assert [r.status_code for r in responses] == [201, 201, 429]


class TestReadOrders:
    """Tests for GET /api/orders and GET /api/orders/{id}."""

    def test_list_orders_newest_first(self, seeded_client):
        for product_id in (1, 2, 3):
            seeded_client.post("/api/orders", json=order_payload((product_id, 1, "10.00")))

        data = seeded_client.get("/api/orders").json()

        assert [order["id"] for order in data] == [3, 2, 1]
        assert "items" not in data[0]

    def test_list_orders_by_customer(self, seeded_client):
        seeded_client.post("/api/orders", json=order_payload((1, 1, "24.99"), customerId=1))
        seeded_client.post("/api/orders", json=order_payload((1, 1, "24.99"), customerId=2))

        data = seeded_client.get("/api/orders", params={"customerId": 2}).json()

        assert len(data) == 1
        assert data[0]["customerId"] == 2

    def test_get_order_with_items(self, seeded_client):
        created = seeded_client.post(
            "/api/orders",
            json=order_payload((1, 2, "24.99"), (3, 1, "45.00")),
        ).json()

        response = seeded_client.get(f"/api/orders/{created['id']}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == "94.98"
        assert [item["productId"] for item in data["items"]] == [1, 3]

    def test_get_order_not_found(self, seeded_client):
        response = seeded_client.get("/api/orders/999")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestUpdateOrderStatus:
    """Tests for PUT /api/orders/{id}/status."""

    def test_update_status(self, seeded_client):
        order = seeded_client.post("/api/orders", json=order_payload((1, 1, "24.99"))).json()

        response = seeded_client.put(
            f"/api/orders/{order['id']}/status", json={"status": "completed"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "completed"

    def test_update_status_not_found(self, seeded_client):
        response = seeded_client.put("/api/orders/999/status", json={"status": "cancelled"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_status_invalid(self, seeded_client):
        order = seeded_client.post("/api/orders", json=order_payload((1, 1, "24.99"))).json()

        response = seeded_client.put(
            f"/api/orders/{order['id']}/status", json={"status": "lost"}
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
