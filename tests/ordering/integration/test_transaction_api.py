"""Integration tests for the /transaction endpoints."""

import pytest


class TestCheckoutEndpoint:
    def test_requires_login(self, client):
        response = client.post("/transaction/checkout", json={"paymentType": "card"})

        assert response.status_code == 401

    @pytest.mark.parametrize("body", [{"paymentType": ""}, {}])
    def test_invalid_body_still_requires_login(self, client, body):
        response = client.post("/transaction/checkout", json=body)

        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"

    def test_checkout_returns_order(self, logged_in_client, account_id, product, other_product):
        logged_in_client.post("/cart/add", json={"productId": product.id})
        logged_in_client.post("/cart/add", json={"productId": other_product.id})

        response = logged_in_client.post("/transaction/checkout", json={"paymentType": "card"})

        assert response.status_code == 200
        order = response.json()
        assert order["account_id"] == account_id
        assert order["total"] == pytest.approx(14.49)
        assert order["payment_type"] == "card"
        assert [item["product_id"] for item in order["items"]] == [product.id, other_product.id]

    def test_checkout_empties_cart(self, logged_in_client, product):
        logged_in_client.post("/cart/add", json={"productId": product.id})

        logged_in_client.post("/transaction/checkout", json={"paymentType": "card"})

        assert logged_in_client.get("/cart/items").json() == []

    def test_empty_cart(self, logged_in_client):
        response = logged_in_client.post("/transaction/checkout", json={"paymentType": "card"})

        assert response.status_code == 404
        assert response.json()["error"] == "empty_cart"

    def test_blank_payment_type(self, logged_in_client, product):
        logged_in_client.post("/cart/add", json={"productId": product.id})

        response = logged_in_client.post("/transaction/checkout", json={"paymentType": "   "})

        assert response.status_code == 422
        assert response.json()["error"] == "invalid_payment_type"

    def test_missing_payment_type(self, logged_in_client, product):
        logged_in_client.post("/cart/add", json={"productId": product.id})

        response = logged_in_client.post("/transaction/checkout", json={})

        assert response.status_code == 422
        assert len(logged_in_client.get("/cart/items").json()) == 1


class TestListEndpoint:
    def test_requires_login(self, client):
        assert client.get("/transaction/list").status_code == 401

    def test_lists_newest_first(self, logged_in_client, product, other_product):
        logged_in_client.post("/cart/add", json={"productId": product.id})
        first = logged_in_client.post("/transaction/checkout", json={"paymentType": "card"}).json()
        logged_in_client.post("/cart/add", json={"productId": other_product.id})
        second = logged_in_client.post("/transaction/checkout", json={"paymentType": "cash"}).json()

        listed = logged_in_client.get("/transaction/list").json()

        assert [order["id"] for order in listed] == [second["id"], first["id"]]
        assert listed[1]["items"][0]["unit_price"] == pytest.approx(9.99)

    def test_no_orders(self, logged_in_client):
        assert logged_in_client.get("/transaction/list").json() == []
