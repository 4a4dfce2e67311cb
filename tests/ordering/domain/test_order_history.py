"""Tests for OrderHistory."""

from decimal import Decimal

import pytest

from shared.errors import OrderNotFound, Unauthenticated


class TestListOrders:
    def test_lists_newest_first(self, checkout, cart_store, order_history, account_id, product, other_product):
        cart_store.add_item(account_id, product.id)
        first = checkout.checkout(account_id, "card")
        cart_store.add_item(account_id, other_product.id)
        second = checkout.checkout(account_id, "cash")

        listed = order_history.list_orders(account_id)

        assert [order.id for order in listed] == [second.id, first.id]
        assert listed[0].total == Decimal("4.50")
        assert listed[0].lines[0].product_id == other_product.id

    def test_only_own_orders(self, checkout, cart_store, order_history, account_id, other_account_id, product):
        cart_store.add_item(other_account_id, product.id)
        checkout.checkout(other_account_id, "card")

        assert order_history.list_orders(account_id) == []
        assert len(order_history.list_orders(other_account_id)) == 1

    def test_anonymous_is_rejected(self, order_history):
        with pytest.raises(Unauthenticated):
            order_history.list_orders(None)


class TestGetOrder:
    def test_returns_stored_order(self, checkout, cart_store, order_history, account_id, product):
        cart_store.add_item(account_id, product.id)
        placed = checkout.checkout(account_id, "card")

        stored = order_history.get(placed.id)

        assert stored.id == placed.id
        assert stored.payment_type == "card"
        assert stored.lines == placed.lines

    def test_unknown_order(self, order_history):
        with pytest.raises(OrderNotFound):
            order_history.get(12345)
