"""Tests for CartStore quantity semantics."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from ordering.cart.cart import REMOVED, cart_items, carts
from shared.errors import InconsistentCart, LineNotFound, ProductNotFound, Unauthenticated


class TestAddItem:
    def test_first_add_creates_line_with_quantity_one(self, cart_store, account_id, product):
        assert cart_store.add_item(account_id, product.id) == 1
        assert cart_store.quantity(account_id, product.id) == 1

    def test_repeated_add_increments_quantity(self, cart_store, account_id, product):
        cart_store.add_item(account_id, product.id)
        cart_store.add_item(account_id, product.id)
        assert cart_store.add_item(account_id, product.id) == 3

        lines = cart_store.lines(account_id)
        assert len(lines) == 1
        assert lines[0].quantity == 3

    def test_unknown_product_is_rejected(self, cart_store, account_id):
        with pytest.raises(ProductNotFound):
            cart_store.add_item(account_id, 999)
        assert cart_store.lines(account_id) == []

    def test_anonymous_is_rejected(self, cart_store, product):
        with pytest.raises(Unauthenticated):
            cart_store.add_item(None, product.id)

    def test_carts_are_per_account(self, cart_store, account_id, other_account_id, product):
        cart_store.add_item(account_id, product.id)
        assert cart_store.quantity(other_account_id, product.id) == 0
        assert cart_store.lines(other_account_id) == []


class TestRemoveItem:
    def test_decrements_quantity(self, cart_store, account_id, product):
        cart_store.add_item(account_id, product.id)
        cart_store.add_item(account_id, product.id)

        assert cart_store.remove_item(account_id, product.id) == 1
        assert cart_store.quantity(account_id, product.id) == 1

    def test_last_unit_deletes_line(self, cart_store, account_id, product):
        cart_store.add_item(account_id, product.id)

        assert cart_store.remove_item(account_id, product.id) == REMOVED
        assert cart_store.lines(account_id) == []

    def test_absent_line_fails_without_writing(self, engine, cart_store, account_id, product):
        with pytest.raises(LineNotFound):
            cart_store.remove_item(account_id, product.id)

        with engine.connect() as conn:
            assert conn.execute(select(carts)).all() == []
            assert conn.execute(select(cart_items)).all() == []

    def test_anonymous_is_rejected(self, cart_store, product):
        with pytest.raises(Unauthenticated):
            cart_store.remove_item(None, product.id)

    @pytest.mark.parametrize("n", [1, 2, 5])
    def test_n_adds_then_n_removes_leaves_no_line(self, cart_store, account_id, product, n):
        for _ in range(n):
            cart_store.add_item(account_id, product.id)
        for _ in range(n):
            cart_store.remove_item(account_id, product.id)

        assert cart_store.quantity(account_id, product.id) == 0
        assert cart_store.lines(account_id) == []
        with pytest.raises(LineNotFound):
            cart_store.remove_item(account_id, product.id)


class TestListItems:
    def test_lists_products_in_insertion_order(self, cart_store, account_id, product, other_product):
        cart_store.add_item(account_id, other_product.id)
        cart_store.add_item(account_id, product.id)
        cart_store.add_item(account_id, product.id)

        items = cart_store.list_items(account_id)
        assert [(item.product.id, item.quantity) for item in items] == [(other_product.id, 1), (product.id, 2)]
        assert items[1].product.name == "Coffee mug"

    def test_empty_cart_lists_nothing(self, cart_store, account_id):
        assert cart_store.list_items(account_id) == []

    def test_orphaned_line_is_reported(self, cart_store, catalogue, account_id, product, other_product):
        cart_store.add_item(account_id, product.id)
        cart_store.add_item(account_id, other_product.id)
        catalogue.delete_product(other_product.id)

        with pytest.raises(InconsistentCart) as exc_info:
            cart_store.list_items(account_id)
        assert exc_info.value.context["product_ids"] == [other_product.id]

    def test_anonymous_is_rejected(self, cart_store):
        with pytest.raises(Unauthenticated):
            cart_store.list_items(None)


class TestTotal:
    def test_sums_quantity_times_price(self, cart_store, account_id, product, other_product):
        cart_store.add_item(account_id, product.id)
        cart_store.add_item(account_id, product.id)
        cart_store.add_item(account_id, other_product.id)

        assert cart_store.total(account_id) == Decimal("24.48")

    def test_empty_cart_totals_zero(self, cart_store, account_id):
        assert cart_store.total(account_id) == Decimal("0")

    def test_uses_current_catalogue_price(self, cart_store, catalogue, account_id, product):
        cart_store.add_item(account_id, product.id)
        cart_store.add_item(account_id, product.id)

        catalogue.update_product(product.id, name=product.name, price=Decimal("12.50"))

        assert cart_store.total(account_id) == Decimal("25.00")

    def test_orphaned_line_is_reported(self, cart_store, catalogue, account_id, product):
        cart_store.add_item(account_id, product.id)
        catalogue.delete_product(product.id)

        with pytest.raises(InconsistentCart):
            cart_store.total(account_id)


class TestClear:
    def test_removes_every_line(self, cart_store, account_id, product, other_product):
        cart_store.add_item(account_id, product.id)
        cart_store.add_item(account_id, other_product.id)

        assert cart_store.clear(account_id) == 2
        assert cart_store.lines(account_id) == []

    def test_clearing_empty_cart_is_a_no_op(self, cart_store, account_id):
        assert cart_store.clear(account_id) == 0
        assert cart_store.clear(account_id) == 0

    def test_only_clears_own_cart(self, cart_store, account_id, other_account_id, product):
        cart_store.add_item(account_id, product.id)
        cart_store.add_item(other_account_id, product.id)

        cart_store.clear(account_id)

        assert cart_store.quantity(other_account_id, product.id) == 1
