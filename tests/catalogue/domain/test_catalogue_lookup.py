"""Tests for CatalogueLookup and the catalogue write operations."""

from decimal import Decimal

import pytest

from shared.errors import ProductNotFound


class TestLookup:
    def test_get_product(self, catalogue, product):
        found = catalogue.get_product(product.id)

        assert found == product
        assert isinstance(found.price, Decimal)

    def test_unknown_product(self, catalogue):
        with pytest.raises(ProductNotFound) as exc_info:
            catalogue.get_product(999)

        assert exc_info.value.context == {"product_id": 999}

    def test_unit_price(self, catalogue, product):
        assert catalogue.unit_price(product.id) == Decimal("9.99")

    def test_find_products_skips_missing(self, catalogue, product, other_product):
        found = catalogue.find_products([product.id, other_product.id, 999])

        assert set(found) == {product.id, other_product.id}
        assert found[other_product.id].name == "Tea towel"

    def test_find_products_with_no_ids(self, catalogue):
        assert catalogue.find_products([]) == {}


class TestCatalogueWrites:
    def test_create_assigns_id(self, catalogue):
        created = catalogue.create_product(name="Teapot", price=Decimal("30.00"))

        assert created.id is not None
        assert catalogue.get_product(created.id).name == "Teapot"

    def test_create_after_explicit_id_does_not_collide(self, catalogue, product):
        created = catalogue.create_product(name="Teapot", price=Decimal("30.00"))

        assert created.id > product.id
        assert catalogue.get_product(product.id).name == "Coffee mug"
        assert catalogue.get_product(created.id).name == "Teapot"

    def test_list_products(self, catalogue, product, other_product):
        assert [p.id for p in catalogue.list_products()] == [product.id, other_product.id]

    def test_update_changes_price(self, catalogue, product):
        catalogue.update_product(product.id, name=product.name, price=Decimal("12.50"))

        assert catalogue.unit_price(product.id) == Decimal("12.50")

    def test_update_unknown(self, catalogue):
        with pytest.raises(ProductNotFound):
            catalogue.update_product(999, name="Ghost", price=Decimal("1.00"))

    def test_delete(self, catalogue, product):
        catalogue.delete_product(product.id)

        with pytest.raises(ProductNotFound):
            catalogue.get_product(product.id)

    def test_delete_unknown(self, catalogue):
        with pytest.raises(ProductNotFound):
            catalogue.delete_product(999)
