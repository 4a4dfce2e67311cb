"""Shared BDD fixtures and step definitions for the Ordering domain."""

from decimal import Decimal

import pytest
from pytest_bdd import given, parsers, then


@pytest.fixture()
def products():
    """Products created by the scenario, keyed by name."""
    return {}


@pytest.fixture()
def response():
    """Container for the last HTTP response of a When step."""
    return {"last": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price}'))
def product_in_catalogue(catalogue, products, name, price):
    products[name] = catalogue.create_product(name=name, price=Decimal(price))


@given("a logged-in shopper", target_fixture="shopper")
def logged_in_shopper(logged_in_client):
    return logged_in_client


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request fails with "{code}"'))
def request_fails_with(response, code):
    assert response["last"].status_code >= 400
    assert response["last"].json()["error"] == code


@then(parsers.cfparse("the shopper has {count:d} order"))
@then(parsers.cfparse("the shopper has {count:d} orders"))
def shopper_has_orders(shopper, count):
    assert len(shopper.get("/transaction/list").json()) == count
