import os
from decimal import Decimal
from pathlib import Path

import pytest
from argon2 import PasswordHasher
from fastapi.testclient import TestClient


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_configure(config):
    os.environ["SHOPCART_ENV"] = config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------
@pytest.fixture()
def settings(tmp_path):
    """Settings pointing at a fresh SQLite file, or SHOPCART_TEST_DATABASE_URL."""
    from shared.config import DatabaseSettings, Settings

    uri = os.getenv("SHOPCART_TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'shopcart.db'}"
    return Settings(
        env="test",
        config_file=tmp_path / "absent.toml",
        database=DatabaseSettings(uri=uri, pool_size=10, pool_timeout=10.0, lock_timeout=10.0),
    )


@pytest.fixture()
def engine(settings):
    from shared.db import build_engine, drop_db, setup_db

    engine = build_engine(settings.database)
    setup_db(engine)

    yield engine

    drop_db(engine)
    engine.dispose()


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------
@pytest.fixture()
def catalogue(engine):
    from catalogue.product import Catalogue

    return Catalogue(engine)


@pytest.fixture()
def cart_store(engine, catalogue):
    from ordering.cart.store import CartStore

    return CartStore(engine, catalogue)


@pytest.fixture()
def checkout(engine, cart_store, catalogue):
    from ordering.checkout.coordinator import CheckoutCoordinator

    return CheckoutCoordinator(engine, cart_store, catalogue)


@pytest.fixture()
def order_history(engine):
    from ordering.order.order import OrderHistory

    return OrderHistory(engine)


@pytest.fixture()
def ratings(engine, catalogue):
    from reviews.rating import RatingService

    return RatingService(engine, catalogue)


@pytest.fixture()
def accounts(engine):
    from identity.account import AccountService

    # Cheapest argon2 parameters; production uses the library defaults
    return AccountService(engine, hasher=PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))


@pytest.fixture()
def sessions(engine):
    from identity.session import SessionStore

    return SessionStore(engine)


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------
@pytest.fixture()
def account_id(accounts):
    return accounts.register("alice", "wonderland", "+1-555-0100", "alice@example.com").id


@pytest.fixture()
def other_account_id(accounts):
    return accounts.register("bob", "builder", "+1-555-0101", "bob@example.com").id


@pytest.fixture()
def product(catalogue):
    return catalogue.create_product(name="Coffee mug", price=Decimal("9.99"), kind="kitchen", product_id=7)


@pytest.fixture()
def other_product(catalogue):
    return catalogue.create_product(name="Tea towel", price=Decimal("4.50"), kind="kitchen", product_id=8)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
@pytest.fixture()
def app(settings, engine, accounts):
    from app import create_app

    return create_app(settings=settings, engine=engine, accounts=accounts, configure_logs=False)


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def logged_in_client(client, account_id):
    response = client.post("/user/login", json={"username": "alice", "password": "wonderland"})
    assert response.status_code == 200
    return client
