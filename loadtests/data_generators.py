"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names of the API's Pydantic request schemas.
"""

import random
import uuid
from decimal import Decimal

from faker import Faker

fake = Faker()


# ---------- Identity ----------


def account_data() -> dict:
    """Generate a NewAccountRequest payload with a unique username."""
    return {
        "username": f"lt-{fake.user_name()[:20]}-{uuid.uuid4().hex[:6]}",
        "password": fake.password(length=12),
        "phone_number": f"+1-{random.randint(200, 999)}-{random.randint(200, 999)}-{random.randint(1000, 9999)}",
        "email_id": fake.email(),
        "address": fake.street_address(),
    }


# ---------- Catalogue ----------


def product_data() -> dict:
    """Generate a ProductRequest payload."""
    return {
        "name": fake.catch_phrase()[:255],
        "price": str(Decimal(random.randint(100, 20000)) / 100),
        "kind": random.choice(["book", "coffee", "gadget", None]),
        "description": fake.sentence(),
    }


# ---------- Ordering ----------


def payment_type() -> str:
    return random.choice(["card", "cash", "upi", "wallet"])
