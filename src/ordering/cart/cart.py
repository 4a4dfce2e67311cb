"""Shopping cart storage model.

A cart is the set of ``cart_items`` rows of one account; an account without
rows has an empty cart. Quantities are always >= 1: a line that would drop to
zero is deleted instead.

The ``carts`` row is the account's cart lock. Every mutation upserts it
first, so mutations of the same cart serialize on that row.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, PrimaryKeyConstraint, Table

from catalogue.product import Product
from shared.db import metadata
from shared.errors import Unauthenticated

# Returned by ``CartStore.remove_item`` when the line was deleted
REMOVED = 0

carts = Table(
    "carts",
    metadata,
    Column("account_id", Integer, primary_key=True, autoincrement=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

cart_items = Table(
    "cart_items",
    metadata,
    Column("account_id", Integer, nullable=False),
    Column("product_id", Integer, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("added_at", DateTime(timezone=True), nullable=False),
    PrimaryKeyConstraint("account_id", "product_id"),
    CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
)


@dataclass(frozen=True)
class CartLine:
    account_id: int
    product_id: int
    quantity: int


@dataclass(frozen=True)
class CartItem:
    """A cart line resolved against the catalogue."""

    product: Product
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity


def require_account(account_id: int | None) -> int:
    if account_id is None:
        raise Unauthenticated("Need to be logged in to use the cart")
    return account_id
