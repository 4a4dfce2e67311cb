"""Per-account cart lines with atomic quantity updates."""

from datetime import UTC, datetime
from decimal import Decimal

import structlog
from sqlalchemy import Connection, Engine, delete, select, update

from catalogue.product import CatalogueLookup
from ordering.cart.cart import REMOVED, CartItem, CartLine, cart_items, carts, require_account
from shared.db import insert_for, transaction
from shared.errors import InconsistentCart, LineNotFound

logger = structlog.get_logger(__name__)


class CartStore:
    """Owns the ``carts`` and ``cart_items`` tables.

    Every method opens its own transaction unless a ``connection`` is passed,
    in which case it runs inside the caller's transaction.
    """

    def __init__(self, engine: Engine, catalogue: CatalogueLookup):
        self.engine = engine
        self.catalogue = catalogue

    def lock_cart(self, conn: Connection, account_id: int) -> None:
        """Take the account's cart lock for the rest of the transaction."""
        now = datetime.now(UTC)
        stmt = insert_for(conn, carts).values(account_id=account_id, updated_at=now)
        conn.execute(stmt.on_conflict_do_update(index_elements=[carts.c.account_id], set_={"updated_at": now}))

    def add_item(self, account_id: int | None, product_id: int, connection: Connection | None = None) -> int:
        """Add one unit of a product and return the line's new quantity."""
        account_id = require_account(account_id)

        with transaction(self.engine, connection) as conn:
            self.catalogue.get_product(product_id, connection=conn)
            self.lock_cart(conn, account_id)

            stmt = insert_for(conn, cart_items).values(
                account_id=account_id,
                product_id=product_id,
                quantity=1,
                added_at=datetime.now(UTC),
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[cart_items.c.account_id, cart_items.c.product_id],
                set_={"quantity": cart_items.c.quantity + 1},
            ).returning(cart_items.c.quantity)
            quantity = conn.execute(stmt).scalar_one()

        logger.info("Item added to cart", account_id=account_id, product_id=product_id, quantity=quantity)
        return quantity

    def remove_item(self, account_id: int | None, product_id: int, connection: Connection | None = None) -> int:
        """Remove one unit of a product.

        Returns the remaining quantity, or ``REMOVED`` when the line is gone.
        """
        account_id = require_account(account_id)
        line = (cart_items.c.account_id == account_id, cart_items.c.product_id == product_id)

        with transaction(self.engine, connection) as conn:
            self.lock_cart(conn, account_id)

            current = conn.execute(select(cart_items.c.quantity).where(*line).with_for_update()).scalar_one_or_none()
            if current is None:
                raise LineNotFound(f"Product {product_id} is not in the cart", product_id=product_id)

            if current <= 1:
                conn.execute(delete(cart_items).where(*line))
                remaining = REMOVED
            else:
                remaining = conn.execute(
                    update(cart_items)
                    .where(*line)
                    .values(quantity=cart_items.c.quantity - 1)
                    .returning(cart_items.c.quantity)
                ).scalar_one()

        logger.info("Item removed from cart", account_id=account_id, product_id=product_id, quantity=remaining)
        return remaining

    def lines(self, account_id: int | None, connection: Connection | None = None) -> list[CartLine]:
        """Raw cart lines in insertion order."""
        account_id = require_account(account_id)

        with transaction(self.engine, connection) as conn:
            rows = conn.execute(
                select(cart_items.c.product_id, cart_items.c.quantity)
                .where(cart_items.c.account_id == account_id)
                .order_by(cart_items.c.added_at, cart_items.c.product_id)
            ).all()
        return [CartLine(account_id=account_id, product_id=row.product_id, quantity=row.quantity) for row in rows]

    def quantity(self, account_id: int | None, product_id: int, connection: Connection | None = None) -> int:
        """Quantity of one line, 0 when the product is not in the cart."""
        account_id = require_account(account_id)

        with transaction(self.engine, connection) as conn:
            current = conn.execute(
                select(cart_items.c.quantity).where(
                    cart_items.c.account_id == account_id,
                    cart_items.c.product_id == product_id,
                )
            ).scalar_one_or_none()
        return current or 0

    def list_items(self, account_id: int | None, connection: Connection | None = None) -> list[CartItem]:
        """Cart lines resolved to catalogue products.

        A line whose product is gone from the catalogue raises
        ``InconsistentCart``; it is never skipped or filled in.
        """
        account_id = require_account(account_id)

        with transaction(self.engine, connection) as conn:
            lines = self.lines(account_id, connection=conn)
            products = self.catalogue.find_products((line.product_id for line in lines), connection=conn)

        missing = [line.product_id for line in lines if line.product_id not in products]
        if missing:
            logger.error("Cart references missing products", account_id=account_id, product_ids=missing)
            raise InconsistentCart(
                f"Cart references products that no longer exist: {missing}",
                product_ids=missing,
            )

        return [CartItem(product=products[line.product_id], quantity=line.quantity) for line in lines]

    def total(self, account_id: int | None, connection: Connection | None = None) -> Decimal:
        """Sum of quantity x current catalogue price."""
        items = self.list_items(account_id, connection=connection)
        return sum((item.subtotal for item in items), Decimal("0.00"))

    def clear(self, account_id: int | None, connection: Connection | None = None) -> int:
        """Delete every line of the account's cart and return how many went."""
        account_id = require_account(account_id)

        with transaction(self.engine, connection) as conn:
            self.lock_cart(conn, account_id)
            result = conn.execute(delete(cart_items).where(cart_items.c.account_id == account_id))

        logger.debug("Cart cleared", account_id=account_id, lines=result.rowcount)
        return result.rowcount
