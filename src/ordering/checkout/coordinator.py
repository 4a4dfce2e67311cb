"""Checkout — converts an account's cart into an immutable order.

Flow, all inside one transaction:
    1. Gather: reject anonymous requests and blank payment types
    2. Lock: take the account's cart lock
    3. Value: read the cart lines and price each one from the catalogue
    4. Commit: insert the order and its line snapshot, then clear the cart

Nothing is written before step 4, and the order insert and cart clear commit
or roll back together. A concurrent add-to-cart on the same account waits on
the cart lock, so it lands either before the valuation (billed and cleared)
or after the commit (kept in the new, empty cart).
"""

from datetime import UTC, datetime
from decimal import Decimal

import structlog
from sqlalchemy import Engine, insert

from catalogue.product import CatalogueLookup
from ordering.cart.cart import require_account
from ordering.cart.store import CartStore
from ordering.order.order import Order, OrderLine, order_lines, orders
from shared.db import transaction
from shared.errors import EmptyCart, InvalidPaymentType, ProductNotFound

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


class CheckoutCoordinator:
    def __init__(
        self,
        engine: Engine,
        cart_store: CartStore,
        catalogue: CatalogueLookup,
        allow_empty_cart: bool = False,
    ):
        self.engine = engine
        self.cart_store = cart_store
        self.catalogue = catalogue
        # When enabled an empty cart produces a zero-amount order
        self.allow_empty_cart = allow_empty_cart

    def checkout(self, account_id: int | None, payment_type: str) -> Order:
        account_id = require_account(account_id)
        if not isinstance(payment_type, str) or not payment_type.strip():
            raise InvalidPaymentType()
        payment_type = payment_type.strip()

        logger.info("Checkout started", account_id=account_id, payment_type=payment_type)

        with transaction(self.engine) as conn:
            self.cart_store.lock_cart(conn, account_id)

            lines = self.cart_store.lines(account_id, connection=conn)
            if not lines and not self.allow_empty_cart:
                raise EmptyCart()

            products = self.catalogue.find_products((line.product_id for line in lines), connection=conn)
            missing = [line.product_id for line in lines if line.product_id not in products]
            if missing:
                logger.error("Checkout aborted, cart references missing products", product_ids=missing)
                raise ProductNotFound(f"Products no longer available: {missing}", product_ids=missing)

            snapshot = tuple(
                OrderLine(
                    product_id=line.product_id,
                    product_name=products[line.product_id].name,
                    quantity=line.quantity,
                    unit_price=products[line.product_id].price,
                )
                for line in lines
            )
            total = sum((line.subtotal for line in snapshot), Decimal("0.00")).quantize(CENTS)
            created_at = datetime.now(UTC)

            order_id = conn.execute(
                insert(orders).values(
                    account_id=account_id,
                    amount=total,
                    payment_type=payment_type,
                    created_at=created_at,
                )
            ).inserted_primary_key[0]

            if snapshot:
                conn.execute(
                    insert(order_lines),
                    [
                        {
                            "order_id": order_id,
                            "product_id": line.product_id,
                            "product_name": line.product_name,
                            "quantity": line.quantity,
                            "unit_price": line.unit_price,
                        }
                        for line in snapshot
                    ],
                )

            self.cart_store.clear(account_id, connection=conn)

        logger.info(
            "Checkout completed",
            account_id=account_id,
            order_id=order_id,
            total=str(total),
            line_count=len(snapshot),
        )
        return Order(
            id=order_id,
            account_id=account_id,
            total=total,
            payment_type=payment_type,
            created_at=created_at,
            lines=snapshot,
        )
