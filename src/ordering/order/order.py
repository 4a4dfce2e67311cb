"""Orders — immutable point-in-time records created by checkout.

An order row is never updated or deleted. Its lines snapshot the product
name, quantity and unit price as they were valued at checkout.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, Engine, ForeignKey, Integer, Numeric, String, Table, select

from ordering.cart.cart import require_account
from shared.db import metadata, transaction
from shared.errors import OrderNotFound

orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("account_id", Integer, nullable=False, index=True),
    Column("amount", Numeric(12, 2, asdecimal=True), nullable=False),
    Column("payment_type", String(100), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

order_lines = Table(
    "order_lines",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey(orders.c.id), nullable=False, index=True),
    Column("product_id", Integer, nullable=False),
    Column("product_name", String(255), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("unit_price", Numeric(12, 2, asdecimal=True), nullable=False),
)


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Order:
    id: int
    account_id: int
    total: Decimal
    payment_type: str
    created_at: datetime
    lines: tuple[OrderLine, ...] = field(default_factory=tuple)


class OrderHistory:
    """Read access to placed orders."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def list_orders(self, account_id: int | None) -> list[Order]:
        """All orders of an account, newest first."""
        account_id = require_account(account_id)

        with transaction(self.engine) as conn:
            rows = conn.execute(
                select(orders)
                .where(orders.c.account_id == account_id)
                .order_by(orders.c.created_at.desc(), orders.c.id.desc())
            ).all()
            lines = self._lines_for(conn, [row.id for row in rows])

        return [_to_order(row, lines.get(row.id, ())) for row in rows]

    def get(self, order_id: int) -> Order:
        with transaction(self.engine) as conn:
            row = conn.execute(select(orders).where(orders.c.id == order_id)).first()
            if row is None:
                raise OrderNotFound(f"Order {order_id} not found")
            lines = self._lines_for(conn, [order_id])

        return _to_order(row, lines.get(order_id, ()))

    @staticmethod
    def _lines_for(conn, order_ids: list[int]) -> dict[int, tuple[OrderLine, ...]]:
        if not order_ids:
            return {}

        grouped: dict[int, list[OrderLine]] = {}
        rows = conn.execute(
            select(order_lines).where(order_lines.c.order_id.in_(order_ids)).order_by(order_lines.c.id)
        ).all()
        for row in rows:
            grouped.setdefault(row.order_id, []).append(
                OrderLine(
                    product_id=row.product_id,
                    product_name=row.product_name,
                    quantity=row.quantity,
                    unit_price=Decimal(row.unit_price),
                )
            )
        return {order_id: tuple(items) for order_id, items in grouped.items()}


def _to_order(row, lines) -> Order:
    return Order(
        id=row.id,
        account_id=row.account_id,
        total=Decimal(row.amount),
        payment_type=row.payment_type,
        created_at=row.created_at,
        lines=tuple(lines),
    )
