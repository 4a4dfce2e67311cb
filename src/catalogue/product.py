"""Product catalogue — product table, read-only price lookup and admin writes.

The ordering context treats the catalogue as an external collaborator: it
only ever reads products and prices through :class:`CatalogueLookup`.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

import structlog
from sqlalchemy import (
    Column,
    Connection,
    Engine,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    delete,
    insert,
    select,
    text,
    update,
)

from shared.db import metadata, transaction
from shared.errors import ProductNotFound

logger = structlog.get_logger(__name__)

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("kind", String(100)),
    Column("price", Numeric(12, 2, asdecimal=True), nullable=False),
    Column("description", Text),
)


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: Decimal
    kind: str | None = None
    description: str | None = None

    @classmethod
    def from_row(cls, row) -> "Product":
        return cls(
            id=row.id,
            name=row.name,
            price=Decimal(row.price),
            kind=row.kind,
            description=row.description,
        )


class CatalogueLookup:
    """Read-only product and price resolution.

    Every method accepts an optional ``connection`` so that callers running a
    transaction (checkout) read prices inside it.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def get_product(self, product_id: int, connection: Connection | None = None) -> Product:
        with transaction(self.engine, connection) as conn:
            row = conn.execute(select(products).where(products.c.id == product_id)).first()

        if row is None:
            raise ProductNotFound(f"Product {product_id} not found", product_id=product_id)
        return Product.from_row(row)

    def unit_price(self, product_id: int, connection: Connection | None = None) -> Decimal:
        return self.get_product(product_id, connection).price

    def find_products(self, product_ids: Iterable[int], connection: Connection | None = None) -> dict[int, Product]:
        """Return the products that exist among ``product_ids``, keyed by id."""
        ids = set(product_ids)
        if not ids:
            return {}

        with transaction(self.engine, connection) as conn:
            rows = conn.execute(select(products).where(products.c.id.in_(ids))).all()
        return {row.id: Product.from_row(row) for row in rows}


class Catalogue(CatalogueLookup):
    """Catalogue with write access, used by the product endpoints."""

    def list_products(self) -> list[Product]:
        with transaction(self.engine) as conn:
            rows = conn.execute(select(products).order_by(products.c.id)).all()
        return [Product.from_row(row) for row in rows]

    def create_product(
        self,
        name: str,
        price: Decimal,
        kind: str | None = None,
        description: str | None = None,
        product_id: int | None = None,
    ) -> Product:
        values = {"name": name, "price": Decimal(price), "kind": kind, "description": description}
        if product_id is not None:
            values["id"] = product_id

        with transaction(self.engine) as conn:
            result = conn.execute(insert(products).values(**values))
            new_id = product_id if product_id is not None else result.inserted_primary_key[0]
            if product_id is not None and conn.dialect.name == "postgresql":
                # An explicit id does not advance the serial sequence
                conn.execute(
                    text(
                        "SELECT setval(pg_get_serial_sequence('products', 'id'), "
                        "(SELECT MAX(id) FROM products))"
                    )
                )

        logger.info("Product created", product_id=new_id, price=str(price))
        return Product(id=new_id, name=name, price=Decimal(price), kind=kind, description=description)

    def update_product(
        self,
        product_id: int,
        name: str,
        price: Decimal,
        kind: str | None = None,
        description: str | None = None,
    ) -> Product:
        with transaction(self.engine) as conn:
            result = conn.execute(
                update(products)
                .where(products.c.id == product_id)
                .values(name=name, price=Decimal(price), kind=kind, description=description)
            )
            if result.rowcount == 0:
                raise ProductNotFound(f"Product {product_id} not found", product_id=product_id)

        logger.info("Product updated", product_id=product_id, price=str(price))
        return Product(id=product_id, name=name, price=Decimal(price), kind=kind, description=description)

    def delete_product(self, product_id: int) -> None:
        with transaction(self.engine) as conn:
            result = conn.execute(delete(products).where(products.c.id == product_id))
            if result.rowcount == 0:
                raise ProductNotFound(f"Product {product_id} not found", product_id=product_id)

        logger.info("Product deleted", product_id=product_id)
