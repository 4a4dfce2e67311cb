"""Product ratings.

A rating belongs to one account and one product and carries optional stars
(1-5) and an optional comment. Only its author can remove it.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Engine,
    ForeignKey,
    Integer,
    Table,
    Text,
    delete,
    func,
    insert,
    select,
)

from catalogue.product import CatalogueLookup
from identity.account import accounts
from ordering.cart.cart import require_account
from shared.db import metadata, transaction
from shared.errors import NotRatingOwner, RatingNotFound

logger = structlog.get_logger(__name__)

ratings = Table(
    "ratings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("account_id", Integer, ForeignKey(accounts.c.id), nullable=False, index=True),
    Column("product_id", Integer, nullable=False, index=True),
    Column("stars", Integer),
    Column("comment_text", Text),
    Column("created_at", DateTime(timezone=True), nullable=False),
    CheckConstraint("stars IS NULL OR (stars >= 1 AND stars <= 5)", name="ck_ratings_stars_range"),
)


@dataclass(frozen=True)
class Rating:
    id: int
    account_id: int
    product_id: int
    stars: int | None
    comment_text: str | None
    created_at: datetime


@dataclass(frozen=True)
class ProductReview:
    """A rating as shown on a product page."""

    rating_id: int
    product_name: str
    customer_name: str
    stars: int | None
    comment_text: str | None
    created_at: datetime


class RatingService:
    def __init__(self, engine: Engine, catalogue: CatalogueLookup):
        self.engine = engine
        self.catalogue = catalogue

    def add_rating(
        self,
        account_id: int | None,
        product_id: int,
        stars: int | None = None,
        comment_text: str | None = None,
    ) -> Rating:
        account_id = require_account(account_id)
        created_at = datetime.now(UTC)

        with transaction(self.engine) as conn:
            self.catalogue.get_product(product_id, connection=conn)
            rating_id = conn.execute(
                insert(ratings).values(
                    account_id=account_id,
                    product_id=product_id,
                    stars=stars,
                    comment_text=comment_text,
                    created_at=created_at,
                )
            ).inserted_primary_key[0]

        logger.info("Rating added", rating_id=rating_id, account_id=account_id, product_id=product_id, stars=stars)
        return Rating(
            id=rating_id,
            account_id=account_id,
            product_id=product_id,
            stars=stars,
            comment_text=comment_text,
            created_at=created_at,
        )

    def remove_rating(self, account_id: int | None, rating_id: int) -> None:
        account_id = require_account(account_id)

        with transaction(self.engine) as conn:
            owner = conn.execute(select(ratings.c.account_id).where(ratings.c.id == rating_id)).scalar_one_or_none()
            if owner is None:
                raise RatingNotFound(f"Rating {rating_id} not found", rating_id=rating_id)
            if owner != account_id:
                logger.info("Rating removal by non-author", rating_id=rating_id, account_id=account_id)
                raise NotRatingOwner()

            conn.execute(delete(ratings).where(ratings.c.id == rating_id))

        logger.info("Rating removed", rating_id=rating_id, account_id=account_id)

    def product_reviews(self, product_id: int) -> list[ProductReview]:
        """Ratings of one product, oldest first."""
        with transaction(self.engine) as conn:
            product = self.catalogue.get_product(product_id, connection=conn)
            rows = conn.execute(
                select(ratings, accounts.c.username)
                .join(accounts, accounts.c.id == ratings.c.account_id)
                .where(ratings.c.product_id == product_id)
                .order_by(ratings.c.created_at, ratings.c.id)
            ).all()

        return [
            ProductReview(
                rating_id=row.id,
                product_name=product.name,
                customer_name=row.username,
                stars=row.stars,
                comment_text=row.comment_text,
                created_at=row.created_at,
            )
            for row in rows
        ]

    def average_stars(self, product_ids: Iterable[int]) -> dict[int, float]:
        """Mean stars per product; products without starred ratings are absent."""
        ids = set(product_ids)
        if not ids:
            return {}

        with transaction(self.engine) as conn:
            rows = conn.execute(
                select(ratings.c.product_id, func.avg(ratings.c.stars).label("average"))
                .where(ratings.c.product_id.in_(ids), ratings.c.stars.is_not(None))
                .group_by(ratings.c.product_id)
            ).all()
        return {row.product_id: float(row.average) for row in rows}

    def count_for_account(self, account_id: int) -> int:
        with transaction(self.engine) as conn:
            return conn.execute(
                select(func.count()).select_from(ratings).where(ratings.c.account_id == account_id)
            ).scalar_one()
