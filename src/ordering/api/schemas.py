"""Pydantic request/response schemas for the Ordering API.

These are the external contracts of the cart and transaction endpoints,
kept separate from the internal dataclasses.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from catalogue.api.schemas import ProductSchema


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CartLineRequest(BaseModel):
    product_id: int = Field(alias="productId")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {"examples": [{"productId": 7}]},
    }


class CartItemResponse(BaseModel):
    product: ProductSchema
    quantity: int

    model_config = {"from_attributes": True}


class CartLineResponse(BaseModel):
    product_id: int
    quantity: int
    removed: bool = False


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    payment_type: str = Field(alias="paymentType", min_length=1, max_length=100)

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {"examples": [{"paymentType": "card"}]},
    }


class OrderLineSchema(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: float

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: int
    account_id: int
    total: float
    payment_type: str
    created_at: datetime
    items: list[OrderLineSchema]

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=order.id,
            account_id=order.account_id,
            total=order.total,
            payment_type=order.payment_type,
            created_at=order.created_at,
            items=[OrderLineSchema.model_validate(line) for line in order.lines],
        )
