"""Pydantic request/response schemas for the Catalogue API."""

from decimal import Decimal

from pydantic import BaseModel, Field


class ProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    kind: str | None = None
    description: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Espresso beans 1kg",
                    "price": "24.50",
                    "kind": "coffee",
                    "description": "Dark roast",
                }
            ]
        }
    }


class ProductSchema(BaseModel):
    id: int
    name: str
    price: float
    kind: str | None = None
    description: str | None = None
    # Mean stars, only filled in on the catalogue listing
    average_rating: float | None = None

    model_config = {"from_attributes": True}
