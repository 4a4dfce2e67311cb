"""Pydantic request/response schemas for the Reviews API."""

from datetime import datetime

from pydantic import BaseModel, Field


class AddRatingRequest(BaseModel):
    product_id: int
    stars: int | None = Field(default=None, ge=1, le=5)
    comment_text: str | None = Field(default=None, max_length=5000)

    model_config = {
        "json_schema_extra": {"examples": [{"product_id": 7, "stars": 4, "comment_text": "Holds a lot of coffee"}]}
    }


class RemoveRatingRequest(BaseModel):
    rating_id: int


class RatingResponse(BaseModel):
    id: int
    product_id: int
    stars: int | None = None
    comment_text: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ProductReviewSchema(BaseModel):
    rating_id: int
    product_name: str
    customer_name: str
    stars: int | None = None
    comment_text: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
