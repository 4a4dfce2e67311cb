"""FastAPI routes for the Reviews bounded context."""

from fastapi import APIRouter, Depends, Request

from identity.api.dependencies import require_login
from identity.api.schemas import StatusResponse
from reviews.api.schemas import AddRatingRequest, RatingResponse, RemoveRatingRequest
from reviews.rating import RatingService

rating_router = APIRouter(prefix="/rating", tags=["ratings"], dependencies=[Depends(require_login)])


def get_ratings(request: Request) -> RatingService:
    return request.app.state.ratings


@rating_router.post("/add", status_code=201, response_model=RatingResponse)
def add_rating(
    body: AddRatingRequest,
    ratings: RatingService = Depends(get_ratings),
    account_id: int = Depends(require_login),
) -> RatingResponse:
    rating = ratings.add_rating(account_id, body.product_id, stars=body.stars, comment_text=body.comment_text)
    return RatingResponse.model_validate(rating)


@rating_router.post("/remove", response_model=StatusResponse)
def remove_rating(
    body: RemoveRatingRequest,
    ratings: RatingService = Depends(get_ratings),
    account_id: int = Depends(require_login),
) -> StatusResponse:
    ratings.remove_rating(account_id, body.rating_id)
    return StatusResponse()
