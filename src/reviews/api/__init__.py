"""Reviews API — rating submission and removal."""

from reviews.api.routes import rating_router

__all__ = ["rating_router"]
