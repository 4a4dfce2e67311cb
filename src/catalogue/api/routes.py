"""FastAPI endpoints for the Catalogue domain."""

from fastapi import APIRouter, Depends, Request

from catalogue.api.schemas import ProductRequest, ProductSchema
from catalogue.product import Catalogue
from reviews.api.schemas import ProductReviewSchema
from reviews.rating import RatingService

product_router = APIRouter(prefix="/product", tags=["products"])


def get_catalogue(request: Request) -> Catalogue:
    return request.app.state.catalogue


def get_ratings(request: Request) -> RatingService:
    return request.app.state.ratings


@product_router.get("/catalog", response_model=list[ProductSchema])
def get_all_products(
    catalogue: Catalogue = Depends(get_catalogue),
    ratings: RatingService = Depends(get_ratings),
) -> list[ProductSchema]:
    products = catalogue.list_products()
    averages = ratings.average_stars(product.id for product in products)
    return [
        ProductSchema.model_validate(product).model_copy(update={"average_rating": averages.get(product.id)})
        for product in products
    ]


@product_router.post("/new", status_code=201, response_model=ProductSchema)
def new_product(body: ProductRequest, catalogue: Catalogue = Depends(get_catalogue)) -> ProductSchema:
    product = catalogue.create_product(
        name=body.name,
        price=body.price,
        kind=body.kind,
        description=body.description,
    )
    return ProductSchema.model_validate(product)


@product_router.get("/reviews/{product_id}", response_model=list[ProductReviewSchema])
def get_product_reviews(product_id: int, ratings: RatingService = Depends(get_ratings)) -> list[ProductReviewSchema]:
    return [ProductReviewSchema.model_validate(review) for review in ratings.product_reviews(product_id)]


@product_router.get("/{product_id}", response_model=ProductSchema)
def product_details(product_id: int, catalogue: Catalogue = Depends(get_catalogue)) -> ProductSchema:
    return ProductSchema.model_validate(catalogue.get_product(product_id))


@product_router.post("/update_product/{product_id}", response_model=ProductSchema)
def update_product(
    product_id: int,
    body: ProductRequest,
    catalogue: Catalogue = Depends(get_catalogue),
) -> ProductSchema:
    product = catalogue.update_product(
        product_id,
        name=body.name,
        price=body.price,
        kind=body.kind,
        description=body.description,
    )
    return ProductSchema.model_validate(product)
