"""ShopCart FastAPI application.

Builds the storage handle once, wires the services onto ``app.state`` and
mounts the identity, catalogue, ordering and reviews routers.

Usage:
    uvicorn app:create_app --factory --app-dir src --host 0.0.0.0 --port 8000
"""

import uuid
from datetime import timedelta

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import Engine

from catalogue.api import product_router
from catalogue.product import Catalogue
from identity.account import AccountService
from identity.api import router as identity_router
from identity.session import SessionIdentityResolver, SessionStore
from ordering.api import cart_router, transaction_router
from ordering.cart.store import CartStore
from ordering.checkout.coordinator import CheckoutCoordinator
from ordering.order.order import OrderHistory
from reviews.api import rating_router
from reviews.rating import RatingService
from shared.config import Settings, load_settings
from shared.db import build_engine
from shared.errors import ShopError
from shared.logging import add_context, clear_context, configure_logging

logger = structlog.get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    engine: Engine | None = None,
    accounts: AccountService | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    settings = settings or load_settings()
    if configure_logs:
        configure_logging()
    engine = engine or build_engine(settings.database)

    app = FastAPI(
        title="ShopCart API",
        description="E-commerce backend: accounts, catalogue, cart and checkout",
    )

    catalogue = Catalogue(engine)
    cart_store = CartStore(engine, catalogue)

    app.state.settings = settings
    app.state.engine = engine
    app.state.catalogue = catalogue
    app.state.accounts = accounts or AccountService(engine)
    app.state.sessions = SessionStore(engine, ttl=timedelta(hours=settings.session.ttl_hours))
    app.state.identity_resolver = SessionIdentityResolver(engine)
    app.state.cart_store = cart_store
    app.state.checkout = CheckoutCoordinator(
        engine,
        cart_store,
        catalogue,
        allow_empty_cart=settings.checkout.allow_empty_cart,
    )
    app.state.order_history = OrderHistory(engine)
    app.state.ratings = RatingService(engine, catalogue)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Bind request details into every log line emitted while handling it."""
        clear_context()
        add_context(
            request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
            method=request.method,
            path=request.url.path,
        )
        try:
            return await call_next(request)
        finally:
            clear_context()

    @app.exception_handler(ShopError)
    async def shop_error_handler(request: Request, exc: ShopError):
        if exc.status_code >= 500:
            logger.error("Request failed", error=exc.code, detail=exc.message, **exc.context)
        else:
            logger.info("Request rejected", error=exc.code, detail=exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": exc.message})

    app.include_router(identity_router)
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(transaction_router)
    app.include_router(rating_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "env": settings.env})

    return app
