"""FastAPI routes for the Ordering domain — cart and transactions."""

from fastapi import APIRouter, Depends, Request

from identity.api.dependencies import require_login
from ordering.api.schemas import (
    CartItemResponse,
    CartLineRequest,
    CartLineResponse,
    CheckoutRequest,
    OrderResponse,
)
from ordering.cart.cart import REMOVED
from ordering.cart.store import CartStore
from ordering.checkout.coordinator import CheckoutCoordinator
from ordering.order.order import OrderHistory


def get_cart_store(request: Request) -> CartStore:
    return request.app.state.cart_store


def get_checkout(request: Request) -> CheckoutCoordinator:
    return request.app.state.checkout


def get_order_history(request: Request) -> OrderHistory:
    return request.app.state.order_history


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"], dependencies=[Depends(require_login)])


@cart_router.get("/items", response_model=list[CartItemResponse])
def get_user_cart_items(
    cart_store: CartStore = Depends(get_cart_store),
    account_id: int = Depends(require_login),
) -> list[CartItemResponse]:
    return [CartItemResponse.model_validate(item) for item in cart_store.list_items(account_id)]


@cart_router.get("/total", response_model=float)
def get_user_cart_total(
    cart_store: CartStore = Depends(get_cart_store),
    account_id: int = Depends(require_login),
) -> float:
    return float(cart_store.total(account_id))


@cart_router.post("/add", response_model=CartLineResponse)
def add_to_cart(
    body: CartLineRequest,
    cart_store: CartStore = Depends(get_cart_store),
    account_id: int = Depends(require_login),
) -> CartLineResponse:
    quantity = cart_store.add_item(account_id, body.product_id)
    return CartLineResponse(product_id=body.product_id, quantity=quantity)


@cart_router.post("/remove", response_model=CartLineResponse)
def remove_from_cart(
    body: CartLineRequest,
    cart_store: CartStore = Depends(get_cart_store),
    account_id: int = Depends(require_login),
) -> CartLineResponse:
    quantity = cart_store.remove_item(account_id, body.product_id)
    return CartLineResponse(product_id=body.product_id, quantity=quantity, removed=quantity == REMOVED)


# ---------------------------------------------------------------------------
# Transaction Router
# ---------------------------------------------------------------------------
transaction_router = APIRouter(prefix="/transaction", tags=["transactions"], dependencies=[Depends(require_login)])


@transaction_router.post("/checkout", response_model=OrderResponse)
def checkout_cart(
    body: CheckoutRequest,
    checkout: CheckoutCoordinator = Depends(get_checkout),
    account_id: int = Depends(require_login),
) -> OrderResponse:
    order = checkout.checkout(account_id, body.payment_type)
    return OrderResponse.from_order(order)


@transaction_router.get("/list", response_model=list[OrderResponse])
def list_transactions(
    order_history: OrderHistory = Depends(get_order_history),
    account_id: int = Depends(require_login),
) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in order_history.list_orders(account_id)]
