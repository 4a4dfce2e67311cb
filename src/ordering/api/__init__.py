from ordering.api.routes import cart_router, transaction_router

__all__ = ["cart_router", "transaction_router"]
