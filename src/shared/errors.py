"""Error taxonomy shared by every bounded context.

Each error carries the HTTP status it maps to, so the web layer can render
any of them with a single exception handler.
"""


class ShopError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str | None = None, **context):
        self.message = message or self.__class__.__doc__ or self.code
        self.context = context
        super().__init__(self.message)


class Unauthenticated(ShopError):
    """No valid session for this request."""

    status_code = 401
    code = "unauthenticated"


class InvalidCredentials(ShopError):
    """Username or password is incorrect."""

    status_code = 401
    code = "invalid_credentials"


class ProductNotFound(ShopError):
    """Product does not exist in the catalogue."""

    status_code = 404
    code = "product_not_found"


class LineNotFound(ShopError):
    """Product is not in the cart."""

    status_code = 404
    code = "line_not_found"


class EmptyCart(ShopError):
    """Cannot check out an empty cart."""

    status_code = 404
    code = "empty_cart"


class AccountNotFound(ShopError):
    """Account does not exist."""

    status_code = 404
    code = "account_not_found"


class OrderNotFound(ShopError):
    """Order does not exist."""

    status_code = 404
    code = "order_not_found"


class RatingNotFound(ShopError):
    """Rating does not exist."""

    status_code = 404
    code = "rating_not_found"


class NotRatingOwner(ShopError):
    """Only the author of a rating can remove it."""

    status_code = 403
    code = "not_rating_owner"


class UsernameTaken(ShopError):
    """Username is already registered."""

    status_code = 409
    code = "username_taken"


class InvalidPaymentType(ShopError):
    """Payment type must be a non-empty string."""

    status_code = 422
    code = "invalid_payment_type"


class InconsistentCart(ShopError):
    """Cart references a product that no longer exists."""

    status_code = 500
    code = "inconsistent_cart"


class TransientStorageFailure(ShopError):
    """Storage is unavailable or timed out; the request may be retried."""

    status_code = 503
    code = "storage_unavailable"
