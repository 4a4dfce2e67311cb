"""Request-scoped identity resolution shared by every router."""

from fastapi import Depends, Request

from shared.errors import Unauthenticated


def current_account_id(request: Request) -> int | None:
    """Account id behind the session cookie, ``None`` when anonymous."""
    cookie_name = request.app.state.settings.session.cookie_name
    return request.app.state.identity_resolver.resolve(request.cookies.get(cookie_name))


def require_login(account_id: int | None = Depends(current_account_id)) -> int:
    """Reject anonymous requests.

    Used as a router-level dependency so it runs before request bodies are
    validated: an anonymous caller gets 401 whatever it sent.
    """
    if account_id is None:
        raise Unauthenticated()
    return account_id
