"""FastAPI endpoints for the Identity domain — accounts and sessions."""

from fastapi import APIRouter, Depends, Request, Response

from identity.account import AccountService
from identity.api.dependencies import current_account_id, require_login
from identity.api.schemas import (
    AccountResponse,
    ChangePasswordRequest,
    ExistsResponse,
    LoginRequest,
    NewAccountRequest,
    ProfileResponse,
    StatusResponse,
    UsernameRequest,
)
from identity.session import SessionStore
from reviews.rating import RatingService
from shared.errors import Unauthenticated

router = APIRouter(prefix="/user", tags=["users"])


def get_accounts(request: Request) -> AccountService:
    return request.app.state.accounts


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_ratings(request: Request) -> RatingService:
    return request.app.state.ratings


@router.post("/new", status_code=201, response_model=AccountResponse)
def new_user(body: NewAccountRequest, accounts: AccountService = Depends(get_accounts)) -> AccountResponse:
    account = accounts.register(
        username=body.username,
        password=body.password,
        phone_number=body.phone_number,
        email_id=body.email_id,
        address=body.address,
    )
    return AccountResponse.model_validate(account)


@router.post("/existing", response_model=ExistsResponse)
def name_exists(body: UsernameRequest, accounts: AccountService = Depends(get_accounts)) -> ExistsResponse:
    return ExistsResponse(exists=accounts.exists(body.username))


@router.post("/login", response_model=StatusResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    accounts: AccountService = Depends(get_accounts),
    sessions: SessionStore = Depends(get_sessions),
    account_id: int | None = Depends(current_account_id),
) -> StatusResponse:
    if account_id is not None:
        return StatusResponse()

    account_id = accounts.authenticate(body.username, body.password)
    token = sessions.issue(account_id)

    session_settings = request.app.state.settings.session
    response.set_cookie(
        key=session_settings.cookie_name,
        value=token,
        max_age=session_settings.ttl_hours * 3600,
        httponly=True,
        secure=session_settings.secure_cookie,
        samesite="lax",
    )
    return StatusResponse()


@router.post("/logout", response_model=StatusResponse)
def logout(request: Request, response: Response, sessions: SessionStore = Depends(get_sessions)) -> StatusResponse:
    cookie_name = request.app.state.settings.session.cookie_name
    token = request.cookies.get(cookie_name)
    if not token or not sessions.revoke(token):
        raise Unauthenticated("Not logged in")

    response.delete_cookie(cookie_name)
    return StatusResponse()


@router.post("/change_password", response_model=StatusResponse, dependencies=[Depends(require_login)])
def change_password(
    body: ChangePasswordRequest,
    accounts: AccountService = Depends(get_accounts),
    account_id: int = Depends(require_login),
) -> StatusResponse:
    accounts.change_password(account_id, body.old_password, body.new_password)
    return StatusResponse()


@router.get("/profile", response_model=ProfileResponse)
def user_profile(
    accounts: AccountService = Depends(get_accounts),
    ratings: RatingService = Depends(get_ratings),
    account_id: int = Depends(require_login),
) -> ProfileResponse:
    account = accounts.profile(account_id)
    return ProfileResponse(
        **AccountResponse.model_validate(account).model_dump(),
        ratings_given=ratings.count_for_account(account_id),
    )


# Registered last so it does not shadow the fixed paths above
@router.get("/{username}", response_model=AccountResponse)
def user_details(username: str, accounts: AccountService = Depends(get_accounts)) -> AccountResponse:
    return AccountResponse.model_validate(accounts.details(username))
