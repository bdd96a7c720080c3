"""Account endpoints: sign-in, sign-up, sign-out and profile management.

Successful sign-in and sign-up set the session cookie; sign-out and
account deletion clear it.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from formly.middleware.session_auth import (
    clear_session_cookie,
    get_current_user_id,
    set_session_cookie,
)
from formly.models.database import get_db
from formly.schemas.auth import (
    PasswordChange,
    ProfileUpdate,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    SuccessResponse,
    UserOut,
)
from formly.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth")

DASHBOARD_REDIRECT = "/dashboard"


@router.post("/signin", response_model=SignInResponse)
def sign_in(
    body: SignInRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> SignInResponse:
    """Check credentials and start a session.

    Returns the user and where the client should go next; the session
    token travels only in the HTTP-only cookie.
    """
    user, token = AuthService(db).sign_in(body.email, body.password)
    set_session_cookie(response, token)
    return SignInResponse(id=user.id, name=user.name, email=user.email, redirect=DASHBOARD_REDIRECT)


@router.post("/signup", response_model=SignInResponse, status_code=201)
def sign_up(
    body: SignUpRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> SignInResponse:
    """Create an account and start a session for it."""
    user, token = AuthService(db).sign_up(body.email, body.password, name=body.name)
    set_session_cookie(response, token)
    return SignInResponse(id=user.id, name=user.name, email=user.email, redirect=DASHBOARD_REDIRECT)


@router.post("/signout", response_model=SuccessResponse)
def sign_out(response: Response) -> SuccessResponse:
    clear_session_cookie(response)
    return SuccessResponse()


@router.get("/me", response_model=UserOut)
def read_me(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> UserOut:
    return UserOut.model_validate(AuthService(db).get_user(user_id))


@router.put("/me", response_model=UserOut)
def update_me(
    body: ProfileUpdate,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> UserOut:
    """Update name and email; the session cookie is re-issued."""
    user, token = AuthService(db).update_profile(user_id, body.name, body.email)
    set_session_cookie(response, token)
    return UserOut.model_validate(user)


@router.put("/password", response_model=SuccessResponse)
def change_password(
    body: PasswordChange,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    AuthService(db).change_password(user_id, body.current_password, body.new_password)
    return SuccessResponse()


@router.delete("/delete", response_model=SuccessResponse)
def delete_account(
    response: Response,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Delete the account and everything it owns, then end the session."""
    AuthService(db).delete_account(user_id)
    clear_session_cookie(response)
    return SuccessResponse()
