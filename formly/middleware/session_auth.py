"""Session cookie authentication.

This module resolves the signed-in user from the session cookie for API
routes, sets and clears that cookie, and gates dashboard pages behind a
valid session.

Any verification failure collapses to "not authenticated": callers never
learn whether the token was missing, malformed, forged or expired.
"""

from typing import Optional

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from formly.config import get_settings
from formly.logging_config import get_logger
from formly.services.errors import AuthenticationError
from formly.services.session_tokens import SessionTokenService

logger = get_logger(__name__)

DASHBOARD_PREFIX = "/dashboard"


def read_session_user_id(request: Request) -> Optional[str]:
    """Return the user id of a valid session cookie, else None."""
    settings = get_settings()
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    try:
        return SessionTokenService.verify(token).user_id
    except AuthenticationError:
        return None


# Dependency functions for FastAPI routes
async def get_current_user_id(request: Request) -> str:
    """FastAPI dependency requiring a signed-in user.

    Usage:
        @router.get("/api/forms")
        def list_forms(user_id: str = Depends(get_current_user_id)):
            ...

    Raises:
        AuthenticationError: If there is no valid session (401)
    """
    user_id = read_session_user_id(request)
    if user_id is None:
        raise AuthenticationError()
    return user_id


async def get_optional_user_id(request: Request) -> Optional[str]:
    """FastAPI dependency for routes open to anonymous visitors.

    Returns:
        The signed-in user's id, or None
    """
    return read_session_user_id(request)


def set_session_cookie(response: Response, token: str) -> None:
    """Attach the session token cookie to a response.

    HTTP-only, same-site strict, valid for the whole site for
    session_max_age_days; marked Secure in production.
    """
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        path="/",
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )


def clear_session_cookie(response: Response) -> None:
    """Remove the session cookie from the browser."""
    settings = get_settings()
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )


class DashboardGateMiddleware(BaseHTTPMiddleware):
    """Redirect unauthenticated requests for dashboard pages to sign-in.

    Every path under /dashboard requires a valid session cookie; other
    paths pass through untouched.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        is_dashboard = path == DASHBOARD_PREFIX or path.startswith(DASHBOARD_PREFIX + "/")

        if is_dashboard and read_session_user_id(request) is None:
            logger.debug(f"Unauthenticated dashboard request redirected: {path}")
            return RedirectResponse(url=get_settings().signin_path, status_code=307)

        return await call_next(request)
