"""Session token service.

Issues and verifies the signed, time-limited tokens carried in the session
cookie. A token asserts a user id (``sub``) and email and expires after
``session_max_age_days``.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from formly.config import get_settings
from formly.logging_config import get_logger
from formly.services.errors import InvalidTokenError, TokenExpiredError

logger = get_logger(__name__)


@dataclass
class SessionClaims:
    """Verified contents of a session token.

    Attributes:
        user_id: Id of the signed-in user
        email: Email the user had when the token was issued
        expires_at: Expiry time of the token
    """
    user_id: str
    email: str
    expires_at: datetime


class SessionTokenService:
    """Service for issuing and verifying session tokens."""

    @staticmethod
    def issue(user_id: str, email: str, now: Optional[datetime] = None) -> str:
        """Issue a signed session token.

        Args:
            user_id: Id of the user signing in
            email: User's email address
            now: Issue time, defaults to the current time

        Returns:
            Encoded JWT
        """
        settings = get_settings()
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + timedelta(days=settings.session_max_age_days),
        }
        return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)

    @staticmethod
    def verify(token: Optional[str]) -> SessionClaims:
        """Verify a session token.

        Args:
            token: Encoded JWT from the session cookie

        Returns:
            SessionClaims of a valid token

        Raises:
            TokenExpiredError: If the token is past its expiry
            InvalidTokenError: If the token is missing, malformed, signed
                with another key or lacks the user id
        """
        if not token:
            raise InvalidTokenError()

        settings = get_settings()
        try:
            payload = jwt.decode(
                token,
                settings.secret_key,
                algorithms=[settings.jwt_algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired session token")
            raise TokenExpiredError()
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected invalid session token: {type(e).__name__}")
            raise InvalidTokenError()

        return SessionClaims(
            user_id=payload["sub"],
            email=payload.get("email", ""),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
