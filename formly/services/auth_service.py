"""Account service: sign-up, sign-in and profile management.

This module implements the account operations behind the /api/auth
endpoints on top of the User model, the password hasher and the session
token service.
"""

from typing import Optional, Tuple

from sqlalchemy.orm import Session

from formly.logging_config import get_logger, mask_email
from formly.models.user import User
from formly.services.errors import (
    FormValidationError,
    InvalidCredentialsError,
    NotFoundError,
)
from formly.services.passwords import PasswordHasher
from formly.services.session_tokens import SessionTokenService

logger = get_logger(__name__)


class AuthService:
    """Account operations bound to a database session."""

    def __init__(self, db: Session):
        """Initialize the service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def sign_in(self, email: str, password: str) -> Tuple[User, str]:
        """Check credentials and issue a session token.

        An unknown email and a wrong password fail the same way so callers
        cannot probe which accounts exist.

        Args:
            email: Email address
            password: Plaintext password

        Returns:
            Tuple of (user, session token)

        Raises:
            InvalidCredentialsError: If the credentials do not match
        """
        user = User.get_by_email(self.db, email)
        if user is None or not PasswordHasher.verify_password(password, user.password_hash):
            logger.info(f"Failed sign-in for {mask_email(email)}")
            raise InvalidCredentialsError()

        token = SessionTokenService.issue(user.id, user.email)
        logger.info("User signed in", extra={"user_id": user.id})
        return user, token

    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> Tuple[User, str]:
        """Create an account and sign it in.

        Args:
            email: Email address (must not be registered yet)
            password: Plaintext password
            name: Optional display name

        Returns:
            Tuple of (new user, session token)

        Raises:
            FormValidationError: If the email is already registered
        """
        if User.get_by_email(self.db, email) is not None:
            raise FormValidationError("Email is already registered")

        user = User(
            name=name,
            email=User.normalize_email(email),
            password_hash=PasswordHasher.hash_password(password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("User signed up", extra={"user_id": user.id})
        return user, SessionTokenService.issue(user.id, user.email)

    def get_user(self, user_id: str) -> User:
        """Load the signed-in user.

        Raises:
            NotFoundError: If the account no longer exists
        """
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, name: str, email: str) -> Tuple[User, str]:
        """Change a user's name and email.

        Returns a fresh session token because the token carries the email.

        Raises:
            NotFoundError: If the account no longer exists
            FormValidationError: If the email belongs to another account
        """
        user = self.get_user(user_id)

        existing = User.get_by_email(self.db, email)
        if existing is not None and existing.id != user.id:
            raise FormValidationError("Email is already registered")

        user.name = name
        user.email = User.normalize_email(email)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Profile updated", extra={"user_id": user.id})
        return user, SessionTokenService.issue(user.id, user.email)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """Replace a user's password after checking the current one.

        Raises:
            NotFoundError: If the account no longer exists
            FormValidationError: If the current password is wrong
        """
        user = self.get_user(user_id)

        if not PasswordHasher.verify_password(current_password, user.password_hash):
            logger.info("Password change rejected: wrong current password", extra={"user_id": user.id})
            raise FormValidationError("Current password is incorrect")

        user.password_hash = PasswordHasher.hash_password(new_password)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Password changed", extra={"user_id": user.id})

    def delete_account(self, user_id: str) -> None:
        """Delete a user together with their forms, questions and responses.

        Everything goes in one transaction.

        Raises:
            NotFoundError: If the account no longer exists
        """
        user = self.get_user(user_id)

        form_count = len(user.forms)
        self.db.delete(user)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Account deleted with {form_count} forms",
            extra={"user_id": user_id},
        )
