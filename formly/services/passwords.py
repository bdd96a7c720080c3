"""Password hashing service.

This module hashes and verifies user passwords with bcrypt. Plaintext
passwords are never stored or logged.
"""

import bcrypt

from formly.config import get_settings

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """
    One-way hashing service for user passwords.

    Hashes are salted per password by bcrypt, so the same password yields a
    different hash each time; verification re-derives the hash from the
    stored salt.

    Usage example:
        from formly.services.passwords import PasswordHasher

        user.password_hash = PasswordHasher.hash_password(body.password)

        if not PasswordHasher.verify_password(body.password, user.password_hash):
            raise InvalidCredentialsError()
    """

    @staticmethod
    def _encode(password: str) -> bytes:
        """Encode a password for bcrypt, truncated to the 72 byte limit."""
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

    @staticmethod
    def hash_password(password: str) -> str:
        """
        Hash a password with a fresh salt.

        The cost factor comes from settings.bcrypt_rounds.

        Args:
            password: Plaintext password

        Returns:
            bcrypt hash string (60 characters, "$2b$" prefix)
        """
        settings = get_settings()
        salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
        return bcrypt.hashpw(PasswordHasher._encode(password), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        """
        Check a plaintext password against a stored hash.

        Args:
            password: Plaintext password to check
            password_hash: Hash produced by hash_password()

        Returns:
            True if the password matches, False otherwise (including when
            the stored hash is malformed)
        """
        try:
            return bcrypt.checkpw(
                PasswordHasher._encode(password),
                password_hash.encode("utf-8"),
            )
        except ValueError:
            return False
