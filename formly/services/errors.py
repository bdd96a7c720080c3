"""Error taxonomy shared by services and mapped to HTTP responses.

Every error a service raises on purpose derives from FormlyError and
carries the HTTP status its boundary handler should answer with. Anything
else reaching a handler is treated as unexpected (500).
"""


class FormlyError(Exception):
    """Base class for expected, client-visible failures."""

    status_code = 500
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(FormlyError):
    """Missing, invalid or expired credentials."""
    status_code = 401
    default_message = "Not authenticated"


class InvalidCredentialsError(AuthenticationError):
    """Email and password do not match a user."""
    default_message = "Invalid email or password"


class InvalidTokenError(AuthenticationError):
    """Session token is malformed or its signature does not verify."""


class TokenExpiredError(AuthenticationError):
    """Session token is past its expiry."""


class AuthorizationError(FormlyError):
    """Authenticated, but not allowed to touch the resource."""
    status_code = 403
    default_message = "Not authorized"


class NotFoundError(FormlyError):
    """Entity absent, or hidden by the publish/ownership rules."""
    status_code = 404
    default_message = "Not found"


class FormValidationError(FormlyError):
    """Malformed or incomplete input."""
    status_code = 400
    default_message = "Invalid input"


class ServiceUnavailableError(FormlyError):
    """A backing service (the database) cannot be reached."""
    status_code = 503
    default_message = "Service unavailable"
