"""
Shortlink error taxonomy.

Every failure a request can end in is one of these exceptions. The service
layer raises them; the application-level handler in ``shortlink.main`` turns
them into HTTP responses.
"""


class ShortlinkError(Exception):
    """Base exception for request failures."""

    status_code: int = 500
    default_message: str = "internal error"

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class InvalidInputError(ShortlinkError):
    """Raised when the request body is missing a field or holds a malformed value."""

    status_code = 400
    default_message = "invalid input"


class AuthError(ShortlinkError):
    """Raised when the admin credential does not match."""

    status_code = 401
    default_message = "invalid admin key"


class NotFoundError(ShortlinkError):
    """Raised when no link is stored under the requested identifier."""

    status_code = 404
    default_message = "short link not found"


class MethodError(ShortlinkError):
    """Raised when an endpoint is called with an unsupported HTTP method."""

    status_code = 405
    default_message = "method not allowed"


class ConflictError(ShortlinkError):
    """Raised when a custom identifier is already taken."""

    status_code = 409
    default_message = "custom ID already in use"


class InternalError(ShortlinkError):
    """Raised when storage access or record decoding fails."""

    status_code = 500
