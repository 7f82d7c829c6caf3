"""
Error taxonomy shared by the stores and the HTTP layer.

Every store raises the most specific subclass; the API layer maps
``status_code`` straight onto the response without retrying.
"""

from typing import Optional


class ShortlinkError(Exception):
    """Base class for all domain errors"""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ShortlinkError):
    """Malformed input"""

    status_code = 400
    default_message = "Invalid request"


class AuthError(ShortlinkError):
    """Missing, invalid or expired token, or bad credentials"""

    status_code = 401
    default_message = "Invalid token"


class ConflictError(ShortlinkError):
    """Username or short code already taken"""

    status_code = 409
    default_message = "Resource already exists"


class NotFoundError(ShortlinkError):
    """Unknown short code"""

    status_code = 404
    default_message = "Short URL not found"


class ExhaustedError(ShortlinkError):
    """Code generation ran out of attempts or keyspace"""

    status_code = 503
    default_message = "Unable to generate a unique short code, try again later"


class InternalError(ShortlinkError):
    """Storage timeout or unexpected failure"""

    status_code = 500
    default_message = "Internal server error"
