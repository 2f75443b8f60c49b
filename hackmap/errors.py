# hackmap/errors.py
"""Typed application errors.

Every error carries a stable machine-readable `code` and the HTTP status it maps
to; main.py renders them as {"error": code, "detail": message}.
"""


class HackMapError(Exception):
    code = "error"
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class NotAuthenticated(HackMapError):
    """Raised when no valid session resolves to a user."""
    code = "unauthorized"
    status_code = 401


class Forbidden(HackMapError):
    code = "forbidden"
    status_code = 403


class NotFound(HackMapError):
    code = "not_found"
    status_code = 404


class ValidationFailed(HackMapError):
    code = "validation_failed"
    status_code = 400


class Conflict(HackMapError):
    """Duplicate registration, membership, endorsement or request."""
    code = "conflict"
    status_code = 400


class EmailDeliveryError(HackMapError):
    """Raised when the mail provider cannot be reached or rejects a message."""
    code = "email_unavailable"
    status_code = 502


class DatabaseUnavailable(HackMapError):
    code = "database_unavailable"
    status_code = 503
