"""
errors.py — Domain Error Taxonomy

Services raise these; `main.py` registers handlers that turn them into
HTTP responses. Route functions do not translate errors themselves.

    ValidationError          → 400 {"error": ..., "fields": [...]}
    InvalidCredentialsError  → 400 {"error": "Unable to login"}
    AuthError                → 401 {"error": "Please authenticate."}
    NotFoundError            → 404, empty body
"""

from typing import Dict, List, Optional


class TaskApiError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500
    message: str = "Internal error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(TaskApiError):
    """Malformed or disallowed input."""

    status_code = 400
    message = "Validation failed"

    def __init__(self, message: Optional[str] = None, fields: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.fields = fields or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, fields=[{"field": field, "message": message}])


class AuthError(TaskApiError):
    """Missing, malformed, or revoked session token. Deliberately generic."""

    status_code = 401
    message = "Please authenticate."


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password; the two cases share one message."""

    status_code = 400
    message = "Unable to login"


class NotFoundError(TaskApiError):
    """Missing resource, or one owned by a different user."""

    status_code = 404
    message = "Not found"
