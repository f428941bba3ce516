"""
Domain error kinds surfaced by the data-access layer.

Every operation of an access interface either returns its value or raises one
of these. The HTTP layer maps them onto problem responses; nothing else in the
service is allowed to turn a backend failure into one of them.
"""

from typing import Any, Dict, Optional


class VtnError(Exception):
    """Base exception for the VTN service."""

    status_code: int = 500
    title: str = "Internal Server Error"

    def __init__(self, detail: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.detail = detail or self.title
        self.details = details or {}
        super().__init__(self.detail)


class NotFound(VtnError):
    """No entity of the requested kind exists with the given id."""

    status_code = 404
    title = "Not Found"


class Forbidden(VtnError):
    """The identity is authenticated but not authorized for the operation."""

    status_code = 403
    title = "Forbidden"


class ValidationFailed(VtnError):
    """A filter or content violates a structural constraint."""

    status_code = 400
    title = "Bad Request"


class Conflict(VtnError):
    """A uniqueness constraint was violated."""

    status_code = 409
    title = "Conflict"


class Unauthorized(VtnError):
    """The credential is missing or could not be verified."""

    status_code = 401
    title = "Unauthorized"
