"""
Application error taxonomy.

Every failure the auth flow can detect is raised as an ``AppError`` subclass
at the point of detection.  The API layer translates these into an HTTP
status and a ``{status, message}`` JSON body in one place
(see ``api.middleware.register_error_handlers``).

Hierarchy::

    AppError
    ├── BadRequestError        400
    ├── UnauthorizedError      401
    │   └── InvalidTokenError
    ├── ForbiddenError         403
    ├── NotFoundError          404
    ├── ConflictError          409
    └── InternalServerError    500
        └── StoreUnavailableError
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    ``details`` carries diagnostic context for the logs.  It is never
    serialised into a response body.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def status(self) -> str:
        return "fail" if 400 <= self.status_code < 500 else "error"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "message": self.message}


class BadRequestError(AppError):
    status_code = 400
    error_code = "BAD_REQUEST"


class UnauthorizedError(AppError):
    status_code = 401
    error_code = "UNAUTHORIZED"


class InvalidTokenError(UnauthorizedError):
    """
    Token failed verification.

    Bad signature, malformed payload and expiry all produce the same public
    message; ``reason`` is for debug logging only.
    """

    PUBLIC_MESSAGE = "Token is invalid or has expired"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(self.PUBLIC_MESSAGE, details={"reason": reason})


class ForbiddenError(AppError):
    status_code = 403
    error_code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    error_code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    error_code = "CONFLICT"


class InternalServerError(AppError):
    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"


class StoreUnavailableError(InternalServerError):
    """The credential store timed out or could not be reached."""

    def __init__(self, operation: str, original_error: str = ""):
        super().__init__(
            "An internal server error occurred",
            details={"operation": operation, "original_error": original_error},
        )
