"""
Application error taxonomy.

Services raise these exceptions; the handlers registered in
``main.create_app`` turn them into the JSON envelope
``{"message": ..., "errors": [...]}`` with the matching HTTP status.
Handlers never need to catch them individually.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationFailed(AppError):
    """One or more request fields violate their declared constraints."""

    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None) -> None:
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class Unauthenticated(AppError):
    status_code = 401
    message = "Access token required"


class TokenExpired(Unauthenticated):
    message = "Token expired"


class TokenInvalid(Unauthenticated):
    message = "Invalid token"


class Forbidden(AppError):
    status_code = 403
    message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    message = "Not found"


class Conflict(AppError):
    """Request is well formed but clashes with the current state."""

    status_code = 400
    message = "Conflict"


class DuplicateEmail(Conflict):
    message = "User with this email already exists"


class AlreadyRegistered(Conflict):
    message = "You are already registered for this event"


class CapacityExceeded(Conflict):
    message = "Event is at full capacity"


class IncorrectPassword(Conflict):
    message = "Current password is incorrect"


class Internal(AppError):
    status_code = 500
    message = "Internal server error"
