"""Application error taxonomy. Each error carries the HTTP status it maps to at the API boundary."""

from http import HTTPStatus
from typing import Any


class AppError(Exception):
    """Base for errors rendered to the client as ``{"success": false, "message": ...}``."""

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return int(self.status)

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationError(AppError):
    """Malformed or missing input; the client must correct it and resubmit."""

    status = HTTPStatus.BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(AppError):
    """No credentials, invalid credentials, or no valid session."""

    status = HTTPStatus.UNAUTHORIZED
    default_message = "Not authenticated"


class AuthorizationError(AppError):
    """Authenticated, but the role does not permit the operation."""

    status = HTTPStatus.FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    status = HTTPStatus.NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    """Duplicate value for a unique key."""

    status = HTTPStatus.CONFLICT
    default_message = "Conflict"


class InternalError(AppError):
    """Store or infrastructure failure. The message is generic; details go to the server log."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
