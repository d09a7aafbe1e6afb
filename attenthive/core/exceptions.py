"""
Domain errors
Every rejection raised by a service is one of these. The HTTP layer maps
status_code directly, so services never build HTTP responses themselves.
"""

from typing import Any, Dict


class AttentHiveError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str = None, **details: Any):
        self.message = message or self.default_message
        self.details: Dict[str, Any] = details
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        return {"error": self.message, **self.details}


class UnauthorizedError(AttentHiveError):
    status_code = 401
    default_message = "You must be logged in to perform this action"


class ValidationFailedError(AttentHiveError):
    status_code = 400
    default_message = "Invalid request payload"


class ForbiddenError(AttentHiveError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFoundError(AttentHiveError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AttentHiveError):
    status_code = 409
    default_message = "Request conflicts with the current state"


class InternalError(AttentHiveError):
    status_code = 500
    default_message = "Internal server error"
