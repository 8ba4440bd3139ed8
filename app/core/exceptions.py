"""
API error types.

Every error response carries a stable ``code`` for client-side branching
and a human readable ``error`` message.
"""

from typing import Any, Dict, Optional, Sequence

from fastapi import status


class APIError(Exception):
    """Base exception rendered as a JSON error envelope."""

    code = "SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            body["details"] = self.details
        return body


class BadRequestError(APIError):
    """Malformed or out-of-range request parameters."""

    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def to_response(self) -> Dict[str, Any]:
        body = super().to_response()
        body["message"] = "Invalid request parameters"
        return body


class AuthRequiredError(APIError):
    """The endpoint needs an authenticated user."""

    code = "AUTH_REQUIRED"
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(APIError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class ServerError(APIError):
    """Unexpected failure while reading the store or formatting results."""


def first_validation_message(errors: Sequence[Dict[str, Any]]) -> str:
    """Describe the first of a list of pydantic validation errors."""
    if not errors:
        return "Invalid request"
    error = errors[0]
    location = [str(part) for part in error.get("loc", ()) if part not in ("query", "body", "path")]
    message = error.get("msg", "Invalid value")
    if location:
        return f"{'.'.join(location)}: {message}"
    return message
