"""Error envelope shared by every endpoint."""

from typing import Any

from pydantic import BaseModel

# Error codes surfaced to clients
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_REQUEST_BODY = "INVALID_REQUEST_BODY"
COMMUNITY_NOT_FOUND = "COMMUNITY_NOT_FOUND"
POST_NOT_FOUND = "POST_NOT_FOUND"
TIMEOUT = "TIMEOUT"
INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail

    @classmethod
    def build(cls, code: str, message: str, detail: dict[str, Any] | None = None) -> "ErrorResponse":
        return cls(error=ErrorDetail(code=code, message=message, detail=detail))
