"""Common schemas used across the API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(description="Error code")
    message: str = Field(description="Human-readable error message")
    details: Any | None = Field(default=None, description="Additional error details")
    request_id: str | None = Field(default=None, description="Request ID for tracing")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "INVALID_STATE",
                    "message": "Failed to end reading session",
                    "details": None,
                    "request_id": "req_abc123",
                }
            }
        }
    )


# Shared response docs for routers operating on a single book or session
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse, "description": "Resource not found"},
    409: {"model": ErrorResponse, "description": "Operation not allowed in current state"},
    422: {"model": ErrorResponse, "description": "Invalid argument"},
    503: {"model": ErrorResponse, "description": "Store failure"},
}
