"""Structured API error document."""
from typing import Any, Optional

from pydantic import BaseModel, Field


class ApiErrorDetails(BaseModel):
    """Body of the ``error`` member of an API error document."""

    code: str = Field(description="Machine-readable error code, e.g. RATE_LIMIT_EXCEEDED")
    message: str = Field(description="Human-readable error message")
    details: Optional[Any] = Field(
        None, description="Code-specific additional information, normally an object"
    )
    retryable: Optional[bool] = Field(
        None, description="Server hint on whether the request may be retried"
    )
    request_id: Optional[str] = Field(None, description="Server-assigned request id")
    timestamp: Optional[str] = Field(None, description="When the error occurred")


class ApiErrorResponse(BaseModel):
    """Error document returned by the API with non-success statuses.

    {
        "error": {
            "code": string,
            "message": string,
            "details"?: object,
            "retryable"?: bool,
            "request_id"?: string,
            "timestamp"?: string
        }
    }
    """

    error: ApiErrorDetails
