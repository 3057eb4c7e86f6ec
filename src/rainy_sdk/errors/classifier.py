"""Failure classification.

Maps transport exceptions and non-success HTTP responses onto the error
taxonomy. Classification is a pure function of its inputs.
"""
import asyncio
import json
from http import HTTPStatus
from typing import Any, Dict, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from ..models.api_error import ApiErrorDetails, ApiErrorResponse
from .exceptions import (
    ApiError,
    AuthenticationError,
    InsufficientCreditsError,
    InvalidRequestError,
    NetworkError,
    ProviderError,
    RainyError,
    RateLimitError,
    RequestTimeoutError,
)

AUTHENTICATION_CODES = frozenset({"INVALID_API_KEY", "EXPIRED_API_KEY"})
INSUFFICIENT_CREDITS_CODES = frozenset(
    {"INSUFFICIENT_CREDITS", "INSUFFICIENT_BALANCE", "QUOTA_EXCEEDED"}
)
RATE_LIMIT_CODES = frozenset({"RATE_LIMIT_EXCEEDED"})
INVALID_REQUEST_CODES = frozenset(
    {"INVALID_REQUEST", "MISSING_REQUIRED_FIELD", "INVALID_MODEL"}
)
PROVIDER_CODES = frozenset({"PROVIDER_ERROR", "PROVIDER_UNAVAILABLE"})

REQUEST_ID_HEADER = "x-request-id"


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    if not headers:
        return None
    if isinstance(headers, httpx.Headers):
        return headers.get(name)
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


class ErrorClassifier:
    """Turns failed calls into exactly one taxonomy member."""

    def classify_transport(self, exc: Exception) -> RainyError:
        """Classify a transport-level failure.

        Args:
            exc: Exception raised by the HTTP transport

        Returns:
            RequestTimeoutError for timeouts, including an expired deadline
            on the whole attempt, retryable NetworkError for
            connect/DNS/TLS failures, non-retryable NetworkError otherwise
        """
        details = {"error_type": type(exc).__name__}
        if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
            return RequestTimeoutError(
                message=f"Request timed out: {exc}", details=details
            )
        if isinstance(exc, httpx.ConnectError):
            return NetworkError(
                message=f"Connection failed: {exc}",
                retryable=True,
                code="CONNECTION_ERROR",
                details=details,
            )
        return NetworkError(
            message=f"HTTP transport failed: {exc}", retryable=False, details=details
        )

    def classify_response(
        self,
        status_code: int,
        body: Union[bytes, str, None],
        headers: Optional[Mapping[str, str]] = None,
    ) -> RainyError:
        """Classify a non-success HTTP response.

        Args:
            status_code: HTTP status
            body: Raw response body
            headers: Response headers

        Returns:
            Classified error
        """
        text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else (body or "")
        document = self.parse_error_document(text)
        if document is not None:
            return self.classify_error_document(status_code, document, headers)
        return self._classify_status(status_code, text, headers)

    @staticmethod
    def parse_error_document(text: str) -> Optional[ApiErrorDetails]:
        """Parse a structured error body.

        Returns:
            The ``error`` member, or None if the text is not an error document
        """
        if not text:
            return None
        try:
            return ApiErrorResponse.model_validate_json(text).error
        except (ValidationError, ValueError):
            return None

    def classify_error_document(
        self,
        status_code: int,
        error: ApiErrorDetails,
        headers: Optional[Mapping[str, str]] = None,
    ) -> RainyError:
        """Classify a parsed error document by its code.

        Args:
            status_code: HTTP status the document arrived with
            error: Parsed ``error`` member
            headers: Response headers

        Returns:
            Classified error
        """
        code = error.code
        # Only an object carries the code-specific fields
        details: Dict[str, Any] = (
            dict(error.details) if isinstance(error.details, dict) else {}
        )
        default_retryable = status_code >= 500

        if code in AUTHENTICATION_CODES:
            return AuthenticationError(code=code, message=error.message, details=details)

        if code in INSUFFICIENT_CREDITS_CODES:
            required = details.get("required_credits", details.get("estimated_cost"))
            reset_date = details.get("reset_date")
            return InsufficientCreditsError(
                code=code,
                message=error.message,
                current_credits=_as_float(details.get("current_credits")),
                required_credits=_as_float(required),
                reset_date=str(reset_date) if reset_date is not None else None,
                details=details,
            )

        if code in RATE_LIMIT_CODES:
            current_usage = details.get("current_usage")
            return RateLimitError(
                code=code,
                message=error.message,
                retry_after=_as_int(details.get("retry_after")),
                current_usage=str(current_usage) if current_usage is not None else None,
                details=details,
            )

        if code in INVALID_REQUEST_CODES:
            return InvalidRequestError(code=code, message=error.message, details=details)

        if code in PROVIDER_CODES:
            return ProviderError(
                code=code,
                message=error.message,
                retryable=error.retryable if error.retryable is not None else default_retryable,
                provider=str(details.get("provider") or "unknown"),
                details=details,
            )

        return ApiError(
            code=code,
            message=error.message,
            status_code=status_code,
            retryable=error.retryable if error.retryable is not None else default_retryable,
            request_id=error.request_id or _header(headers, REQUEST_ID_HEADER),
            details=details,
        )

    def _classify_status(
        self,
        status_code: int,
        text: str,
        headers: Optional[Mapping[str, str]],
    ) -> RainyError:
        """Classify a response whose body is not an error document."""
        if status_code == 401:
            return AuthenticationError(code="UNAUTHORIZED", message="Invalid API key")
        if status_code == 403:
            return AuthenticationError(code="FORBIDDEN", message="Insufficient permissions")
        if status_code == 429:
            return RateLimitError(code="RATE_LIMIT_EXCEEDED", message="Rate limit exceeded")
        if status_code == 400:
            return InvalidRequestError(code="BAD_REQUEST", message=text)

        try:
            reason = HTTPStatus(status_code).phrase
        except ValueError:
            reason = "UNKNOWN"
        return ApiError(
            code=reason,
            message=text or reason,
            status_code=status_code,
            retryable=status_code >= 500,
            request_id=_header(headers, REQUEST_ID_HEADER),
        )

    def classify_stream_payload(
        self, payload: str, status_code: int = 200
    ) -> Optional[RainyError]:
        """Classify an in-band ``{"error": ...}`` event payload, if it is one.

        Args:
            payload: Decoded ``data:`` field of one SSE event
            status_code: Status of the streaming response carrying the event

        Returns:
            Classified error, or None for ordinary payloads
        """
        try:
            data = json.loads(payload)
        except ValueError:
            return None
        if not isinstance(data, dict) or not isinstance(data.get("error"), dict):
            return None
        document = self.parse_error_document(payload)
        if document is None:
            return None
        return self.classify_error_document(status_code, document)
