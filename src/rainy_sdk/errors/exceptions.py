"""Error taxonomy for the Rainy API client.

Every failure surfaced by the request pipeline is exactly one of the
classes below. All of them derive from :class:`RainyError`, carry an
:class:`ErrorKind` tag, a machine-readable ``code``, a human-readable
``message``, a ``retryable`` flag and a free-form ``details`` mapping.
The set is closed: callers may dispatch on ``error.kind`` exhaustively.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Taxonomy members."""

    AUTHENTICATION = "authentication"
    INVALID_REQUEST = "invalid_request"
    PROVIDER = "provider"
    RATE_LIMIT = "rate_limit"
    INSUFFICIENT_CREDITS = "insufficient_credits"
    NETWORK = "network"
    TIMEOUT = "timeout"
    SERIALIZATION = "serialization"
    API = "api"


class RainyError(Exception):
    """Base class for all client errors."""

    kind: ErrorKind

    def __init__(
        self,
        code: str,
        message: str,
        retryable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize error.

        Args:
            code: Error code, either from the API or assigned by the client
            message: Error message
            retryable: Whether the same request may succeed if sent again
            details: Optional error details
        """
        self.code = code
        self.message = message
        self.retryable = retryable
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain representation of the error.

        Two errors classified from the same input produce equal dicts.
        """
        data = {
            key: value
            for key, value in vars(self).items()
            if not key.startswith("_")
        }
        data["kind"] = self.kind.value
        return data

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"message={self.message!r}, retryable={self.retryable})"
        )


class AuthenticationError(RainyError):
    """The API key is missing, malformed, invalid, expired or lacks permission."""

    kind = ErrorKind.AUTHENTICATION

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(code=code, message=message, retryable=False, details=details)


class InvalidRequestError(RainyError):
    """The request was rejected as malformed, or could not be built."""

    kind = ErrorKind.INVALID_REQUEST

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(code=code, message=message, retryable=False, details=details)


class ProviderError(RainyError):
    """A downstream model provider failed."""

    kind = ErrorKind.PROVIDER

    def __init__(
        self,
        code: str,
        message: str,
        retryable: bool,
        provider: str = "unknown",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize provider error.

        Args:
            code: Error code
            message: Error message
            retryable: Whether the failure is transient
            provider: Name of the provider the failure is attributed to
            details: Optional error details
        """
        super().__init__(code=code, message=message, retryable=retryable, details=details)
        self.provider = provider


class RateLimitError(RainyError):
    """The server-side rate limit was exceeded. Always retryable."""

    kind = ErrorKind.RATE_LIMIT

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: Optional[int] = None,
        current_usage: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize rate limit error.

        Args:
            code: Error code
            message: Error message
            retry_after: Seconds the server asked the client to wait, if known
            current_usage: Server-reported usage figure, if any
            details: Optional error details
        """
        super().__init__(code=code, message=message, retryable=True, details=details)
        self.retry_after = retry_after
        self.current_usage = current_usage


class InsufficientCreditsError(RainyError):
    """The account has no credits or quota left for the request."""

    kind = ErrorKind.INSUFFICIENT_CREDITS

    def __init__(
        self,
        code: str,
        message: str,
        current_credits: float = 0.0,
        required_credits: float = 0.0,
        reset_date: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize insufficient credits error.

        Args:
            code: Error code
            message: Error message
            current_credits: Credits available on the account
            required_credits: Credits the request would have needed
            reset_date: When the balance resets, if reported
            details: Optional error details
        """
        super().__init__(code=code, message=message, retryable=False, details=details)
        self.current_credits = current_credits
        self.required_credits = required_credits
        self.reset_date = reset_date


class NetworkError(RainyError):
    """Connection, DNS, TLS or other transport failure."""

    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        retryable: bool,
        code: str = "NETWORK_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(code=code, message=message, retryable=retryable, details=details)


class RequestTimeoutError(RainyError):
    """The request did not complete within the configured timeout."""

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        message: str,
        code: str = "TIMEOUT",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(code=code, message=message, retryable=True, details=details)


class SerializationError(RainyError):
    """A response body did not match the expected shape."""

    kind = ErrorKind.SERIALIZATION

    def __init__(
        self,
        message: str,
        code: str = "SERIALIZATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(code=code, message=message, retryable=False, details=details)


class ApiError(RainyError):
    """Any other non-success response."""

    kind = ErrorKind.API

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int,
        retryable: bool,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize API error.

        Args:
            code: Error code
            message: Error message
            status_code: HTTP status of the response
            retryable: Whether the failure is transient
            request_id: Server-assigned request id, for support requests
            details: Optional error details
        """
        super().__init__(code=code, message=message, retryable=retryable, details=details)
        self.status_code = status_code
        self.request_id = request_id
