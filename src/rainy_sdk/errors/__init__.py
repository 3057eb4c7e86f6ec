"""Error taxonomy and classification."""
from .classifier import ErrorClassifier
from .exceptions import (
    ApiError,
    AuthenticationError,
    ErrorKind,
    InsufficientCreditsError,
    InvalidRequestError,
    NetworkError,
    ProviderError,
    RainyError,
    RateLimitError,
    RequestTimeoutError,
    SerializationError,
)

__all__ = [
    "ApiError",
    "AuthenticationError",
    "ErrorClassifier",
    "ErrorKind",
    "InsufficientCreditsError",
    "InvalidRequestError",
    "NetworkError",
    "ProviderError",
    "RainyError",
    "RateLimitError",
    "RequestTimeoutError",
    "SerializationError",
]
