"""Async Python client for the Rainy API."""
import logging

from .auth import Credentials
from .client import RainyClient
from .core import LoggerService, RateLimitStrategy, SDK_VERSION, Settings
from .di import Container, create_client
from .errors import (
    ApiError,
    AuthenticationError,
    ErrorClassifier,
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
from .limits import (
    FixedWindowRateLimiter,
    RateLimiter,
    TokenBucketRateLimiter,
    create_rate_limiter,
)
from .models import (
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    MessageRole,
    RequestMetadata,
)
from .retry import RetryConfig, RetryPolicy
from .transport import RequestDispatcher, StreamDecoder, StreamEvent

__version__ = SDK_VERSION

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ApiError",
    "AuthenticationError",
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "Container",
    "Credentials",
    "ErrorClassifier",
    "ErrorKind",
    "FixedWindowRateLimiter",
    "InsufficientCreditsError",
    "InvalidRequestError",
    "LoggerService",
    "MessageRole",
    "NetworkError",
    "ProviderError",
    "RainyClient",
    "RainyError",
    "RateLimitError",
    "RateLimitStrategy",
    "RateLimiter",
    "RequestDispatcher",
    "RequestMetadata",
    "RequestTimeoutError",
    "RetryConfig",
    "RetryPolicy",
    "SerializationError",
    "Settings",
    "StreamDecoder",
    "StreamEvent",
    "TokenBucketRateLimiter",
    "create_client",
    "create_rate_limiter",
]
