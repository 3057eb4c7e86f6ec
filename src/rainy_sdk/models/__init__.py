"""API models."""
from .account import ApiKey, User
from .api_error import ApiErrorDetails, ApiErrorResponse
from .chat import (
    ChatChoice,
    ChatCompletionChunk,
    ChatCompletionChunkChoice,
    ChatCompletionDelta,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    MessageRole,
    ToolCall,
    ToolCallFunction,
    Usage,
)
from .health import HealthStatus, ServiceStatus
from .metadata import RequestMetadata
from .usage import (
    CreditInfo,
    CreditInfoEnvelope,
    CreditTransaction,
    DailyUsage,
    TransactionType,
    UsageStats,
)

__all__ = [
    "ApiErrorDetails",
    "ApiErrorResponse",
    "ApiKey",
    "ChatChoice",
    "ChatCompletionChunk",
    "ChatCompletionChunkChoice",
    "ChatCompletionDelta",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "CreditInfo",
    "CreditInfoEnvelope",
    "CreditTransaction",
    "DailyUsage",
    "HealthStatus",
    "MessageRole",
    "RequestMetadata",
    "ServiceStatus",
    "ToolCall",
    "ToolCallFunction",
    "TransactionType",
    "Usage",
    "User",
]
