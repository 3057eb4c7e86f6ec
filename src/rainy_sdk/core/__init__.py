"""Core settings and logging."""
from .logger import LoggerService
from .settings import (
    DEFAULT_API_PREFIX,
    DEFAULT_BASE_URL,
    DEFAULT_USER_AGENT,
    SDK_VERSION,
    RateLimitStrategy,
    Settings,
)

__all__ = [
    "LoggerService",
    "Settings",
    "RateLimitStrategy",
    "SDK_VERSION",
    "DEFAULT_BASE_URL",
    "DEFAULT_API_PREFIX",
    "DEFAULT_USER_AGENT",
]
