"""Retry with exponential backoff."""
from .policy import RetryConfig, RetryPolicy

__all__ = ["RetryConfig", "RetryPolicy"]
