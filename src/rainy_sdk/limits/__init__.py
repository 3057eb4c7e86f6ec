"""Client-side rate limiting."""
from .rate_limiter import (
    FixedWindowRateLimiter,
    RateLimiter,
    TokenBucketRateLimiter,
    create_rate_limiter,
)

__all__ = [
    "FixedWindowRateLimiter",
    "RateLimiter",
    "TokenBucketRateLimiter",
    "create_rate_limiter",
]
