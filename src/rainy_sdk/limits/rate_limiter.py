"""Client-side rate limiting."""
import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Union

from ..core.settings import RateLimitStrategy

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]

WINDOW_SECONDS = 60.0


class RateLimiter(ABC):
    """Gate for outbound calls of one client instance.

    Each acquisition is a single critical section guarded by an
    ``asyncio.Lock``; a caller that must wait holds the lock while it sleeps,
    so concurrent callers are admitted strictly one at a time.
    """

    def __init__(
        self,
        requests_per_minute: int,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
    ) -> None:
        """Initialize limiter.

        Args:
            requests_per_minute: Admitted calls per minute
            clock: Monotonic clock, seconds
            sleep: Coroutine function used to wait
        """
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        self.requests_per_minute = requests_per_minute
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        # Created on first use so it belongs to the loop that runs the calls
        self._lock: Optional[asyncio.Lock] = None

        # Statistics
        self.total_requests: int = 0
        self.total_wait_time: float = 0.0

    async def acquire(self) -> None:
        """Wait until a call may be made. Never fails."""
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            wait_time = self._admit(self._clock())
            if wait_time > 0:
                logger.debug(
                    "Rate limit reached, waiting",
                    extra={
                        "wait_time": round(wait_time, 3),
                        "requests_per_minute": self.requests_per_minute,
                    },
                )
                self.total_wait_time += wait_time
                await self._sleep(wait_time)
                self._after_wait(self._clock())
            self.total_requests += 1

    @abstractmethod
    def _admit(self, now: float) -> float:
        """Update state for a new call and return how long it must wait.

        Returns 0 when the call is admitted immediately, in which case the
        call has already been accounted for.
        """
        raise NotImplementedError

    @abstractmethod
    def _after_wait(self, now: float) -> None:
        """Account for a call that has just finished waiting."""
        raise NotImplementedError


class FixedWindowRateLimiter(RateLimiter):
    """Counts calls per fixed window of ``window`` seconds."""

    def __init__(
        self,
        requests_per_minute: int,
        window: float = WINDOW_SECONDS,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
    ) -> None:
        super().__init__(requests_per_minute, clock=clock, sleep=sleep)
        self.window = window
        self.window_start = self._clock()
        self.count = 0

    def _admit(self, now: float) -> float:
        elapsed = now - self.window_start
        if elapsed > self.window:
            self.window_start = now
            self.count = 0
            elapsed = 0.0

        if self.count >= self.requests_per_minute:
            remaining = self.window - elapsed
            if remaining > 0:
                return remaining
            # A full window that ends exactly now: the call opens the next one
            self.window_start = now
            self.count = 0

        self.count += 1
        return 0.0

    def _after_wait(self, now: float) -> None:
        # The wait ran to the window boundary: the call opens a new window
        self.window_start = now
        self.count = 1


class TokenBucketRateLimiter(RateLimiter):
    """Continuously refilled token bucket.

    Starts full with ``capacity`` tokens (default ``requests_per_minute``)
    and refills at ``requests_per_minute / 60`` tokens per second.
    """

    def __init__(
        self,
        requests_per_minute: int,
        capacity: Optional[float] = None,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
    ) -> None:
        super().__init__(requests_per_minute, clock=clock, sleep=sleep)
        self.capacity = float(capacity if capacity is not None else requests_per_minute)
        self.refill_rate = requests_per_minute / WINDOW_SECONDS
        self.tokens = self.capacity
        self.last_refill = self._clock()

    def _refill(self, now: float) -> None:
        elapsed = max(now - self.last_refill, 0.0)
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def _admit(self, now: float) -> float:
        self._refill(now)
        if self.tokens >= 1.0:
            self.tokens -= 1.0
            return 0.0
        return (1.0 - self.tokens) / self.refill_rate

    def _after_wait(self, now: float) -> None:
        self._refill(now)
        # The wait was sized to produce exactly one token
        self.tokens = max(self.tokens - 1.0, 0.0)


def create_rate_limiter(
    strategy: Union[RateLimitStrategy, str],
    requests_per_minute: int,
    clock: Optional[Clock] = None,
    sleep: Optional[Sleep] = None,
) -> RateLimiter:
    """Create a rate limiter for the given strategy.

    Args:
        strategy: ``fixed_window`` or ``token_bucket``
        requests_per_minute: Admitted calls per minute
        clock: Optional clock override
        sleep: Optional sleep override

    Returns:
        Rate limiter instance

    Raises:
        ValueError: If the strategy is unknown
    """
    strategy = RateLimitStrategy(strategy)
    if strategy == RateLimitStrategy.TOKEN_BUCKET:
        return TokenBucketRateLimiter(requests_per_minute, clock=clock, sleep=sleep)
    return FixedWindowRateLimiter(requests_per_minute, clock=clock, sleep=sleep)
