"""Retry with exponential backoff."""
import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel, Field

from ..core.settings import Settings
from ..errors import RainyError

T = TypeVar("T")

JITTER_MIN = 0.75
JITTER_MAX = 1.25


class RetryConfig(BaseModel):
    """Retry configuration."""

    max_retries: int = Field(3, ge=0, description="Retries after the first attempt")
    base_delay: float = Field(1.0, ge=0, description="Delay before the first retry, seconds")
    max_delay: float = Field(30.0, ge=0, description="Upper bound for any delay, seconds")
    backoff_multiplier: float = Field(2.0, ge=1.0, description="Growth factor per attempt")
    jitter: bool = Field(True, description="Randomize delays by +/-25% after the first")
    enabled: bool = Field(True, description="When False the operation runs exactly once")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryConfig":
        """Build retry configuration from client settings."""
        return cls(
            max_retries=settings.MAX_RETRIES,
            base_delay=settings.RETRY_BASE_DELAY,
            max_delay=settings.RETRY_MAX_DELAY,
            backoff_multiplier=settings.RETRY_BACKOFF_MULTIPLIER,
            jitter=settings.RETRY_JITTER,
            enabled=settings.RETRY_ENABLED,
        )


class RetryPolicy:
    """Drives the retry loop around a single idempotent call."""

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        uniform: Optional[Callable[[float, float], float]] = None,
    ) -> None:
        """Initialize policy.

        Args:
            config: Retry configuration
            logger: Logger for absorbed failures
            sleep: Coroutine function used to wait between attempts
            uniform: Random source returning a float in [a, b]
        """
        self.config = config or RetryConfig()
        self.logger = logger or logging.getLogger(__name__)
        self._sleep = sleep or asyncio.sleep
        self._uniform = uniform or random.uniform

    def delay_for_attempt(self, attempt: int) -> float:
        """Delay in seconds to wait after failed attempt ``attempt`` (0-based)."""
        delay = self.config.base_delay * self.config.backoff_multiplier**attempt
        if self.config.jitter and attempt > 0:
            delay *= self._uniform(JITTER_MIN, JITTER_MAX)
        return min(delay, self.config.max_delay)

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` until it succeeds or the retry budget is spent.

        Args:
            operation: Coroutine function that raises :class:`RainyError`
                on classified failures

        Returns:
            The operation's result

        Raises:
            RainyError: The first non-retryable error, or the last error once
                ``max_retries`` retries have been made
        """
        if not self.config.enabled:
            return await operation()

        attempt = 0
        while True:
            try:
                return await operation()
            except RainyError as error:
                if not error.retryable or attempt >= self.config.max_retries:
                    raise

                delay = self.delay_for_attempt(attempt)
                self.logger.warning(
                    "Request failed, retrying",
                    extra={
                        "attempt": attempt + 1,
                        "max_attempts": self.config.max_retries + 1,
                        "delay": round(delay, 3),
                        "error_kind": error.kind.value,
                        "error_code": error.code,
                    },
                )
                await self._sleep(delay)
                attempt += 1
