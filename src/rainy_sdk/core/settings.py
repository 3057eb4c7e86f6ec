"""Client settings."""
import json
from enum import Enum
from typing import Annotated, List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

SDK_VERSION = "0.4.0"
DEFAULT_BASE_URL = "https://api.enosislabs.com"
DEFAULT_API_PREFIX = "/api/v1"
DEFAULT_USER_AGENT = f"rainy-sdk-python/{SDK_VERSION}"


class RateLimitStrategy(str, Enum):
    """Client-side rate limiter implementations."""

    FIXED_WINDOW = "fixed_window"
    TOKEN_BUCKET = "token_bucket"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="RAINY_",
        env_file=".env",
        env_file_encoding="utf-8",
    )
    """Client settings."""

    # Credentials
    API_KEY: str = ""

    # Connection
    BASE_URL: str = DEFAULT_BASE_URL
    API_PREFIX: str = DEFAULT_API_PREFIX
    TIMEOUT: float = 30.0  # seconds
    USER_AGENT: str = DEFAULT_USER_AGENT

    # Retry
    MAX_RETRIES: int = 3
    RETRY_ENABLED: bool = True
    RETRY_BASE_DELAY: float = 1.0  # seconds
    RETRY_MAX_DELAY: float = 30.0  # seconds
    RETRY_BACKOFF_MULTIPLIER: float = 2.0
    RETRY_JITTER: bool = True

    # Client-side rate limiting, disabled when unset
    REQUESTS_PER_MINUTE: Optional[int] = None
    RATE_LIMIT_STRATEGY: RateLimitStrategy = RateLimitStrategy.FIXED_WINDOW

    @field_validator("MAX_RETRIES")
    @classmethod
    def check_max_retries(cls, v: int) -> int:
        """Validate retry budget."""
        if v < 0:
            raise ValueError("MAX_RETRIES must be >= 0")
        return v

    @field_validator("TIMEOUT")
    @classmethod
    def check_timeout(cls, v: float) -> float:
        """Validate request timeout."""
        if v <= 0:
            raise ValueError("TIMEOUT must be positive")
        return v

    @field_validator("REQUESTS_PER_MINUTE", mode="before")
    @classmethod
    def parse_requests_per_minute(
        cls, v: Union[str, int, None]
    ) -> Optional[int]:
        """Treat empty values as "no rate limiting"."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        value = int(v)
        if value <= 0:
            raise ValueError("REQUESTS_PER_MINUTE must be positive")
        return value

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_FORMAT: str = "json"  # Available formats: json, text, structured
    LOG_HANDLER_ENABLED: bool = False  # Attach a stderr handler to SDK loggers
    LOG_EXTRA_FIELDS: Annotated[List[str], NoDecode] = []  # Additional fields for logs

    @field_validator("LOG_EXTRA_FIELDS", mode="before")
    @classmethod
    def assemble_log_extra_fields(cls, v: Union[str, List[str]]) -> List[str]:
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            if v.startswith("["):
                return [str(item) for item in json.loads(v)]
            return [i.strip() for i in v.split(",") if i.strip()]
        return v
