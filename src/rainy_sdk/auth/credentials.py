"""API credentials and request headers."""
import re
from typing import Dict

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..core.settings import (
    DEFAULT_API_PREFIX,
    DEFAULT_BASE_URL,
    DEFAULT_USER_AGENT,
    Settings,
)
from ..errors import AuthenticationError, InvalidRequestError

API_KEY_PREFIX = "ra-"

# Printable ASCII plus horizontal tab
_ILLEGAL_HEADER_CHARS = re.compile(r"[^\t\x20-\x7e]")


class Credentials(BaseModel):
    """API key and connection settings of one client."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(description="API key, sent as a bearer token")
    base_url: str = Field(DEFAULT_BASE_URL, description="Root URL of the API")
    api_prefix: str = Field(
        DEFAULT_API_PREFIX, description="Path prefix all endpoints live under"
    )
    timeout: float = Field(30.0, gt=0, description="Per-attempt timeout in seconds")
    max_retries: int = Field(3, ge=0, description="Retries after the first attempt")
    retry_enabled: bool = Field(True, description="Whether failed calls are retried")
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header value")

    @classmethod
    def from_settings(cls, settings: Settings) -> "Credentials":
        """Build credentials from client settings."""
        return cls(
            api_key=settings.API_KEY,
            base_url=settings.BASE_URL,
            api_prefix=settings.API_PREFIX,
            timeout=settings.TIMEOUT,
            max_retries=settings.MAX_RETRIES,
            retry_enabled=settings.RETRY_ENABLED,
            user_agent=settings.USER_AGENT,
        )

    def validate_credentials(self) -> None:
        """Check the API key format and the base URL.

        Raises:
            AuthenticationError: If the key is empty or not in ``ra-...`` form
            InvalidRequestError: If the base URL is not an absolute http(s) URL
        """
        if not self.api_key:
            raise AuthenticationError(
                code="EMPTY_API_KEY", message="API key cannot be empty"
            )

        if not self.api_key.startswith(API_KEY_PREFIX) or len(self.api_key) == len(
            API_KEY_PREFIX
        ):
            raise AuthenticationError(
                code="INVALID_API_KEY_FORMAT",
                message=f"API key must start with '{API_KEY_PREFIX}'",
            )

        try:
            url = httpx.URL(self.base_url)
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidRequestError(
                code="INVALID_BASE_URL",
                message="Base URL is not a valid URL",
                details={"base_url": self.base_url, "error": str(e)},
            ) from e

        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidRequestError(
                code="INVALID_BASE_URL",
                message="Base URL must be an absolute http(s) URL",
                details={"base_url": self.base_url},
            )

    def build_headers(self) -> Dict[str, str]:
        """Build headers for API requests.

        Returns:
            Authorization, Content-Type and User-Agent headers

        Raises:
            InvalidRequestError: If a header value contains characters that
                are not allowed in HTTP headers
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }
        for name, value in headers.items():
            if _ILLEGAL_HEADER_CHARS.search(value):
                raise InvalidRequestError(
                    code="INVALID_HEADER_VALUE",
                    message=f"Invalid characters in {name} header value",
                    details={"header": name},
                )
        return headers

    def url_for(self, path: str) -> str:
        """Join the base URL, API prefix and an endpoint path."""
        parts = [self.base_url.rstrip("/")]
        prefix = self.api_prefix.strip("/")
        if prefix:
            parts.append(prefix)
        parts.append(path.lstrip("/"))
        return "/".join(parts)

    def __str__(self) -> str:
        return (
            f"Credentials(base_url={self.base_url}, timeout={self.timeout}s, "
            f"retries={self.max_retries})"
        )

    def __repr__(self) -> str:
        return self.__str__()
