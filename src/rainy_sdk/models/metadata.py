"""Response metadata."""
from typing import Callable, Mapping, Optional, TypeVar

from pydantic import BaseModel, Field

N = TypeVar("N", int, float)


def _parse_number(value: Optional[str], cast: Callable[[str], N]) -> Optional[N]:
    if value is None:
        return None
    try:
        return cast(value.strip())
    except ValueError:
        return None


class RequestMetadata(BaseModel):
    """Metadata taken from response headers of one API call."""

    response_time_ms: Optional[int] = Field(None, description="Measured round-trip time")
    provider: Optional[str] = Field(None, description="Provider that served the request")
    tokens_used: Optional[int] = Field(None, description="Tokens consumed")
    credits_used: Optional[float] = Field(None, description="Credits charged")
    credits_remaining: Optional[float] = Field(None, description="Balance afterwards")
    request_id: Optional[str] = Field(None, description="Server-assigned request id")

    @classmethod
    def from_headers(
        cls, headers: Mapping[str, str], response_time_ms: Optional[int] = None
    ) -> "RequestMetadata":
        """Build metadata from response headers.

        Args:
            headers: Case-insensitive header mapping (e.g. ``httpx.Headers``)
            response_time_ms: Measured round-trip duration

        Returns:
            Metadata; headers that are absent or malformed map to ``None``
        """
        return cls(
            response_time_ms=response_time_ms,
            provider=headers.get("x-provider"),
            tokens_used=_parse_number(headers.get("x-tokens-used"), int),
            credits_used=_parse_number(headers.get("x-credits-used"), float),
            credits_remaining=_parse_number(headers.get("x-credits-remaining"), float),
            request_id=headers.get("x-request-id"),
        )
