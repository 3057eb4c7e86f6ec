import json
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import httpx
import pytest

from rainy_sdk.auth import Credentials
from rainy_sdk.core import LoggerService, Settings
from rainy_sdk.retry import RetryConfig, RetryPolicy
from rainy_sdk.transport import RequestDispatcher

API_KEY = "ra-test-key"
BASE_URL = "https://api.example.test"


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, API_KEY=API_KEY, BASE_URL=BASE_URL)


@pytest.fixture
def logger_service(settings):
    return LoggerService(settings)


@pytest.fixture
def credentials():
    return Credentials(api_key=API_KEY, base_url=BASE_URL)


@pytest.fixture
def fake_clock():
    """Manually advanced monotonic clock."""

    class FakeClock:
        def __init__(self) -> None:
            self.now = 1000.0

        def __call__(self) -> float:
            return self.now

        def advance(self, seconds: float) -> None:
            self.now += seconds

    return FakeClock()


@pytest.fixture
def fake_sleep(fake_clock):
    """AsyncMock sleep that advances the fake clock instead of waiting."""

    async def advance(seconds: float) -> None:
        fake_clock.advance(seconds)

    return AsyncMock(side_effect=advance)


@pytest.fixture
def mock_sleep():
    """Sleep that returns immediately."""
    return AsyncMock()


@pytest.fixture
def recorded_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_transport(recorded_requests):
    """Build an httpx.MockTransport from a list of responses or a handler.

    Responses are returned in order; an exception instance in the list is
    raised instead.
    """

    def factory(responses: Any) -> httpx.MockTransport:
        if callable(responses):
            handler = responses
        else:
            queue = list(responses)

            def handler(request: httpx.Request) -> httpx.Response:
                item = queue.pop(0)
                if isinstance(item, Exception):
                    raise item
                return item

        def recording_handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return httpx.MockTransport(recording_handler)

    return factory


@pytest.fixture
def make_dispatcher(credentials, logger_service, make_transport, mock_sleep):
    """Dispatcher over a mock transport with instant backoff sleeps."""

    def factory(
        responses: Any,
        max_retries: int = 2,
        enabled: bool = True,
        rate_limiter: Optional[Any] = None,
    ) -> RequestDispatcher:
        http_client = httpx.AsyncClient(transport=make_transport(responses))
        policy = RetryPolicy(
            RetryConfig(max_retries=max_retries, enabled=enabled), sleep=mock_sleep
        )
        return RequestDispatcher(
            credentials,
            logger=logger_service,
            retry_policy=policy,
            rate_limiter=rate_limiter,
            http_client=http_client,
        )

    return factory


def error_body(code: str, message: str = "error", **fields: Any) -> Dict[str, Any]:
    return {"error": {"code": code, "message": message, **fields}}


def sse(*events: Any) -> bytes:
    """Encode events as an SSE body; dicts are JSON encoded."""
    lines = []
    for event in events:
        data = json.dumps(event, ensure_ascii=False) if isinstance(event, dict) else event
        lines.append(f"data: {data}\n\n")
    return "".join(lines).encode()


def chunk_payload(content: str, chunk_id: str = "chunk-1") -> Dict[str, Any]:
    return {
        "id": chunk_id,
        "object": "chat.completion.chunk",
        "created": 1700000000,
        "model": "gpt-4o",
        "choices": [{"index": 0, "delta": {"content": content}, "finish_reason": None}],
    }


def completion_payload(content: str = "Hello!") -> Dict[str, Any]:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 5, "completion_tokens": 2, "total_tokens": 7},
    }


async def collect(events: Any) -> List[Any]:
    return [event async for event in events]
