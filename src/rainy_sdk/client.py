"""Rainy API client."""
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

import httpx
from pydantic import BaseModel

from .auth import Credentials
from .core.logger import LoggerService
from .core.settings import Settings
from .limits import RateLimiter, create_rate_limiter
from .models import (
    ApiKey,
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    CreditInfo,
    CreditInfoEnvelope,
    HealthStatus,
    RequestMetadata,
    UsageStats,
    User,
)
from .retry import RetryConfig, RetryPolicy
from .transport import RequestDispatcher, StreamEvent


class ApiKeyList(BaseModel):
    """Wire wrapper of the key listing."""

    api_keys: List[ApiKey]


class RainyClient:
    """Async client for the Rainy API.

    Use as an async context manager, or call :meth:`close` when done::

        async with RainyClient.with_api_key("ra-...") as client:
            reply = await client.simple_chat("gpt-4o", "Hello!")
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        api_key: Optional[str] = None,
        logger: Optional[LoggerService] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rate_limiter: Optional[RateLimiter] = None,
        dispatcher: Optional[RequestDispatcher] = None,
    ) -> None:
        """Initialize client.

        Args:
            settings: Client settings; read from the environment if omitted
            api_key: API key overriding ``settings.API_KEY``
            logger: Logger service
            http_client: HTTP client to use instead of an owned one
            rate_limiter: Rate limiter overriding ``REQUESTS_PER_MINUTE``
            dispatcher: Fully configured dispatcher; the other transport
                arguments are ignored when given

        Raises:
            AuthenticationError: If the API key is missing or malformed
            InvalidRequestError: If the base URL is invalid
        """
        self.settings = settings or Settings()
        if api_key is not None:
            self.settings = self.settings.model_copy(update={"API_KEY": api_key})

        self.logger_service = logger or LoggerService(self.settings)
        self.logger = self.logger_service.get_logger(__name__)

        if dispatcher is None:
            credentials = Credentials.from_settings(self.settings)
            credentials.validate_credentials()
            if rate_limiter is None and self.settings.REQUESTS_PER_MINUTE:
                rate_limiter = create_rate_limiter(
                    self.settings.RATE_LIMIT_STRATEGY,
                    self.settings.REQUESTS_PER_MINUTE,
                )
            dispatcher = RequestDispatcher(
                credentials,
                logger=self.logger_service,
                retry_policy=RetryPolicy(
                    RetryConfig.from_settings(self.settings),
                    logger=self.logger_service.get_logger("rainy_sdk.retry"),
                ),
                rate_limiter=rate_limiter,
                http_client=http_client,
            )
        else:
            dispatcher.credentials.validate_credentials()

        self.dispatcher = dispatcher
        self.logger.debug(
            "Client initialized",
            extra={
                "base_url": dispatcher.credentials.base_url,
                "rate_limited": dispatcher.rate_limiter is not None,
            },
        )

    @classmethod
    def with_api_key(cls, api_key: str, **kwargs: Any) -> "RainyClient":
        """Create a client with default settings and the given key."""
        return cls(Settings(API_KEY=api_key), **kwargs)

    async def __aenter__(self) -> "RainyClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        await self.dispatcher.aclose()

    # Chat

    async def create_chat_completion(
        self, request: ChatCompletionRequest
    ) -> ChatCompletionResponse:
        """Create a chat completion.

        Args:
            request: Completion request

        Returns:
            Completion response
        """
        return await self.dispatcher.send(
            "POST",
            "/chat/completions",
            body=request.to_payload(),
            response_model=ChatCompletionResponse,
        )

    async def create_chat_completion_with_metadata(
        self, request: ChatCompletionRequest
    ) -> Tuple[ChatCompletionResponse, RequestMetadata]:
        """Create a chat completion and report provider and credit metadata."""
        return await self.dispatcher.send_with_metadata(
            "POST",
            "/chat/completions",
            body=request.to_payload(),
            response_model=ChatCompletionResponse,
        )

    async def stream_chat_completion(
        self, request: ChatCompletionRequest
    ) -> AsyncGenerator[StreamEvent[ChatCompletionChunk], None]:
        """Stream a chat completion.

        The request is sent with ``stream`` set regardless of its value.

        Args:
            request: Completion request

        Yields:
            One event per chunk; decoding errors arrive as error events
        """
        payload = request.model_copy(update={"stream": True}).to_payload()
        async for event in self.dispatcher.stream(
            "POST", "/chat/completions", payload, ChatCompletionChunk
        ):
            yield event

    async def simple_chat(self, model: str, prompt: str) -> str:
        """Send a single user message and return the reply text."""
        response = await self.create_chat_completion(
            ChatCompletionRequest(model=model, messages=[ChatMessage.user(prompt)])
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content

    # Account

    async def get_user_account(self) -> User:
        return await self.dispatcher.send(
            "GET", "/users/account", response_model=User
        )

    async def create_api_key(
        self, description: str, expires_in_days: Optional[int] = None
    ) -> ApiKey:
        """Create an API key.

        Args:
            description: What the key is used for
            expires_in_days: Days until the key expires; never if omitted

        Returns:
            The new key, the only time its full value is returned
        """
        body: Dict[str, Any] = {"description": description}
        if expires_in_days is not None:
            body["expiresInDays"] = expires_in_days
        return await self.dispatcher.send("POST", "/keys", body=body, response_model=ApiKey)

    async def list_api_keys(self) -> List[ApiKey]:
        keys = await self.dispatcher.send("GET", "/keys", response_model=ApiKeyList)
        return keys.api_keys

    async def update_api_key(self, key_id: str, updates: Dict[str, Any]) -> ApiKey:
        """Update fields of an API key, e.g. ``{"description": "..."}``."""
        return await self.dispatcher.send(
            "PATCH", f"/keys/{key_id}", body=updates, response_model=ApiKey
        )

    async def delete_api_key(self, key_id: str) -> None:
        await self.dispatcher.send("DELETE", f"/keys/{key_id}")

    # Usage

    async def get_credit_info(self, days: Optional[int] = None) -> CreditInfo:
        """Get the credit balance and cost estimate over ``days`` days."""
        envelope = await self.dispatcher.send(
            "GET",
            "/usage/credits",
            response_model=CreditInfoEnvelope,
            params=self._days_params(days),
        )
        return envelope.credits

    async def get_usage_stats(self, days: Optional[int] = None) -> UsageStats:
        """Get usage statistics over ``days`` days."""
        return await self.dispatcher.send(
            "GET",
            "/usage/stats",
            response_model=UsageStats,
            params=self._days_params(days),
        )

    @staticmethod
    def _days_params(days: Optional[int]) -> Optional[Dict[str, Any]]:
        return {"days": days} if days is not None else None

    # Health

    async def health_check(self) -> HealthStatus:
        return await self.dispatcher.send("GET", "/health", response_model=HealthStatus)

    async def detailed_health_check(self) -> HealthStatus:
        """Health check including per-service status."""
        return await self.dispatcher.send(
            "GET",
            "/health",
            response_model=HealthStatus,
            params={"detailed": "true"},
        )
