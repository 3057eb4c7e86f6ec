"""Authenticated request dispatcher."""
import asyncio
import logging
import time
from typing import Any, AsyncGenerator, Dict, Optional, Tuple

import httpx
from pydantic import TypeAdapter, ValidationError

from ..auth import Credentials
from ..core.logger import LoggerService
from ..errors import ErrorClassifier, SerializationError
from ..limits import RateLimiter
from ..models.metadata import RequestMetadata
from ..retry import RetryConfig, RetryPolicy
from .stream import StreamDecoder, StreamEvent


class RequestDispatcher:
    """Sends authenticated requests through limiter, retry and classifier.

    Every endpoint call goes through :meth:`send`, :meth:`send_with_metadata`
    or :meth:`stream`. Failures surface as :class:`~rainy_sdk.errors.RainyError`
    subclasses only.
    """

    def __init__(
        self,
        credentials: Credentials,
        logger: Optional[LoggerService] = None,
        classifier: Optional[ErrorClassifier] = None,
        retry_policy: Optional[RetryPolicy] = None,
        rate_limiter: Optional[RateLimiter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        decoder: Optional[StreamDecoder] = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            credentials: API key and connection settings
            logger: Logger service
            classifier: Error classifier
            retry_policy: Retry policy; built from the credentials if omitted
            rate_limiter: Optional client-side rate limiter
            http_client: Optional HTTP client; the dispatcher owns and closes
                the client only when it created it
            decoder: Stream decoder
        """
        self.credentials = credentials
        self.logger = (
            logger.get_logger(__name__) if logger else logging.getLogger(__name__)
        )
        self.classifier = classifier or ErrorClassifier()
        self.retry_policy = retry_policy or RetryPolicy(
            RetryConfig(
                max_retries=credentials.max_retries,
                enabled=credentials.retry_enabled,
            ),
            logger=self.logger,
        )
        self.rate_limiter = rate_limiter
        self.decoder = decoder or StreamDecoder(self.classifier, logger=self.logger)
        self._owns_client = http_client is None
        self.client = http_client or self._create_client()

    def _create_client(self) -> httpx.AsyncClient:
        """Create and configure HTTP client.

        Returns:
            Configured HTTP client
        """
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.credentials.timeout),
            verify=True,
        )

    async def send(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        response_model: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and decode the response body.

        Args:
            method: HTTP method
            path: Endpoint path below the API prefix
            body: JSON-serializable request body
            response_model: Type to validate the body into; the decoded JSON
                is returned as is when omitted
            params: Query parameters

        Returns:
            Decoded response body (None for an empty body)

        Raises:
            RainyError: If the request fails after retries, or the body does
                not match ``response_model``
        """
        data, _ = await self._execute(method, path, body, response_model, params)
        return data

    async def send_with_metadata(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        response_model: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Any, RequestMetadata]:
        """Like :meth:`send`, also returning metadata from response headers.

        Returns:
            Tuple of decoded body and request metadata
        """
        return await self._execute(method, path, body, response_model, params)

    async def _execute(
        self,
        method: str,
        path: str,
        body: Optional[Any],
        response_model: Optional[Any],
        params: Optional[Dict[str, Any]],
    ) -> Tuple[Any, RequestMetadata]:
        if self.rate_limiter is not None:
            await self.rate_limiter.acquire()

        url = self.credentials.url_for(path)

        async def attempt() -> Tuple[httpx.Response, int]:
            return await self._attempt(method, url, body, params)

        response, elapsed_ms = await self.retry_policy.run(attempt)
        data = self._decode_body(response, response_model, method, path)
        metadata = RequestMetadata.from_headers(response.headers, elapsed_ms)
        return data, metadata

    async def _attempt(
        self,
        method: str,
        url: str,
        body: Optional[Any],
        params: Optional[Dict[str, Any]],
    ) -> Tuple[httpx.Response, int]:
        """Issue one HTTP call, bounded as a whole by the credentials timeout.

        Returns:
            Successful response and its round-trip time in milliseconds

        Raises:
            RainyError: Classified transport or HTTP failure
        """
        headers = self.credentials.build_headers()

        self.logger.debug(
            "API REQUEST",
            extra={"method": method, "url": url, "params": params},
        )
        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self.client.request(
                    method=method,
                    url=url,
                    json=body,
                    params=params,
                    headers=headers,
                ),
                timeout=self.credentials.timeout,
            )
        except (httpx.RequestError, asyncio.TimeoutError) as e:
            error = self.classifier.classify_transport(e)
            self.logger.error(
                "Transport error",
                extra={
                    "method": method,
                    "url": url,
                    "error": str(e),
                    "error_kind": error.kind.value,
                    "retryable": error.retryable,
                },
            )
            raise error from e
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        self.logger.debug(
            "API RESPONSE",
            extra={
                "method": method,
                "url": url,
                "status_code": response.status_code,
                "elapsed_ms": elapsed_ms,
            },
        )

        if not response.is_success:
            error = self.classifier.classify_response(
                response.status_code, response.content, response.headers
            )
            self.logger.error(
                "API ERROR",
                extra={
                    "method": method,
                    "url": url,
                    "status_code": response.status_code,
                    "error_code": error.code,
                    "error_kind": error.kind.value,
                    "retryable": error.retryable,
                },
            )
            raise error

        return response, elapsed_ms

    def _decode_body(
        self,
        response: httpx.Response,
        response_model: Optional[Any],
        method: str,
        path: str,
    ) -> Any:
        """Decode a successful response body.

        Raises:
            SerializationError: If the body is not JSON or does not match
                ``response_model``
        """
        try:
            data = response.json() if response.content else None
        except ValueError as e:
            raise SerializationError(
                message=f"Response body is not valid JSON: {e}",
                details={"method": method, "path": path, "text": response.text[:500]},
            ) from e

        if response_model is None:
            return data

        try:
            return TypeAdapter(response_model).validate_python(data)
        except ValidationError as e:
            self.logger.warning(
                "Unexpected response shape",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise SerializationError(
                message=f"Response body does not match the expected shape: {e}",
                details={"method": method, "path": path},
            ) from e

    async def stream(
        self,
        method: str,
        path: str,
        body: Optional[Any],
        event_model: Any,
    ) -> AsyncGenerator[StreamEvent[Any], None]:
        """Send a streaming request and yield decoded events.

        Opening the stream goes through the rate limiter and the retry
        policy. The response is closed when the iteration ends, is
        abandoned or is cancelled.

        Args:
            method: HTTP method
            path: Endpoint path below the API prefix
            body: JSON-serializable request body
            event_model: Type each event payload is validated into

        Yields:
            Stream events

        Raises:
            RainyError: If the stream cannot be opened
        """
        if self.rate_limiter is not None:
            await self.rate_limiter.acquire()

        url = self.credentials.url_for(path)

        async def attempt() -> httpx.Response:
            return await self._open_stream(method, url, body)

        response = await self.retry_policy.run(attempt)
        try:
            self.logger.debug(
                "Starting stream processing",
                extra={"method": method, "url": url},
            )
            async for event in self.decoder.decode(
                response.aiter_lines(), event_model, response.status_code
            ):
                yield event
        finally:
            await response.aclose()

    async def _open_stream(
        self, method: str, url: str, body: Optional[Any]
    ) -> httpx.Response:
        """Open a streaming response and check its status.

        Raises:
            RainyError: Classified transport or HTTP failure
        """
        headers = self.credentials.build_headers()
        headers["Accept"] = "text/event-stream"
        request = self.client.build_request(method, url, json=body, headers=headers)
        try:
            response = await asyncio.wait_for(
                self.client.send(request, stream=True),
                timeout=self.credentials.timeout,
            )
        except (httpx.RequestError, asyncio.TimeoutError) as e:
            error = self.classifier.classify_transport(e)
            self.logger.error(
                "Transport error opening stream",
                extra={"url": url, "error": str(e), "error_kind": error.kind.value},
            )
            raise error from e

        if response.is_success:
            return response

        try:
            error_body = await response.aread()
        except httpx.RequestError:
            error_body = b""
        finally:
            await response.aclose()

        error = self.classifier.classify_response(
            response.status_code, error_body, response.headers
        )
        self.logger.error(
            "Error response opening stream",
            extra={
                "url": url,
                "status_code": response.status_code,
                "error_code": error.code,
                "error_kind": error.kind.value,
            },
        )
        raise error

    async def aclose(self) -> None:
        """Close the HTTP client if this dispatcher created it."""
        if self._owns_client:
            await self.client.aclose()
