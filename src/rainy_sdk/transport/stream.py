"""Server-Sent-Events decoding."""
import logging
from dataclasses import dataclass
from typing import Any, AsyncGenerator, AsyncIterable, Generic, List, Optional, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from ..errors import ErrorClassifier, NetworkError, RainyError, SerializationError

T = TypeVar("T")

DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class StreamEvent(Generic[T]):
    """One decoded stream item: a payload or an error."""

    data: Optional[T] = None
    error: Optional[RainyError] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def unwrap(self) -> T:
        """Return the payload, raising the carried error instead if there is one."""
        if self.error is not None:
            raise self.error
        return self.data  # type: ignore[return-value]


class StreamDecoder:
    """Decodes SSE lines into typed events.

    Payloads that fail validation and in-band error documents are yielded
    as error events and decoding continues. ``data: [DONE]`` ends the
    sequence. A transport failure while reading yields one NetworkError
    event and ends the sequence.
    """

    def __init__(
        self,
        classifier: Optional[ErrorClassifier] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize decoder.

        Args:
            classifier: Classifier for in-band error payloads
            logger: Logger instance
        """
        self.classifier = classifier or ErrorClassifier()
        self.logger = logger or logging.getLogger(__name__)

    async def decode(
        self,
        lines: AsyncIterable[str],
        event_model: Any,
        status_code: int = 200,
    ) -> AsyncGenerator[StreamEvent[Any], None]:
        """Decode SSE lines into events.

        Args:
            lines: Body lines without terminators, as from
                ``httpx.Response.aiter_lines()``
            event_model: Type each JSON payload is validated into
            status_code: Status of the response the lines belong to

        Yields:
            StreamEvent per SSE event, in order
        """
        adapter: TypeAdapter[Any] = TypeAdapter(event_model)
        data_lines: List[str] = []

        try:
            async for line in lines:
                if line:
                    self._collect_field(line, data_lines)
                    continue
                if not data_lines:
                    continue
                payload = "\n".join(data_lines)
                data_lines = []
                if payload.strip() == DONE_SENTINEL:
                    self.logger.debug("Received [DONE]")
                    return
                yield self._decode_payload(payload, adapter, status_code)
        except httpx.TransportError as e:
            self.logger.error(
                "Stream interrupted",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            yield StreamEvent(
                error=NetworkError(
                    message=f"Stream interrupted: {e}",
                    retryable=True,
                    code="STREAM_INTERRUPTED",
                    details={"error_type": type(e).__name__},
                )
            )
            return

        # End of input without a trailing blank line
        if data_lines:
            payload = "\n".join(data_lines)
            if payload.strip() != DONE_SENTINEL:
                yield self._decode_payload(payload, adapter, status_code)

    @staticmethod
    def _collect_field(line: str, data_lines: List[str]) -> None:
        """Record a non-blank SSE line; only ``data`` fields carry payload."""
        if line.startswith(":"):
            return
        field, _, value = line.partition(":")
        if field != "data":
            return
        if value.startswith(" "):
            value = value[1:]
        data_lines.append(value)

    def _decode_payload(
        self, payload: str, adapter: "TypeAdapter[Any]", status_code: int
    ) -> StreamEvent[Any]:
        """Turn one event payload into a stream event."""
        error = self.classifier.classify_stream_payload(payload, status_code)
        if error is not None:
            self.logger.error(
                "Error in stream data",
                extra={"error_code": error.code, "error_kind": error.kind.value},
            )
            return StreamEvent(error=error)

        try:
            return StreamEvent(data=adapter.validate_json(payload))
        except ValidationError as e:
            self.logger.warning(
                "Failed to decode stream event",
                extra={"error": str(e), "payload": payload[:500]},
            )
            return StreamEvent(
                error=SerializationError(
                    message=f"Failed to decode stream event: {e}",
                    details={"payload": payload[:500]},
                )
            )
