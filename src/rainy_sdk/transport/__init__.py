"""HTTP transport: request dispatch and stream decoding."""
from .dispatcher import RequestDispatcher
from .stream import DONE_SENTINEL, StreamDecoder, StreamEvent

__all__ = ["DONE_SENTINEL", "RequestDispatcher", "StreamDecoder", "StreamEvent"]
