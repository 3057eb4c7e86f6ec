import json

import httpx
import pytest

from conftest import chunk_payload, collect, error_body, sse
from rainy_sdk.errors import NetworkError, RateLimitError, SerializationError
from rainy_sdk.models import ChatCompletionChunk
from rainy_sdk.transport import StreamDecoder


async def chunks(*parts: bytes):
    for part in parts:
        yield part


def lines(body):
    return httpx.Response(200, content=body).aiter_lines()


def decode(*parts: bytes):
    return StreamDecoder().decode(lines(chunks(*parts)), ChatCompletionChunk)


@pytest.mark.asyncio
class TestStreamDecoder:
    async def test_single_event_then_done(self):
        events = await collect(decode(sse(chunk_payload("Hello"), "[DONE]")))

        assert len(events) == 1
        assert not events[0].is_error
        assert events[0].data.content == "Hello"

    async def test_done_stops_decoding(self):
        events = await collect(
            decode(sse(chunk_payload("a"), "[DONE]", chunk_payload("after")))
        )

        assert [event.data.content for event in events] == ["a"]

    async def test_events_split_across_chunks(self):
        raw = sse(chunk_payload("Hel", "c1"), chunk_payload("lo", "c2"), "[DONE]")
        parts = [raw[i:i + 7] for i in range(0, len(raw), 7)]

        events = await collect(decode(*parts))

        assert "".join(event.data.content for event in events) == "Hello"

    async def test_multibyte_character_split_across_chunks(self):
        raw = sse(chunk_payload("héllo"), "[DONE]")
        split = raw.index("é".encode()) + 1

        events = await collect(decode(raw[:split], raw[split:]))

        assert events[0].data.content == "héllo"

    async def test_crlf_line_endings(self):
        raw = sse(chunk_payload("crlf"), "[DONE]").replace(b"\n", b"\r\n")
        split = raw.index(b"\r\n") + 1

        events = await collect(decode(raw[:split], raw[split:]))

        assert [event.data.content for event in events] == ["crlf"]

    async def test_bare_cr_line_endings(self):
        raw = sse(chunk_payload("cr"), "[DONE]").replace(b"\n", b"\r")

        events = await collect(decode(raw))

        assert [event.data.content for event in events] == ["cr"]

    async def test_comments_and_other_fields_ignored(self):
        payload = json.dumps(chunk_payload("x"))
        raw = f": keep-alive\nevent: message\nid: 1\ndata: {payload}\n\n".encode()

        events = await collect(decode(raw))

        assert [event.data.content for event in events] == ["x"]

    async def test_multiline_data_joined(self):
        payload = json.dumps(chunk_payload("joined"), indent=2)
        raw = "".join(f"data: {line}\n" for line in payload.splitlines()) + "\n"

        events = await collect(decode(raw.encode()))

        assert events[0].data.content == "joined"

    async def test_pending_event_flushed_at_end_of_input(self):
        raw = f"data: {json.dumps(chunk_payload('tail'))}".encode()

        events = await collect(decode(raw))

        assert [event.data.content for event in events] == ["tail"]

    async def test_end_of_input_without_done(self):
        events = await collect(decode(sse(chunk_payload("a"), chunk_payload("b"))))

        assert [event.data.content for event in events] == ["a", "b"]

    async def test_malformed_payload_continues(self):
        events = await collect(
            decode(sse("{not json", chunk_payload("ok"), "[DONE]"))
        )

        assert len(events) == 2
        assert isinstance(events[0].error, SerializationError)
        assert events[1].data.content == "ok"

    async def test_in_band_error_event(self):
        events = await collect(
            decode(sse(error_body("RATE_LIMIT_EXCEEDED", "slow down"), "[DONE]"))
        )

        assert len(events) == 1
        assert isinstance(events[0].error, RateLimitError)
        with pytest.raises(RateLimitError):
            events[0].unwrap()

    async def test_transport_failure_ends_stream(self):
        async def broken():
            yield sse(chunk_payload("partial"))
            raise httpx.ReadError("connection reset")

        events = await collect(StreamDecoder().decode(lines(broken()), ChatCompletionChunk))

        assert len(events) == 2
        assert events[0].data.content == "partial"
        assert isinstance(events[1].error, NetworkError)
        assert events[1].error.code == "STREAM_INTERRUPTED"
        assert events[1].error.retryable is True

    async def test_empty_stream(self):
        assert await collect(decode()) == []
