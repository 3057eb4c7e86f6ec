import asyncio
import json

import httpx
import pytest

from conftest import error_body
from rainy_sdk.errors import (
    ApiError,
    AuthenticationError,
    ErrorClassifier,
    ErrorKind,
    InsufficientCreditsError,
    InvalidRequestError,
    NetworkError,
    ProviderError,
    RateLimitError,
    RequestTimeoutError,
)


@pytest.fixture
def classifier():
    return ErrorClassifier()


def body(document) -> bytes:
    return json.dumps(document).encode()


class TestClassifyResponse:
    def test_429_without_body(self, classifier):
        error = classifier.classify_response(429, b"")

        assert isinstance(error, RateLimitError)
        assert error.code == "RATE_LIMIT_EXCEEDED"
        assert error.retry_after is None
        assert error.retryable is True

    def test_rate_limit_document(self, classifier):
        error = classifier.classify_response(
            429,
            body(error_body("RATE_LIMIT_EXCEEDED", retryable=True, details={"retry_after": 30, "current_usage": "61/60"})),
        )

        assert isinstance(error, RateLimitError)
        assert error.retry_after == 30
        assert error.current_usage == "61/60"

    def test_provider_error_without_provider_name(self, classifier):
        error = classifier.classify_response(
            500, body(error_body("PROVIDER_ERROR", "upstream failed", retryable=True))
        )

        assert isinstance(error, ProviderError)
        assert error.provider == "unknown"
        assert error.retryable is True

    def test_provider_error_names_provider(self, classifier):
        error = classifier.classify_response(
            502,
            body(error_body("PROVIDER_UNAVAILABLE", retryable=False, details={"provider": "openai"})),
        )

        assert isinstance(error, ProviderError)
        assert error.provider == "openai"
        assert error.retryable is False

    @pytest.mark.parametrize("code", ["INVALID_API_KEY", "EXPIRED_API_KEY"])
    def test_authentication_codes(self, classifier, code):
        error = classifier.classify_response(401, body(error_body(code)))

        assert isinstance(error, AuthenticationError)
        assert error.code == code
        assert error.retryable is False

    @pytest.mark.parametrize("code", ["INSUFFICIENT_CREDITS", "INSUFFICIENT_BALANCE", "QUOTA_EXCEEDED"])
    def test_insufficient_credits_codes(self, classifier, code):
        error = classifier.classify_response(
            402,
            body(
                error_body(
                    code,
                    details={"current_credits": 1.5, "estimated_cost": 4, "reset_date": "2026-11-01"},
                )
            ),
        )

        assert isinstance(error, InsufficientCreditsError)
        assert error.current_credits == 1.5
        assert error.required_credits == 4.0
        assert error.reset_date == "2026-11-01"
        assert error.retryable is False

    def test_insufficient_credits_defaults(self, classifier):
        error = classifier.classify_response(402, body(error_body("INSUFFICIENT_CREDITS")))

        assert error.current_credits == 0.0
        assert error.required_credits == 0.0
        assert error.reset_date is None

    @pytest.mark.parametrize("code", ["INVALID_REQUEST", "MISSING_REQUIRED_FIELD", "INVALID_MODEL"])
    def test_invalid_request_codes(self, classifier, code):
        error = classifier.classify_response(400, body(error_body(code)))

        assert isinstance(error, InvalidRequestError)
        assert error.retryable is False

    def test_unknown_code_becomes_api_error(self, classifier):
        error = classifier.classify_response(
            503, body(error_body("MAINTENANCE", "down for maintenance", request_id="req-1"))
        )

        assert isinstance(error, ApiError)
        assert error.code == "MAINTENANCE"
        assert error.status_code == 503
        assert error.retryable is True
        assert error.request_id == "req-1"

    def test_server_retryable_hint_wins(self, classifier):
        error = classifier.classify_response(503, body(error_body("MAINTENANCE", retryable=False)))

        assert error.retryable is False

    @pytest.mark.parametrize("details", ["upstream timed out", ["a", "b"], 42])
    def test_non_object_details_keep_error_code(self, classifier, details):
        error = classifier.classify_response(
            502, body(error_body("PROVIDER_ERROR", retryable=True, details=details))
        )

        assert isinstance(error, ProviderError)
        assert error.code == "PROVIDER_ERROR"
        assert error.provider == "unknown"
        assert error.details == {}

    def test_401_without_document(self, classifier):
        error = classifier.classify_response(401, b"Unauthorized")

        assert isinstance(error, AuthenticationError)
        assert error.code == "UNAUTHORIZED"

    def test_403_without_document(self, classifier):
        error = classifier.classify_response(403, b"")

        assert isinstance(error, AuthenticationError)
        assert error.code == "FORBIDDEN"

    def test_400_without_document_keeps_text(self, classifier):
        error = classifier.classify_response(400, b"model is required")

        assert isinstance(error, InvalidRequestError)
        assert error.code == "BAD_REQUEST"
        assert error.message == "model is required"

    @pytest.mark.parametrize(
        "status_code, retryable",
        [(500, True), (502, True), (504, True), (404, False), (409, False)],
    )
    def test_other_statuses(self, classifier, status_code, retryable):
        error = classifier.classify_response(status_code, b"<html>oops</html>")

        assert isinstance(error, ApiError)
        assert error.status_code == status_code
        assert error.retryable is retryable

    def test_request_id_taken_from_header(self, classifier):
        error = classifier.classify_response(
            500, b"boom", httpx.Headers({"X-Request-ID": "req-42"})
        )

        assert error.request_id == "req-42"

    def test_request_id_from_plain_mapping(self, classifier):
        error = classifier.classify_response(500, b"boom", {"X-Request-Id": "req-43"})

        assert error.request_id == "req-43"

    def test_non_document_json_falls_back_to_status(self, classifier):
        error = classifier.classify_response(500, b'{"detail": "nope"}')

        assert isinstance(error, ApiError)
        assert error.code == "Internal Server Error"

    def test_classification_is_pure(self, classifier):
        raw = body(error_body("PROVIDER_ERROR", retryable=True, details={"provider": "anthropic"}))

        first = classifier.classify_response(500, raw)
        second = classifier.classify_response(500, raw)

        assert first is not second
        assert first.to_dict() == second.to_dict()
        assert first.to_dict()["kind"] == ErrorKind.PROVIDER.value


class TestClassifyTransport:
    def test_timeout(self, classifier):
        error = classifier.classify_transport(httpx.ReadTimeout("timed out"))

        assert isinstance(error, RequestTimeoutError)
        assert error.retryable is True

    def test_expired_deadline_is_timeout(self, classifier):
        error = classifier.classify_transport(asyncio.TimeoutError())

        assert isinstance(error, RequestTimeoutError)
        assert error.retryable is True

    def test_connect_error_is_retryable(self, classifier):
        error = classifier.classify_transport(httpx.ConnectError("refused"))

        assert isinstance(error, NetworkError)
        assert error.retryable is True
        assert error.details["error_type"] == "ConnectError"

    def test_other_transport_error_is_not_retryable(self, classifier):
        error = classifier.classify_transport(httpx.RemoteProtocolError("bad frame"))

        assert isinstance(error, NetworkError)
        assert error.retryable is False


class TestClassifyStreamPayload:
    def test_error_payload(self, classifier):
        error = classifier.classify_stream_payload(json.dumps(error_body("RATE_LIMIT_EXCEEDED")))

        assert isinstance(error, RateLimitError)

    @pytest.mark.parametrize("payload", ['{"id": "chunk-1"}', "not json", "[1, 2]", '{"error": "text"}'])
    def test_ordinary_payload(self, classifier, payload):
        assert classifier.classify_stream_payload(payload) is None
