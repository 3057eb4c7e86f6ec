import pytest

from rainy_sdk.auth import Credentials
from rainy_sdk.errors import AuthenticationError, InvalidRequestError


class TestCredentials:
    def test_valid_key_passes(self, credentials):
        credentials.validate_credentials()

    @pytest.mark.parametrize("api_key", ["bad-format", "sk-123456", "ra-"])
    def test_malformed_key_rejected(self, api_key):
        credentials = Credentials(api_key=api_key)

        with pytest.raises(AuthenticationError) as exc_info:
            credentials.validate_credentials()

        assert exc_info.value.code == "INVALID_API_KEY_FORMAT"
        assert exc_info.value.retryable is False

    def test_empty_key_rejected(self):
        with pytest.raises(AuthenticationError) as exc_info:
            Credentials(api_key="").validate_credentials()

        assert exc_info.value.code == "EMPTY_API_KEY"

    @pytest.mark.parametrize("base_url", ["ftp://api.example.test", "not a url", "/relative"])
    def test_invalid_base_url_rejected(self, base_url):
        credentials = Credentials(api_key="ra-test-key", base_url=base_url)

        with pytest.raises(InvalidRequestError) as exc_info:
            credentials.validate_credentials()

        assert exc_info.value.code == "INVALID_BASE_URL"

    def test_build_headers(self, credentials):
        headers = credentials.build_headers()

        assert headers["Authorization"] == "Bearer ra-test-key"
        assert headers["Content-Type"] == "application/json"
        assert headers["User-Agent"].startswith("rainy-sdk-python/")

    def test_illegal_header_value_rejected(self):
        credentials = Credentials(api_key="ra-bad\nkey")

        with pytest.raises(InvalidRequestError) as exc_info:
            credentials.build_headers()

        assert exc_info.value.code == "INVALID_HEADER_VALUE"
        assert "ra-bad" not in exc_info.value.message

    def test_non_ascii_user_agent_rejected(self):
        credentials = Credentials(api_key="ra-test-key", user_agent="agent-é")

        with pytest.raises(InvalidRequestError):
            credentials.build_headers()

    @pytest.mark.parametrize(
        "base_url, prefix, path, expected",
        [
            ("https://api.example.test", "/api/v1", "/health", "https://api.example.test/api/v1/health"),
            ("https://api.example.test/", "api/v1/", "keys/abc", "https://api.example.test/api/v1/keys/abc"),
            ("https://api.example.test", "", "/health", "https://api.example.test/health"),
        ],
    )
    def test_url_for(self, base_url, prefix, path, expected):
        credentials = Credentials(api_key="ra-test-key", base_url=base_url, api_prefix=prefix)

        assert credentials.url_for(path) == expected

    def test_repr_hides_api_key(self, credentials):
        assert "ra-test-key" not in repr(credentials)
        assert "ra-test-key" not in str(credentials)

    def test_from_settings(self, settings):
        credentials = Credentials.from_settings(settings)

        assert credentials.api_key == "ra-test-key"
        assert credentials.base_url == "https://api.example.test"
        assert credentials.max_retries == settings.MAX_RETRIES
