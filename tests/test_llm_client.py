import pytest
import requests
from requests.exceptions import HTTPError, Timeout, ConnectionError, RequestException

import config
from llm_client import (
    CompletionRequest,
    OpenRouterProvider,
    ProviderConnectionError,
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
    _validate_api_url,
    extract_reply_text,
)


class TestValidateApiUrl:
    def test_accepts_https_hosts(self):
        """_validate_api_url should not raise for HTTPS URLs on non-local hosts."""
        _validate_api_url("https://openrouter.ai/api/v1/chat/completions")

    def test_accepts_localhost_with_http(self):
        """_validate_api_url should not raise for localhost or 127.0.0.1 even if using HTTP."""
        for url in ("http://localhost:8080/v1", "http://127.0.0.1/v1"):
            _validate_api_url(url)

    def test_rejects_insecure_non_local_http(self):
        """_validate_api_url should raise ValueError for HTTP on non-local hosts."""
        with pytest.raises(ValueError) as exc:
            _validate_api_url("http://insecure.example.com/v1")
        assert "Insecure provider URL configured for non-local host" in str(exc.value)


class TestExtractReplyText:
    def test_returns_stripped_content(self):
        data = {"choices": [{"message": {"content": "  Visit Lisbon!  "}}]}
        assert extract_reply_text(data) == "Visit Lisbon!"

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"choices": []},
            {"choices": [{}]},
            {"choices": [{"message": {"content": None}}]},
            ["not", "a", "dict"],
            None,
        ],
    )
    def test_missing_content_returns_empty(self, data):
        """should return an empty string when no reply text can be found."""
        assert extract_reply_text(data) == ""


class TestOpenRouterProvider:
    @pytest.fixture(autouse=True)
    def setup_settings(self, monkeypatch):
        """Monkeypatch settings to consistent, secure values."""
        monkeypatch.setattr(config.settings, "openrouter_api_key", "sk-test")
        monkeypatch.setattr(config.settings, "openrouter_url", "https://api.test/v1/chat/completions")
        monkeypatch.setattr(config.settings, "request_timeout", 5)

    class DummyResponse:
        def __init__(self, data=None, raise_exc=None, json_exc=None):
            self._data = data
            self._raise = raise_exc
            self._json_exc = json_exc
            self.status_code = 200

        def raise_for_status(self):
            if self._raise:
                raise self._raise

        def json(self):
            if self._json_exc:
                raise self._json_exc
            return self._data

    @pytest.fixture
    def provider(self):
        return OpenRouterProvider.from_settings("test/model", config.settings)

    @pytest.fixture
    def request_(self):
        return CompletionRequest(
            messages=[{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}],
            temperature=0.7,
            max_tokens=800,
            top_p=1.0,
        )

    def test_posts_payload_and_returns_content(self, monkeypatch, provider, request_):
        """should send model, messages and generation parameters with auth headers."""
        captured = {}

        def fake_post(url, json=None, headers=None, timeout=None):
            captured.update(url=url, json=json, headers=headers, timeout=timeout)
            return self.DummyResponse({"choices": [{"message": {"content": "Go to Kyoto"}}]})

        monkeypatch.setattr(requests, "post", fake_post)
        # Act
        result = provider.complete(request_)
        # Assert
        assert result == "Go to Kyoto"
        assert captured["url"] == "https://api.test/v1/chat/completions"
        assert captured["timeout"] == 5
        assert captured["json"] == {
            "model": "test/model",
            "messages": list(request_.messages),
            "temperature": 0.7,
            "max_tokens": 800,
            "top_p": 1.0,
        }
        assert captured["headers"]["Authorization"] == "Bearer sk-test"
        assert captured["headers"]["X-Title"] == config.settings.app_title
        assert captured["headers"]["HTTP-Referer"] == config.settings.app_referer

    def test_connection_error_wrapped(self, monkeypatch, provider, request_):
        """should raise ProviderConnectionError on connection failures."""
        monkeypatch.setattr(requests, "post", lambda *a, **k: (_ for _ in ()).throw(ConnectionError("fail")))
        with pytest.raises(ProviderConnectionError):
            provider.complete(request_)

    def test_timeout_error_wrapped(self, monkeypatch, provider, request_):
        """should raise ProviderTimeoutError on timeouts."""
        monkeypatch.setattr(requests, "post", lambda *a, **k: (_ for _ in ()).throw(Timeout("slow")))
        with pytest.raises(ProviderTimeoutError):
            provider.complete(request_)

    def test_http_error_wrapped_as_response_error(self, monkeypatch, provider, request_):
        """should wrap HTTPError from raise_for_status into ProviderResponseError."""
        http_err = HTTPError("bad", response=type("R", (), {"status_code": 429})())
        monkeypatch.setattr(requests, "post", lambda *a, **k: self.DummyResponse(raise_exc=http_err))
        with pytest.raises(ProviderResponseError) as exc:
            provider.complete(request_)
        assert "429" in str(exc.value)

    def test_malformed_body_raises_response_error(self, monkeypatch, provider, request_):
        """should treat a non-JSON body as a provider failure."""
        dummy = self.DummyResponse(json_exc=ValueError("no json"))
        monkeypatch.setattr(requests, "post", lambda *a, **k: dummy)
        with pytest.raises(ProviderResponseError):
            provider.complete(request_)

    def test_generic_request_exception_wrapped(self, monkeypatch, provider, request_):
        """should wrap other RequestException into ProviderError."""
        monkeypatch.setattr(requests, "post", lambda *a, **k: (_ for _ in ()).throw(RequestException("uh oh")))
        with pytest.raises(ProviderError):
            provider.complete(request_)

    def test_from_settings_requires_credential(self, monkeypatch):
        """should refuse to build a provider without an API key."""
        monkeypatch.setattr(config.settings, "openrouter_api_key", None)
        with pytest.raises(ValueError):
            OpenRouterProvider.from_settings("test/model", config.settings)

    def test_insecure_url_rejected(self):
        """should reject an insecure HTTP endpoint at construction."""
        with pytest.raises(ValueError):
            OpenRouterProvider("m", "sk", url="http://evil.com/v1")
