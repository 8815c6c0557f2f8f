# llm_client.py
# Description: Provides chat-completion providers for WanderBot.
# Handles request formatting, response extraction, and error handling
# for OpenRouter-compatible endpoints.

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlparse
import requests
# Import the centralized configuration
from config import AppConfig, settings
from history_utils import History

logger = logging.getLogger(__name__)

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}

# ---------------------------------------------------------------------------
# custom exceptions
# ---------------------------------------------------------------------------

class ProviderError(Exception):
    """Base exception for chat-completion provider errors."""

class ProviderConnectionError(ProviderError):
    """Raised for connection failures to the provider."""

class ProviderResponseError(ProviderError):
    """Raised when the provider returns an error status or a malformed body."""

class ProviderTimeoutError(ProviderError):
    """Raised when a request to the provider times out."""

# ---------------------------------------------------------------------------
# provider contract
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompletionRequest:
    """Provider-neutral chat-completion request."""
    messages: History
    temperature: float = 0.7
    max_tokens: int = 800
    top_p: float = 1.0


class ChatCompletionProvider(Protocol):
    """Anything that turns a CompletionRequest into reply text."""
    name: str

    def complete(self, request: CompletionRequest) -> str:
        ...

# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------

def _validate_api_url(url: str) -> None:
    """Reject plain-HTTP endpoints unless they point at the local machine."""
    parsed = urlparse(url)
    if parsed.scheme == "https":
        return
    if parsed.scheme == "http" and parsed.hostname in LOCAL_HOSTS:
        return
    raise ValueError(f"Insecure provider URL configured for non-local host: {url}")


def extract_reply_text(data: Any) -> str:
    """
    Pull `choices[0].message.content` out of a chat-completion body.
    Missing or non-string content yields an empty string.
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    if not isinstance(content, str):
        return ""
    return content.strip()

# ---------------------------------------------------------------------------
# OpenRouter provider
# ---------------------------------------------------------------------------

class OpenRouterProvider:
    """Calls one model through the OpenRouter chat-completions API."""

    def __init__(
        self,
        model: str,
        api_key: str,
        url: str | None = None,
        timeout: int | None = None,
        referer: str | None = None,
        title: str | None = None,
    ) -> None:
        self.model = model
        self.name = f"openrouter:{model}"
        self._api_key = api_key
        self.url = url or settings.openrouter_url
        self.timeout = timeout or settings.request_timeout
        self.referer = referer or settings.app_referer
        self.title = title or settings.app_title
        _validate_api_url(self.url)

    @classmethod
    def from_settings(cls, model: str, cfg: AppConfig | None = None) -> "OpenRouterProvider":
        cfg = cfg or settings
        if not cfg.has_credential:
            raise ValueError("OpenRouter API key is not configured.")
        return cls(
            model=model,
            api_key=cfg.openrouter_api_key or "",
            url=cfg.openrouter_url,
            timeout=cfg.request_timeout,
            referer=cfg.app_referer,
            title=cfg.app_title,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
            "HTTP-Referer": self.referer,
            "X-Title": self.title,
        }

    def complete(self, request: CompletionRequest) -> str:
        """
        Sends one chat-completion request and returns the trimmed reply text.

        Raises:
            ProviderConnectionError: the endpoint could not be reached.
            ProviderTimeoutError: the call exceeded the configured timeout.
            ProviderResponseError: non-success status or non-JSON body.
            ProviderError: any other request failure.
        """
        payload = {
            "model": self.model,
            "messages": list(request.messages),
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "top_p": request.top_p,
        }

        logger.info(
            "Sending request to provider",
            extra={"extra": {"provider": self.name, "messages": len(payload["messages"])}},
        )

        try:
            response = requests.post(
                self.url, json=payload, headers=self._headers(), timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.ConnectionError as e:
            raise ProviderConnectionError(f"Connection to {self.url} failed.") from e
        except requests.exceptions.Timeout as e:
            raise ProviderTimeoutError("Request timed out.") from e
        except requests.exceptions.HTTPError as e:
            raise ProviderResponseError(
                f"Provider returned HTTP {getattr(e.response, 'status_code', 'error')}."
            ) from e
        except requests.exceptions.RequestException as e:
            raise ProviderError("An unexpected request error occurred.") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderResponseError("Provider returned a malformed body.") from e

        return extract_reply_text(data)
