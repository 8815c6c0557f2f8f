# core.py
# Description: WanderBot reply generation. Threads the conversation into a
# provider request, walks the provider chain in order, and degrades to canned
# guidance whenever no provider can answer.

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from config import AppConfig, settings
from history_utils import History, build_messages
from llm_client import ChatCompletionProvider, CompletionRequest, OpenRouterProvider, ProviderError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# canned replies
# ---------------------------------------------------------------------------
OFFLINE_GUIDANCE_MESSAGE = (
    "I'm running in demo mode. Add an OpenRouter API key to enable real AI responses.\n\n"
    "Meanwhile, here are some helpful tips:\n"
    "• Tell me a destination and your trip length for a quick itinerary.\n"
    "• Ask for budget tips, best time to visit, or food recommendations.\n"
    "• App help: Click 'Add Place', then click the map to autofill name & coordinates; "
    "add notes and save."
)

CONNECTIVITY_FALLBACK_MESSAGE = (
    "I had trouble connecting to the AI service. Please try again shortly.\n\n"
    "Quick help:\n"
    "• Tell me a destination and your trip length for a quick itinerary.\n"
    "• Ask for budget tips, best time to visit, or food recommendations.\n"
    "• App help: Click 'Add Place', then click the map to autofill name & coordinates; "
    "add notes and save."
)

EMPTY_REPLY_MESSAGE = "I couldn't generate a response right now. Please try again."


class ReplyGenerator:
    """
    Produces one assistant reply per call from an ordered provider chain.

    An empty chain means no credential is configured: every reply is
    OFFLINE_GUIDANCE_MESSAGE. Otherwise providers are tried in order and the
    first one that answers wins; when all fail the caller receives
    CONNECTIVITY_FALLBACK_MESSAGE. `generate_reply` never raises.
    """

    def __init__(
        self,
        providers: Sequence[ChatCompletionProvider] = (),
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 800,
        top_p: float = 1.0,
    ) -> None:
        self.providers: List[ChatCompletionProvider] = list(providers)
        self.system_prompt = system_prompt
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p

    @classmethod
    def from_settings(cls, cfg: AppConfig | None = None) -> "ReplyGenerator":
        """Primary then fallback OpenRouter model, or an empty chain without a key."""
        cfg = cfg or settings
        providers: List[ChatCompletionProvider] = []
        if cfg.has_credential:
            providers = [
                OpenRouterProvider.from_settings(cfg.primary_model, cfg),
                OpenRouterProvider.from_settings(cfg.fallback_model, cfg),
            ]
        return cls(
            providers,
            temperature=cfg.temperature,
            max_tokens=cfg.max_tokens,
            top_p=cfg.top_p,
        )

    @property
    def is_offline(self) -> bool:
        return not self.providers

    def generate_reply(self, user_message: str, history: History) -> str:
        """
        Return WanderBot's next message for `user_message` given `history`
        (oldest first, excluding `user_message` itself).
        """
        if self.is_offline:
            return OFFLINE_GUIDANCE_MESSAGE

        try:
            request = CompletionRequest(
                messages=build_messages(history, user_message, self.system_prompt),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                top_p=self.top_p,
            )
        except Exception:
            logger.exception("Could not build provider request")
            return CONNECTIVITY_FALLBACK_MESSAGE

        for provider in self.providers:
            try:
                reply = provider.complete(request)
            except ProviderError as e:
                logger.warning(
                    "Provider failed, trying next",
                    extra={"extra": {"provider": provider.name, "error": str(e)}},
                )
                continue
            except Exception:
                logger.exception("Unexpected provider failure: %s", provider.name)
                continue

            logger.info("Reply generated", extra={"extra": {"provider": provider.name}})
            return reply.strip() if reply and reply.strip() else EMPTY_REPLY_MESSAGE

        logger.error("All providers failed; returning connectivity fallback")
        return CONNECTIVITY_FALLBACK_MESSAGE


def generate_reply(
    user_message: str,
    history: History,
    generator: Optional[ReplyGenerator] = None,
) -> str:
    """Module-level shortcut that builds a generator from `settings` when needed."""
    generator = generator or ReplyGenerator.from_settings()
    return generator.generate_reply(user_message, history)
