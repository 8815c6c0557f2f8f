# session.py
#
# Description: Chat session lifecycle for WanderBot. A ChatSession holds the
#              per-session state (greeting flag, in-flight guard); the
#              ChatSessionController runs one conversational turn at a time
#              against a MessageStore and a ReplyGenerator.

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from core import ReplyGenerator
from history_utils import ROLE_ASSISTANT, ROLE_USER, turns_from_messages
from store import ChatMessage, MessageStore, StoreError, StoreUnavailable

logger = logging.getLogger(__name__)

GREETING_MESSAGE = (
    "Hello! I'm WanderBot, your travel companion. Ask me about destinations, "
    "itineraries, budgets, or app help (like adding places to your log). "
    "Where are you headed?"
)

# --------------------------------------------------------------------------- #
# session state
# --------------------------------------------------------------------------- #
class SessionState(str, Enum):
    UNOPENED = "unopened"
    LOADING = "loading"
    EMPTY = "empty"
    POPULATED = "populated"


class SubmissionInProgress(Exception):
    """Raised when a message is submitted while another one is still pending."""


@dataclass
class ChatSession:
    """
    Client-side lifetime of one open chat. Not persisted: `greeted` lives
    only as long as this object and is reset by clearing the history.
    """
    owner: str
    state: SessionState = SessionState.UNOPENED
    greeted: bool = False
    _submit_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    _greet_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def is_submitting(self) -> bool:
        return self._submit_lock.locked()

# --------------------------------------------------------------------------- #
# controller
# --------------------------------------------------------------------------- #
class ChatSessionController:
    """Coordinates store writes and reply generation for one ChatSession."""

    def __init__(self, store: MessageStore, generator: ReplyGenerator, session: ChatSession) -> None:
        self.store = store
        self.generator = generator
        self.session = session

    @property
    def owner(self) -> str:
        return self.session.owner

    def history(self) -> List[ChatMessage]:
        """Re-read the owner's messages; the store is the source of truth."""
        return self.store.list_messages(self.owner)

    def open(self) -> List[ChatMessage]:
        """Load history, greet an empty session, and return what is now stored."""
        self.session.state = SessionState.LOADING
        try:
            messages = self.history()
        except StoreError:
            self.session.state = SessionState.UNOPENED
            raise

        self.session.state = SessionState.POPULATED if messages else SessionState.EMPTY
        logger.info(
            "Session opened",
            extra={"extra": {"owner": self.owner, "messages": len(messages)}},
        )
        if self.ensure_greeting():
            return self.history()
        return messages

    def ensure_greeting(self) -> bool:
        """
        Append the greeting once per session, and only to an empty history.

        Returns True when a greeting was appended by this call. Finding any
        existing history consumes the flag. A StoreUnavailable failure leaves
        the flag clear so the next call tries again.
        """
        with self.session._greet_lock:
            if self.session.greeted:
                return False

            if self.history():
                self.session.greeted = True
                self.session.state = SessionState.POPULATED
                return False

            try:
                self.store.append_message(self.owner, GREETING_MESSAGE, ROLE_ASSISTANT)
            except StoreUnavailable as e:
                logger.warning(
                    "Greeting not stored; will retry",
                    extra={"extra": {"owner": self.owner, "error": str(e)}},
                )
                return False

            self.session.greeted = True
            self.session.state = SessionState.POPULATED
            return True

    def submit_message(self, text: str) -> ChatMessage:
        """
        Run one turn: store the user message, generate a reply, store the reply.

        The generator receives the history as it was before this turn plus
        `text` as the final user message.

        Raises:
            ValueError: `text` is blank.
            SubmissionInProgress: another submission is still pending.
            StoreError: the store rejected a read or write.
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("Message must not be empty.")
        if not self.session._submit_lock.acquire(blocking=False):
            raise SubmissionInProgress("A message is already being sent.")

        try:
            snapshot = self.history()
            self.store.append_message(self.owner, text, ROLE_USER)
            self.session.state = SessionState.POPULATED

            reply = self.generator.generate_reply(text, turns_from_messages(snapshot))
            return self.store.append_message(self.owner, reply, ROLE_ASSISTANT)
        except StoreError as e:
            logger.error(
                "Failed to send message",
                extra={"extra": {"owner": self.owner, "error": str(e)}},
            )
            raise
        finally:
            self.session._submit_lock.release()

    def clear_session(self) -> None:
        """Delete every message of the owner and re-arm the greeting."""
        self.store.clear_messages(self.owner)
        with self.session._greet_lock:
            self.session.greeted = False
            self.session.state = SessionState.EMPTY
