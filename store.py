# store.py
#
# Description: The per-owner chat message log. Defines the ChatMessage
#              record, the MessageStore interface the session controller
#              consumes, and a thread-safe in-memory implementation.

from __future__ import annotations

import itertools
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol

from history_utils import CHAT_ROLES, ROLE_ASSISTANT

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------- #
# errors
# --------------------------------------------------------------------------- #
class StoreError(Exception):
    """Base exception for message store failures."""

class Unauthenticated(StoreError):
    """Raised when an operation has no valid owner context."""

class StoreUnavailable(StoreError):
    """Raised when the underlying persistence operation fails."""

# --------------------------------------------------------------------------- #
# record and interface
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class ChatMessage:
    """One immutable chat message owned by a single user."""
    id: str
    owner: str
    text: str
    role: str
    created_at: float
    seq: int

    @property
    def is_bot(self) -> bool:
        return self.role == ROLE_ASSISTANT


class MessageStore(Protocol):
    def list_messages(self, owner: Optional[str]) -> List[ChatMessage]: ...

    def append_message(self, owner: Optional[str], text: str, role: str) -> ChatMessage: ...

    def clear_messages(self, owner: Optional[str]) -> None: ...


def require_owner(owner: Optional[str]) -> str:
    """Return `owner` or raise Unauthenticated when it is missing or blank."""
    if not owner or not str(owner).strip():
        raise Unauthenticated("Not authenticated")
    return owner

# --------------------------------------------------------------------------- #
# in-memory implementation
# --------------------------------------------------------------------------- #
class InMemoryMessageStore:
    """
    Keeps every owner's messages in insertion order behind one lock.

    `created_at` comes from `clock` but never moves backwards, so ordering by
    (created_at, seq) always equals insertion order.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._messages: Dict[str, List[ChatMessage]] = {}
        self._seq = itertools.count(1)
        self._last_ts = 0.0

    def list_messages(self, owner: Optional[str]) -> List[ChatMessage]:
        owner = require_owner(owner)
        with self._lock:
            return list(self._messages.get(owner, ()))

    def append_message(self, owner: Optional[str], text: str, role: str) -> ChatMessage:
        owner = require_owner(owner)
        if role not in CHAT_ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        if not isinstance(text, str) or not text.strip():
            raise ValueError("Message text must be a non-empty string.")

        with self._lock:
            self._last_ts = max(self._last_ts, self._clock())
            message = ChatMessage(
                id=uuid.uuid4().hex,
                owner=owner,
                text=text,
                role=role,
                created_at=self._last_ts,
                seq=next(self._seq),
            )
            self._messages.setdefault(owner, []).append(message)

        logger.debug("Message appended", extra={"extra": {"owner": owner, "role": role}})
        return message

    def clear_messages(self, owner: Optional[str]) -> None:
        owner = require_owner(owner)
        with self._lock:
            removed = len(self._messages.pop(owner, ()))
        logger.info("Chat history cleared", extra={"extra": {"owner": owner, "removed": removed}})

    def count(self, owner: Optional[str]) -> int:
        return len(self.list_messages(owner))
