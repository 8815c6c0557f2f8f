# history_utils.py
#
# Description: Provides utilities to thread WanderBot chat history into
#              provider requests. It defines structured types for chat
#              turns, the assistant persona, and the conversion from stored
#              messages to the role/content list chat-completion APIs expect.
#

# --------------------------------------------------------------------------- #
# imports
# --------------------------------------------------------------------------- #
from __future__ import annotations
from typing import TYPE_CHECKING, Iterable, List, Optional, TypedDict

if TYPE_CHECKING:
    from store import ChatMessage

# --------------------------------------------------------------------------- #
# constants and type definitions
# --------------------------------------------------------------------------- #
ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

CHAT_ROLES = frozenset({ROLE_USER, ROLE_ASSISTANT})

DEFAULT_SYSTEM_PROMPT = (
    "You are WanderBot, an expert travel companion and advisor. You provide "
    "detailed, accurate travel information including:\n"
    "- Destination recommendations with specific places, activities, and hidden gems\n"
    "- Practical travel tips (visas, budgets, safety, best times to visit)\n"
    "- Cultural insights and local customs\n"
    "- Food and restaurant recommendations\n"
    "- Itinerary planning with day-by-day suggestions\n"
    "- App-specific help for adding places to travel logs\n\n"
    "Be concise and conversational. Use emojis sparingly for visual appeal. "
    "Format longer responses with clear sections and bullet points for readability."
)

class ChatTurn(TypedDict):
    """A dictionary representing one turn in a conversation."""
    role: str
    content: str

History = List[ChatTurn]

# --------------------------------------------------------------------------- #
# conversions
# --------------------------------------------------------------------------- #
def turns_from_messages(messages: Iterable["ChatMessage"]) -> History:
    """Map stored chat messages to provider turns, preserving order."""
    return [ChatTurn(role=m.role, content=m.text) for m in messages]


def build_messages(
    history: History,
    next_user_message: str,
    system_prompt: Optional[str] = None,
) -> History:
    """
    Builds the ordered message list sent to a chat-completion provider:
    - One system instruction.
    - Every prior turn, oldest first, role for role.
    - The user's latest message, trimmed, in final position.

    Entries with roles other than user/assistant are dropped so a stray
    system turn in history cannot override the persona. A turn without
    content is sent as an empty string.
    """
    system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
    messages: History = [ChatTurn(role=ROLE_SYSTEM, content=system_prompt)]

    for turn in history:
        role = turn.get("role")
        if role not in CHAT_ROLES:
            continue
        messages.append(ChatTurn(role=role, content=turn.get("content") or ""))

    messages.append(ChatTurn(role=ROLE_USER, content=next_user_message.strip()))
    return messages


def last_user_message(messages: History) -> str:
    """Return the content of the final user turn, or an empty string."""
    for turn in reversed(messages):
        if turn["role"] == ROLE_USER:
            return turn["content"]
    return ""
