# app.py
#
# Streamlit chat page for WanderBot.
# The page only renders: every turn goes through ChatSessionController, and
# the message list is re-read from the store on each rerun.

# --------------------------------------------------------------------------- #
# imports
# --------------------------------------------------------------------------- #
from __future__ import annotations
import json
from dataclasses import asdict

import streamlit as st

from config import settings
from core import ReplyGenerator
from logging_config import setup_logging
from session import ChatSession, ChatSessionController, SessionState, SubmissionInProgress
from store import InMemoryMessageStore, StoreError
from travel_logs import InMemoryTravelLogStore

# --------------------------------------------------------------------------- #
# constants
# --------------------------------------------------------------------------- #
SESSION_KEY_OWNER = "owner"
SESSION_KEY_CHAT = "chat_session"
SESSION_KEY_PENDING_INPUT = "pending_input"
DEFAULT_OWNER = "traveller"

# --------------------------------------------------------------------------- #
# logger setup
# --------------------------------------------------------------------------- #
logger = setup_logging(settings.log_level, name=__name__)

# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #
@st.cache_resource
def get_message_store() -> InMemoryMessageStore:
    return InMemoryMessageStore()

@st.cache_resource
def get_travel_log_store() -> InMemoryTravelLogStore:
    return InMemoryTravelLogStore()

@st.cache_resource
def get_reply_generator() -> ReplyGenerator:
    return ReplyGenerator.from_settings(settings)

def init_session_state() -> None:
    if SESSION_KEY_OWNER not in st.session_state:
        st.session_state[SESSION_KEY_OWNER] = DEFAULT_OWNER
    if SESSION_KEY_CHAT not in st.session_state:
        st.session_state[SESSION_KEY_CHAT] = ChatSession(owner=st.session_state[SESSION_KEY_OWNER])
    if SESSION_KEY_PENDING_INPUT not in st.session_state:
        st.session_state[SESSION_KEY_PENDING_INPUT] = ""

def get_controller() -> ChatSessionController:
    return ChatSessionController(
        get_message_store(),
        get_reply_generator(),
        st.session_state[SESSION_KEY_CHAT],
    )

# --------------------------------------------------------------------------- #
# sidebar
# --------------------------------------------------------------------------- #
def render_sidebar(controller: ChatSessionController) -> None:
    with st.sidebar:
        st.title("WanderBot")
        if not settings.has_credential:
            st.info("Demo mode: set OPENROUTER_API_KEY for real AI replies.", icon="ℹ️")

        if st.button("🗑️ clear chat"):
            try:
                controller.clear_session()
            except StoreError:
                st.toast("Failed to clear history")
            else:
                st.toast("Chat history cleared")
                st.rerun()

        try:
            messages = controller.history()
        except StoreError:
            messages = []
        payload = json.dumps([asdict(m) for m in messages], indent=2)
        st.download_button("💾 download chat", payload, file_name="wanderbot_chat.json")

        st.subheader("Travel logs")
        logs = get_travel_log_store()
        if st.button("➕ sample log"):
            logs.create_sample_data(controller.owner)
        for log in logs.list_logs(controller.owner):
            label = f"{log.title} (active)" if log.is_active else log.title
            with st.expander(label):
                for dest in logs.list_destinations(controller.owner, log.id):
                    st.markdown(f"**{dest.name}** · {dest.latitude:.4f}, {dest.longitude:.4f}")

# --------------------------------------------------------------------------- #
# main chat logic
# --------------------------------------------------------------------------- #
def run_chat(controller: ChatSessionController) -> None:
    st.header("💬 Chat with WanderBot")

    try:
        if controller.session.state == SessionState.UNOPENED:
            messages = controller.open()
        else:
            # greets again after the history was cleared
            controller.ensure_greeting()
            messages = controller.history()
    except StoreError as e:
        logger.error("Could not load chat history", exc_info=e)
        st.error("Could not load chat history. Please try again.")
        return

    for msg in messages:
        role = "assistant" if msg.is_bot else "user"
        st.chat_message(role).markdown(msg.text)

    pending = st.session_state[SESSION_KEY_PENDING_INPUT]
    if pending:
        st.caption(f"Your last message was not sent: {pending}")

    if not (user_input := st.chat_input("Ask about destinations, travel tips...")):
        return

    content = user_input.strip()
    if not content:
        return

    with st.spinner("WanderBot is thinking…"):
        try:
            controller.submit_message(content)
        except SubmissionInProgress:
            st.toast("Still waiting for the previous reply")
            return
        except StoreError:
            st.session_state[SESSION_KEY_PENDING_INPUT] = content
            st.toast("Failed to send message")
            return

    st.session_state[SESSION_KEY_PENDING_INPUT] = ""
    st.rerun()

# --------------------------------------------------------------------------- #
# entry point
# --------------------------------------------------------------------------- #
def main() -> None:
    st.set_page_config(page_title="WanderBot", layout="wide")

    init_session_state()
    controller = get_controller()
    render_sidebar(controller)
    run_chat(controller)


if __name__ == "__main__":
    main()
