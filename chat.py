# chat.py
#
# Description: a multi-turn terminal client for WanderBot.

"""
This script provides a stateful command-line chat with WanderBot.

Messages go through a ChatSessionController, so the terminal behaves like
the web chat: a greeting on first open, full history threaded into every
reply, and special commands for inspecting or clearing the session.
"""

# --------------------------------------------------------------------------- #
# imports
# --------------------------------------------------------------------------- #
from __future__ import annotations  # allow postponed evaluation of annotations
import logging                       # for logging messages
import random                        # seeded source for the scripted demo
import sys                           # for system exit
from typing import Callable, Dict, Optional

import typer

from config import settings
from core import ReplyGenerator
from logging_config import configure_logging
from scripted import ScriptedProvider
from session import ChatSession, ChatSessionController, SubmissionInProgress
from store import InMemoryMessageStore, StoreError
from travel_logs import InMemoryTravelLogStore

# --------------------------------------------------------------------------- #
# constants and type definitions
# --------------------------------------------------------------------------- #
logger = logging.getLogger(__name__)  # module-level logger

CommandHandler = Callable[["ChatApplication"], None]  # alias for command handler signature

# --------------------------------------------------------------------------- #
# command handlers
# --------------------------------------------------------------------------- #
def handle_exit(app: "ChatApplication") -> None:
    """Exit the chat application immediately."""
    print("Goodbye!")  # inform user
    sys.exit(0)        # terminate program

def handle_help(app: "ChatApplication") -> None:
    """Display available commands and their descriptions."""
    print("Available commands:")
    for cmd, (_, description) in COMMANDS.items():
        print(f"  {cmd:<10} - {description}")  # list each command

def handle_history(app: "ChatApplication") -> None:
    """Show the stored conversation, if any."""
    try:
        messages = app.controller.history()
    except StoreError as e:
        print(f"[SYSTEM] Could not load history: {e}")
        return

    if not messages:
        print("No messages in history yet.")  # nothing to show
        return

    print("\n--- Chat History ---")
    for msg in messages:
        speaker = "WanderBot" if msg.is_bot else "You"
        print(f"{speaker}: {msg.text}")  # display each turn
    print("--- End History ---\n")

def handle_clear(app: "ChatApplication") -> None:
    """Clear the stored chat history."""
    try:
        app.controller.clear_session()
    except StoreError as e:
        print(f"[SYSTEM] Failed to clear history: {e}")
        return
    print("Chat history cleared.")  # confirm action

def handle_logs(app: "ChatApplication") -> None:
    """List the user's travel logs with their destinations."""
    logs = app.travel_logs.list_logs(app.controller.owner)
    if not logs:
        print("No travel logs yet. Try ':sample'.")
        return
    for log in logs:
        marker = "*" if log.is_active else " "
        print(f"{marker} {log.title}")
        for dest in app.travel_logs.list_destinations(app.controller.owner, log.id):
            print(f"    - {dest.name} ({dest.latitude:.4f}, {dest.longitude:.4f})")

def handle_sample(app: "ChatApplication") -> None:
    """Create a sample travel log."""
    log = app.travel_logs.create_sample_data(app.controller.owner)
    print(f"Created sample log '{log.title}'.")

# --------------------------------------------------------------------------- #
# command routing table
# --------------------------------------------------------------------------- #
COMMANDS: Dict[str, tuple[CommandHandler, str]] = {
    ":exit":    (handle_exit,    "Exits the chat application."),
    ":help":    (handle_help,    "Displays this help message."),
    ":history": (handle_history, "Displays the conversation history."),
    ":clear":   (handle_clear,   "Clears the stored chat history."),
    ":logs":    (handle_logs,    "Lists your travel logs."),
    ":sample":  (handle_sample,  "Creates a sample travel log."),
}

# --------------------------------------------------------------------------- #
# main chat application class
# --------------------------------------------------------------------------- #
class ChatApplication:
    """Encapsulates the terminal loop around a ChatSessionController."""

    def __init__(
        self,
        controller: ChatSessionController,
        travel_logs: Optional[InMemoryTravelLogStore] = None,
    ) -> None:
        self.controller = controller
        self.travel_logs = travel_logs or InMemoryTravelLogStore()
        logger.info("Chat application initialized.")

    def start(self) -> None:
        """Open the session and print anything already stored (e.g. the greeting)."""
        for msg in self.controller.open():
            speaker = "WanderBot" if msg.is_bot else "You"
            print(f"{speaker}: {msg.text}\n")

    def run(self) -> None:
        """Start and manage the main chat loop."""
        print("Welcome to WanderBot! Type ':help' for commands, or ':exit' to quit.\n")
        try:
            self.start()
        except StoreError as e:
            print(f"[SYSTEM] Could not load chat: {e}")

        while True:
            try:
                user_input = input("You: ").strip()  # get and trim user input
                if not user_input:
                    continue  # skip empty entries

                entry = COMMANDS.get(user_input.lower())  # check for special command
                if entry:
                    handler_fn, _ = entry
                    # look the handler up by name so tests can patch it
                    handler = getattr(sys.modules[__name__], handler_fn.__name__)
                    handler(self)
                else:
                    self.process_message(user_input)

            except (KeyboardInterrupt, EOFError):
                handle_exit(self)  # exit cleanly on interrupt

    def process_message(self, text: str) -> Optional[str]:
        """
        Send one message through the controller and print the reply.

        Returns the reply text, or None when the turn could not be stored.
        """
        try:
            print("WanderBot: ", end="", flush=True)
            reply = self.controller.submit_message(text)
        except SubmissionInProgress:
            print("\n[SYSTEM] Still waiting for the previous reply.")
            return None
        except StoreError as e:
            print(f"\n[SYSTEM] Failed to send message. Your message was: {text}")
            logger.error("Store error during chat loop.", extra={"error": str(e)})
            return None

        print(f"{reply.text}\n")
        return reply.text

# --------------------------------------------------------------------------- #
# entry point
# --------------------------------------------------------------------------- #
def build_application(user: str, demo: bool = False, seed: Optional[int] = None) -> ChatApplication:
    """Wire stores, reply generator and session for one terminal user."""
    if demo:
        generator = ReplyGenerator([ScriptedProvider(random.Random(seed))])
    else:
        generator = ReplyGenerator.from_settings(settings)
    controller = ChatSessionController(InMemoryMessageStore(), generator, ChatSession(owner=user))
    return ChatApplication(controller)


def main(
    user: str = typer.Option("traveller", help="Owner id for this chat session."),
    demo: bool = typer.Option(False, help="Answer with scripted replies instead of a hosted model."),
    seed: Optional[int] = typer.Option(None, help="Random seed for scripted replies."),
) -> None:
    """Entry point for the chat application."""
    configure_logging(settings.log_level)
    build_application(user, demo=demo, seed=seed).run()


def cli() -> None:
    typer.run(main)


if __name__ == "__main__":
    cli()  # run when executed as a script
