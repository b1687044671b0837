# Role: Local developer CLI to chat through the widget controller without the web UI.
# Uses file-backed storage, so history persists between runs until it expires.

from __future__ import annotations

import backend.config
backend.config.load_env()

from backend.core.conversation_store import ConversationStore
from backend.core.widget_controller import WidgetController
from backend.storage.local_storage import FileStorage
from backend.utils.formatting import format_relative_time


_TYPING_TEXT = "Assistant is typing..."


def _show_typing(typing: bool) -> None:
    # Key line: blank the indicator with spaces; "\r" alone leaves the old text on screen.
    text = _TYPING_TEXT if typing else " " * len(_TYPING_TEXT)
    print(text, end="\r", flush=True)


def _confirm_clear() -> bool:
    answer = input("Clear the conversation history? [y/N] ").strip().lower()
    return answer in {"y", "yes"}


def main() -> None:
    # 1) Build store + controller from settings
    # 2) Replay restored history
    # 3) Route user input -> controller -> print assistant output
    settings = backend.config.get_settings()
    store = ConversationStore(
        storage=FileStorage(settings.storage_dir),
        max_messages=settings.max_messages,
        cache_expiry=settings.cache_expiry,
        welcome_message=settings.welcome_message,
    )
    store.load()

    controller = WidgetController.from_settings(settings, store)
    controller.on_typing(_show_typing)

    print("Portfolio Chat CLI")
    print("Commands: /clear (clear history), /exit")
    print("-" * 50)

    for turn in store.turns:
        print(f"[{format_relative_time(turn.timestamp)}] {turn.role.capitalize()}: {turn.content}")

    welcome = controller.open()
    if welcome is not None:
        print(f"Assistant: {welcome.content}")

    while True:
        try:
            user_message = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_message:
            continue

        cmd = user_message.lower()

        if cmd in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        if cmd in {"/clear", "clear"}:
            if controller.clear(_confirm_clear):
                print(f"Assistant: {store.turns[0].content}")
            continue

        reply = controller.send(user_message)
        if reply is not None:
            print(f"\nAssistant: {reply.content}")


if __name__ == "__main__":
    main()
