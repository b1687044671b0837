# Role: Orchestrator for one chat widget. Owns an explicit WidgetState (open flag, phase, in-flight guard)
# and sequences a single round trip per submission: user turn -> chat client -> assistant (or fallback) turn.

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import backend.config as config
from backend.config import ChatSettings
from backend.core.conversation_store import Confirm, ConversationStore
from backend.llm.chat_client import CancelToken, ChatClientError, ChatCompletionClient
from backend.models.message import ChatTurn
from backend.utils.formatting import badge_text

TypingListener = Callable[[bool], None]


class Phase(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    AWAITING_RESPONSE = "awaiting_response"


@dataclass
class WidgetState:
    is_open: bool = False
    phase: Phase = Phase.IDLE
    # Key line: the single guard against overlapping round trips.
    in_flight: bool = False
    cancel_token: Optional[CancelToken] = None
    typing_listeners: List[TypingListener] = field(default_factory=list)


class WidgetController:
    def __init__(
        self,
        store: ConversationStore,
        client: ChatCompletionClient,
        settings: Optional[ChatSettings] = None,
        state: Optional[WidgetState] = None,
    ) -> None:
        # Key line: dependencies are injectable for testing/mocking.
        self.store = store
        self.client = client
        self.settings = settings or ChatSettings()
        self.state = state or WidgetState()

    @classmethod
    def from_settings(cls, settings: ChatSettings, store: ConversationStore) -> "WidgetController":
        client = ChatCompletionClient(
            api_url=settings.api_url,
            api_key=settings.api_key,
            timeout=settings.request_timeout,
        )
        return cls(store=store, client=client, settings=settings)

    @property
    def is_typing(self) -> bool:
        return self.state.in_flight

    def on_typing(self, listener: TypingListener) -> None:
        self.state.typing_listeners.append(listener)

    def _set_typing(self, typing: bool) -> None:
        for listener in self.state.typing_listeners:
            listener(typing)

    # ----------------------------
    # Window
    # ----------------------------
    def open(self) -> Optional[ChatTurn]:
        self.state.is_open = True
        return self.store.ensure_welcome()

    def close(self) -> None:
        self.state.is_open = False

    def toggle(self) -> None:
        if self.state.is_open:
            self.close()
        else:
            self.open()

    def badge_label(self) -> str:
        # Role: unread count while closed, excluding the welcome turn.
        if self.state.is_open:
            return ""
        return badge_text(len(self.store) - 1)

    def clear(self, confirm: Confirm) -> bool:
        return self.store.clear(confirm)

    # ----------------------------
    # Round trip
    # ----------------------------
    def build_payload(self) -> Dict[str, Any]:
        return {
            "model": self.settings.model,
            "messages": self.store.to_api_messages(self.settings.system_prompt),
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_tokens,
        }

    def send(self, text: str) -> Optional[ChatTurn]:
        # 1) Ignore empty input; reject while a round trip is in flight
        # 2) Append user turn, mark typing
        # 3) Call the client; reply -> assistant turn, any failure -> fixed fallback turn
        # 4) Always return to idle
        content = (text or "").strip()
        if not content:
            return None
        if self.state.in_flight:
            if config.DEBUG:
                print("WIDGET: send rejected, round trip in flight")
            return None

        self.state.in_flight = True
        self.state.phase = Phase.SENDING
        token = CancelToken()
        self.state.cancel_token = token
        try:
            self.store.append("user", content)
            payload = self.build_payload()
            self._set_typing(True)

            self.state.phase = Phase.AWAITING_RESPONSE
            try:
                reply = self.client.complete(payload, cancel_token=token)
            except ChatClientError as e:
                if config.DEBUG:
                    print("WIDGET: round trip failed:", repr(e))
                reply = self.settings.fallback_message
            finally:
                self._set_typing(False)

            return self.store.append("assistant", reply)
        finally:
            self.state.in_flight = False
            self.state.phase = Phase.IDLE
            self.state.cancel_token = None

    def cancel(self) -> bool:
        # Role: abort the in-flight round trip; send() then appends the fallback turn and returns to idle.
        token = self.state.cancel_token
        if token is None:
            return False
        token.cancel()
        return True
