# Role: Authoritative, bounded conversation history for one widget. Owns the in-memory turn list and its
# persisted snapshot: restore with expiry on load, trim + persist on every append, confirm-guarded clear.

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Union

from pydantic import ValidationError

import backend.config as config
from backend.models.message import ChatTurn, Role
from backend.models.snapshot import ConversationSnapshot
from backend.storage.local_storage import KeyValueStorage

STORAGE_KEY = "chatMessages"

Clock = Callable[[], datetime]
RenderListener = Callable[[ChatTurn], None]
Confirm = Union[bool, Callable[[], bool]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        max_messages: int = 20,
        cache_expiry: timedelta = timedelta(hours=24),
        welcome_message: str = "",
        clock: Optional[Clock] = None,
        storage_key: str = STORAGE_KEY,
    ) -> None:
        if max_messages < 1:
            raise ValueError("max_messages must be >= 1")
        self._storage = storage
        self._max_messages = max_messages
        self._expiry = cache_expiry
        self._welcome_message = welcome_message
        # Key line: injectable clock keeps expiry and timestamps deterministic in tests.
        self._clock = clock or _utcnow
        self._key = storage_key
        self._turns: List[ChatTurn] = []
        self._listeners: List[RenderListener] = []

    @property
    def turns(self) -> List[ChatTurn]:
        return list(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def subscribe(self, listener: RenderListener) -> None:
        self._listeners.append(listener)

    def load(self) -> List[ChatTurn]:
        # 1) Read raw snapshot (absent -> empty)
        # 2) Parse; corrupt data is removed and degrades to empty
        # 3) Expired snapshot is removed from storage, not just ignored
        try:
            raw = self._storage.get_item(self._key)
        except UnicodeDecodeError:
            return self._discard("unreadable snapshot")

        if raw is None:
            self._turns = []
            return self.turns

        try:
            snapshot = ConversationSnapshot.model_validate_json(raw)
        except ValidationError:
            return self._discard("corrupt snapshot")

        try:
            expired = snapshot.is_expired(self._clock(), self._expiry)
        except (OverflowError, OSError, ValueError):
            # Key line: timestamp passed the schema but is outside the datetime range.
            return self._discard("snapshot timestamp out of range")

        if expired:
            return self._discard("expired snapshot")

        self._turns = list(snapshot.messages)
        return self.turns

    def _discard(self, reason: str) -> List[ChatTurn]:
        if config.DEBUG:
            print(f"STORE: discarding {reason} under", self._key)
        self._storage.remove_item(self._key)
        self._turns = []
        return self.turns

    def append(self, role: Role, content: str) -> ChatTurn:
        # 1) Create turn with current time
        # 2) Trim to the most recent max_messages (oldest dropped first; never reject the new turn)
        # 3) Persist with a fresh save time
        # 4) Notify renderers
        turn = ChatTurn(role=role, content=content, timestamp=self._clock())
        self._turns.append(turn)

        if len(self._turns) > self._max_messages:
            self._turns = self._turns[-self._max_messages :]

        self._save()
        for listener in self._listeners:
            listener(turn)
        return turn

    def clear(self, confirm: Confirm) -> bool:
        # Role: destructive action, only runs after explicit confirmation. Reseeds the welcome turn.
        confirmed = confirm() if callable(confirm) else bool(confirm)
        if not confirmed:
            return False

        self._turns = []
        self._storage.remove_item(self._key)
        self.append("assistant", self._welcome_message)
        return True

    def ensure_welcome(self) -> Optional[ChatTurn]:
        # Key line: an opened widget never shows an empty conversation.
        if self._turns:
            return None
        return self.append("assistant", self._welcome_message)

    def to_api_messages(self, system_prompt: str) -> List[Dict[str, str]]:
        return [{"role": "system", "content": system_prompt}] + [t.to_api_message() for t in self._turns]

    def _save(self) -> None:
        snapshot = ConversationSnapshot.capture(self._turns, self._clock())
        self._storage.set_item(self._key, snapshot.model_dump_json())
