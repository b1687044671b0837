# Role: Persisted unit of the conversation. Serialized as {"messages": [...], "timestamp": epoch-millis},
# the same document a browser widget would keep in local storage.

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List

from pydantic import BaseModel, Field

from backend.models.message import ChatTurn


def to_epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class ConversationSnapshot(BaseModel):
    messages: List[ChatTurn] = Field(default_factory=list)
    timestamp: int

    @classmethod
    def capture(cls, turns: List[ChatTurn], saved_at: datetime) -> "ConversationSnapshot":
        return cls(messages=list(turns), timestamp=to_epoch_millis(saved_at))

    @property
    def saved_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)

    def is_expired(self, now: datetime, expiry: timedelta) -> bool:
        # Key line: valid only while now - saved_at < expiry; the whole snapshot expires at once.
        return not (now - self.saved_at < expiry)
