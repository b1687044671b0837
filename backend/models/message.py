# Role: Single chat turn schema for the widget conversation (role + content + timestamp).
# Frozen, so a turn is never mutated after creation; the store only truncates the sequence.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant", "system"]


class ChatTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_api_message(self) -> Dict[str, str]:
        # Key line: timestamps are never sent upstream.
        return {"role": self.role, "content": self.content}
