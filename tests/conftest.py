from datetime import datetime, timedelta, timezone

import pytest

from backend.core.conversation_store import ConversationStore
from backend.storage.local_storage import InMemoryStorage


class FakeClock:
    """Manually advanced clock for expiry and timestamp tests."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage, clock):
    return ConversationStore(
        storage=storage,
        max_messages=5,
        cache_expiry=timedelta(hours=24),
        welcome_message="Welcome!",
        clock=clock,
    )
