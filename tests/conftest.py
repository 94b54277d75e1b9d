import asyncio
from typing import Any, List, Optional, Tuple

import pytest

from chatraffle.config import settings
from chatraffle.schemas.events import ChatComment


class FakeChatSource:
    """In-memory live source; tests push chat/error/disconnect events by hand."""

    def __init__(self, username: str, fail_with: Optional[BaseException] = None):
        self.username = username
        self.fail_with = fail_with
        self.gate: Optional[asyncio.Event] = None
        self.connected = False
        self.connect_calls = 0
        self.disconnect_calls = 0
        self._chat = []
        self._error = []
        self._disconnect = []

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False

    def on_chat(self, callback) -> None:
        self._chat.append(callback)

    def on_error(self, callback) -> None:
        self._error.append(callback)

    def on_disconnect(self, callback) -> None:
        self._disconnect.append(callback)

    def clear_listeners(self) -> None:
        self._chat.clear()
        self._error.clear()
        self._disconnect.clear()

    @property
    def listener_count(self) -> int:
        return len(self._chat) + len(self._error) + len(self._disconnect)

    async def push_chat(self, user_id, comment: str, nickname: Optional[str] = None, avatar: str = "") -> None:
        event = ChatComment(
            comment=comment,
            nickname=nickname or f"user{user_id}",
            profile_picture_url=avatar,
            user_id=user_id,
        )
        for callback in list(self._chat):
            await callback(event)

    async def push_error(self, error) -> None:
        for callback in list(self._error):
            await callback(error)

    async def push_disconnect(self) -> None:
        for callback in list(self._disconnect):
            await callback()


class FakeSourceFactory:
    """Builds FakeChatSource instances and remembers them in creation order."""

    def __init__(self):
        self.sources: List[FakeChatSource] = []
        self.fail_with: Optional[BaseException] = None
        self.gated = False

    def __call__(self, username: str) -> FakeChatSource:
        source = FakeChatSource(username, fail_with=self.fail_with)
        if self.gated:
            source.gate = asyncio.Event()
        self.sources.append(source)
        return source

    @property
    def last(self) -> FakeChatSource:
        return self.sources[-1]


class RecordingEmitter:
    """Stands in for the operator channel; records (event, data) pairs."""

    def __init__(self):
        self.events: List[Tuple[str, Any]] = []

    async def __call__(self, event: str, data: Any = None) -> None:
        self.events.append((event, data))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def payloads(self, name: str) -> List[Any]:
        return [data for event, data in self.events if event == name]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    """Pin locale and error policy so message assertions are stable."""
    monkeypatch.setattr(settings, "locale", "tr")
    monkeypatch.setattr(settings, "source_error_policy", "lenient")
    monkeypatch.setattr(settings, "live_connect_timeout_seconds", 5.0)
    yield


@pytest.fixture
def source_factory():
    return FakeSourceFactory()


@pytest.fixture
def emitter():
    return RecordingEmitter()
