"""
Integration tests for the Socket.IO operator handlers.

The handlers are called directly the way python-socketio dispatches them;
outbound events are captured from a patched AsyncServer.emit.
"""
from unittest.mock import AsyncMock

import pytest

from chatraffle import main
from chatraffle.raffle.manager import SessionManager


@pytest.fixture
def sio_emit(monkeypatch):
    emit = AsyncMock()
    monkeypatch.setattr(main.sio, "emit", emit)
    return emit


@pytest.fixture
def sessions(monkeypatch, source_factory, sio_emit):
    manager = SessionManager(main.emitter_for, source_factory)
    monkeypatch.setattr(main, "sessions", manager)
    return manager


def sent(emit_mock, sid):
    """(event, data) pairs emitted to one operator socket."""
    return [
        (call.args[0], call.args[1] if len(call.args) > 1 else None)
        for call in emit_mock.await_args_list
        if call.kwargs.get("to") == sid
    ]


@pytest.mark.integration
class TestOperatorChannel:
    @pytest.mark.asyncio
    async def test_full_raffle_flow(self, sessions, source_factory, sio_emit):
        await main.connect("sid-1", {})
        await main.connect_to_room(
            "sid-1",
            {"username": "alice", "keyword": "Join", "allowDuplicates": False, "email": "op@example.com"},
        )
        source = source_factory.last
        await source.push_chat("U1", "please JOIN now", nickname="Uno")
        await source.push_chat("U1", "join again", nickname="Uno")
        await source.push_chat("U2", "join", nickname="Dos")
        await main.draw_winner("sid-1")

        events = sent(sio_emit, "sid-1")
        names = [name for name, _ in events]
        assert names == [
            "connection-success",
            "valid-message",
            "participant-count",
            "duplicate-entry",
            "valid-message",
            "participant-count",
            "winner",
        ]
        assert events[0][1]["type"] == "success"
        assert events[-1][1]["userId"] in {"U1", "U2"}

        await main.reset_raffle("sid-1")
        assert sent(sio_emit, "sid-1")[-2:] == [("participant-count", 0), ("raffle-reset", None)]

    @pytest.mark.asyncio
    async def test_invalid_connect_payload(self, sessions, sio_emit):
        await main.connect_to_room("sid-2", {"keyword": "join"})

        sio_emit.assert_awaited_once_with("error", "Geçersiz istek", to="sid-2")
        assert "sid-2" not in sessions

    @pytest.mark.asyncio
    async def test_draw_without_participants(self, sessions, sio_emit):
        await main.draw_winner("sid-3")
        assert sent(sio_emit, "sid-3") == [("error", "Henüz katılımcı yok!")]

    @pytest.mark.asyncio
    async def test_operator_disconnect_closes_live_connection(self, sessions, source_factory):
        await main.connect_to_room("sid-4", {"username": "alice", "keyword": "join"})
        source = source_factory.last

        await main.disconnect("sid-4")

        assert source.disconnect_calls == 1
        assert "sid-4" not in sessions

    @pytest.mark.asyncio
    async def test_events_only_reach_their_operator(self, sessions, source_factory, sio_emit):
        await main.connect_to_room("sid-a", {"username": "alice", "keyword": "join"})
        alice = source_factory.last
        await main.connect_to_room("sid-b", {"username": "bob", "keyword": "join"})

        await alice.push_chat("U1", "join")

        assert ("participant-count", 1) in sent(sio_emit, "sid-a")
        assert [name for name, _ in sent(sio_emit, "sid-b")] == ["connection-success"]
