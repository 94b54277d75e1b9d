"""
Raffle Session

One RaffleSession per operator channel. It owns the live connection handle,
the keyword/duplicate policy and the participant registry, and turns live
chat into operator notifications:

    connect-to-room -> live source -> chat -> keyword/dedup -> registry -> notify

Every listener attached to a live source is tagged with the connection
generation it belongs to. Reconnecting bumps the generation, so late events
from a superseded handle are dropped instead of leaking into the new raffle.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from chatraffle.config import settings
from chatraffle.errors import EmptyRegistryError
from chatraffle.ingest.interfaces import ChatSource, ChatSourceFactory
from chatraffle.raffle.registry import Added, ParticipantRegistry
from chatraffle.schemas.events import (
    ChatComment,
    ConnectionStatus,
    DuplicateEntry,
    Participant,
)
from chatraffle.utils.localization import localize, message
from chatraffle.utils.logging import get_logger, log_connection_event

logger = get_logger(__name__, category="raffle")
chat_logger = get_logger(f"{__name__}.chat", category="chat")
connection_logger = get_logger(f"{__name__}.connection", category="connection")

Emit = Callable[..., Awaitable[None]]

ERROR_POLICY_LENIENT = "lenient"
ERROR_POLICY_TEARDOWN = "teardown"


class SessionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"
    DISCONNECTED = "disconnected"


class RaffleSession:
    """Per-operator raffle state machine."""

    def __init__(
        self,
        emit: Emit,
        source_factory: ChatSourceFactory,
        *,
        session_id: Optional[str] = None,
        registry: Optional[ParticipantRegistry] = None,
        error_policy: Optional[str] = None,
        connect_timeout: Optional[float] = None,
        locale: Optional[str] = None,
    ):
        """
        Args:
            emit: Coroutine ``emit(event, data=None)`` delivering to this operator only
            source_factory: Builds a live chat source for a streamer username
            session_id: Operator channel id, used in logs
            registry: Participant registry (a fresh one by default)
            error_policy: "lenient" or "teardown"; defaults to settings.source_error_policy
            connect_timeout: Seconds to wait for the live connection
            locale: Message locale; defaults to settings.locale
        """
        self._emit = emit
        self._source_factory = source_factory
        self.session_id = session_id
        self.registry = registry if registry is not None else ParticipantRegistry()
        self.error_policy = (error_policy or settings.source_error_policy).lower()
        self.connect_timeout = (
            connect_timeout if connect_timeout is not None
            else settings.live_connect_timeout_seconds
        )
        self.locale = locale

        self.handle: Optional[ChatSource] = None
        self.state = SessionState.IDLE
        self.generation = 0
        self.keyword = ""
        self.allow_duplicates = False
        self.operator: Optional[str] = None
        self.source_username: Optional[str] = None

    # ------------------------------------------------------------------
    # Operator commands
    # ------------------------------------------------------------------

    async def connect(
        self,
        source_username: str,
        keyword: str,
        allow_duplicates: bool = False,
        operator: Optional[str] = None,
    ) -> bool:
        """
        Connect to a streamer's live chat, replacing any previous connection.

        A previous connection is torn down and the registry cleared before the
        new attempt starts. Failures are reported to the operator as a
        ``connection-success`` event with ``type="error"``.

        Returns:
            True if this attempt ended connected, False otherwise
        """
        self.operator = operator or None
        # Any earlier attempt starts a fresh raffle, even if its live
        # connection has already dropped or failed
        if self.source_username is not None:
            previous = self.source_username
            if self.handle is not None:
                await self._teardown()
            self.registry.clear()
            log_connection_event(connection_logger, self.operator, previous, "disconnect")

        self.source_username = source_username
        self.keyword = keyword.lower()
        self.allow_duplicates = bool(allow_duplicates)
        self.generation += 1
        generation = self.generation
        self.state = SessionState.CONNECTING

        try:
            handle = self._source_factory(source_username)
            self.handle = handle
            self._attach(handle, generation)
            await asyncio.wait_for(handle.connect(), timeout=self.connect_timeout)
        except Exception as exc:
            if generation != self.generation:
                return False
            connection_logger.warning(
                f"Connection to @{source_username} failed for {self.operator or '-'}: {exc}",
                exc_info=True,
            )
            failed = self._detach()
            self.state = SessionState.ERROR
            if failed is not None:
                await self._safe_disconnect(failed)
            await self._notify_status("error", localize(exc, self.locale))
            return False

        if generation != self.generation:
            # Superseded by a newer connect while waiting; that call already
            # dropped this handle from the session.
            handle.clear_listeners()
            await self._safe_disconnect(handle)
            return False

        self.state = SessionState.CONNECTED
        log_connection_event(connection_logger, self.operator, source_username, "connect")
        await self._notify_status(
            "success", message("connect_success", self.locale, username=source_username)
        )
        return True

    async def draw_winner(self) -> Optional[Participant]:
        """Pick a winner and send it to the operator. The winner stays in the pool."""
        try:
            winner = self.registry.draw_winner()
        except EmptyRegistryError:
            await self._emit("error", message("no_participants", self.locale))
            return None

        logger.info(
            f"Winner drawn for session {self.session_id}: {winner.username} "
            f"({winner.user_id}) out of {self.registry.size()}"
        )
        await self._emit("winner", winner.to_wire())
        return winner

    async def reset_raffle(self) -> None:
        self.registry.clear()
        logger.info(f"Raffle reset for session {self.session_id}")
        await self._emit("participant-count", 0)
        await self._emit("raffle-reset")

    async def close(self) -> None:
        """Operator channel went away: drop the live connection, keep the registry."""
        if self.handle is not None:
            await self._teardown()
            log_connection_event(
                connection_logger, self.operator, self.source_username, "disconnect"
            )
        self.state = SessionState.DISCONNECTED

    # ------------------------------------------------------------------
    # Live source events
    # ------------------------------------------------------------------

    async def handle_chat(self, generation: int, comment: ChatComment) -> None:
        if generation != self.generation or self.state is not SessionState.CONNECTED:
            return
        if self.keyword not in comment.comment.lower():
            return

        candidate = Participant.from_comment(comment)
        outcome = self.registry.try_add(candidate, self.allow_duplicates)

        if not isinstance(outcome, Added):
            chat_logger.debug(f"Duplicate entry from {candidate.username} ({candidate.user_id})")
            duplicate = DuplicateEntry(
                username=candidate.username,
                message=message("duplicate_entry", self.locale),
                profile_picture=candidate.profile_picture,
            )
            await self._emit("duplicate-entry", duplicate.model_dump(by_alias=True))
            return

        chat_logger.debug(
            f"Entry from {candidate.username} ({candidate.user_id}), total {outcome.count}"
        )
        await self._emit("valid-message", outcome.participant.to_wire())
        await self._emit("participant-count", outcome.count)

    async def handle_error(self, generation: int, error: Union[str, BaseException]) -> None:
        if generation != self.generation:
            return
        connection_logger.warning(f"Live source error on @{self.source_username}: {error}")
        await self._notify_status("error", localize(error, self.locale))

        if self.error_policy == ERROR_POLICY_TEARDOWN and self.handle is not None:
            await self._teardown()
            self.state = SessionState.ERROR
            log_connection_event(
                connection_logger, self.operator, self.source_username, "disconnect"
            )

    async def handle_disconnect(self, generation: int) -> None:
        if generation != self.generation:
            return
        self._detach()
        self.state = SessionState.DISCONNECTED
        await self._notify_status("error", message("live_dropped", self.locale))
        log_connection_event(
            connection_logger, self.operator, self.source_username, "disconnect"
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _attach(self, handle: ChatSource, generation: int) -> None:
        async def on_chat(comment: ChatComment) -> None:
            await self.handle_chat(generation, comment)

        async def on_error(error: Union[str, BaseException]) -> None:
            await self.handle_error(generation, error)

        async def on_disconnect() -> None:
            await self.handle_disconnect(generation)

        handle.on_chat(on_chat)
        handle.on_error(on_error)
        handle.on_disconnect(on_disconnect)

    def _detach(self) -> Optional[ChatSource]:
        handle, self.handle = self.handle, None
        if handle is not None:
            handle.clear_listeners()
        return handle

    async def _teardown(self) -> None:
        # Invalidate before awaiting so callbacks fired during disconnect are stale
        self.generation += 1
        handle = self._detach()
        if handle is not None:
            await self._safe_disconnect(handle)
        self.state = SessionState.IDLE

    async def _safe_disconnect(self, handle: ChatSource) -> None:
        try:
            await handle.disconnect()
        except Exception as exc:
            connection_logger.warning(
                f"Error disconnecting from @{getattr(handle, 'username', '?')}: {exc}"
            )

    async def _notify_status(self, status_type: str, text: str) -> None:
        await self._emit(
            "connection-success",
            ConnectionStatus(type=status_type, message=text).model_dump(),
        )

    def snapshot(self) -> Dict[str, Any]:
        """Summary of this session for health/diagnostics."""
        return {
            "state": self.state.value,
            "source": self.source_username,
            "participants": self.registry.size(),
            "allow_duplicates": self.allow_duplicates,
        }
