"""
Session Manager

Keeps one RaffleSession per operator channel id so that every operator has
their own participant pool, keyword and duplicate policy.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from chatraffle.ingest.interfaces import ChatSourceFactory
from chatraffle.raffle.session import Emit, RaffleSession
from chatraffle.utils.logging import get_logger

logger = get_logger(__name__, category="raffle")


class SessionManager:
    """Registry of active operator sessions keyed by channel id."""

    def __init__(
        self,
        emitter_factory: Callable[[str], Emit],
        source_factory: ChatSourceFactory,
    ):
        """
        Args:
            emitter_factory: Returns the emit coroutine bound to one operator channel
            source_factory: Builds live chat sources for new sessions
        """
        self._emitter_factory = emitter_factory
        self._source_factory = source_factory
        self._sessions: Dict[str, RaffleSession] = {}

    def get(self, session_id: str) -> Optional[RaffleSession]:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> RaffleSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = RaffleSession(
                self._emitter_factory(session_id),
                self._source_factory,
                session_id=session_id,
            )
            self._sessions[session_id] = session
            logger.debug(f"Created raffle session {session_id}")
        return session

    async def close(self, session_id: str) -> None:
        """Tear down and forget the session of a departed operator."""
        session = self._sessions.pop(session_id, None)
        if session is not None:
            await session.close()
            logger.debug(f"Closed raffle session {session_id}")

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def snapshot(self) -> Dict[str, dict]:
        return {sid: session.snapshot() for sid, session in self._sessions.items()}
