"""
TikTok LIVE Chat Source

Wraps TikTokLive's push client behind the ChatSource interface: comments,
stream end and connection loss are re-dispatched to whatever callbacks the
owning raffle session registered.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Set

from TikTokLive import TikTokLiveClient
from TikTokLive.events import CommentEvent, DisconnectEvent, LiveEndEvent

from chatraffle.errors import ConnectionFailure
from chatraffle.ingest.interfaces import (
    ChatCallback,
    DisconnectCallback,
    ErrorCallback,
)
from chatraffle.schemas.events import ChatComment
from chatraffle.utils.logging import get_logger

logger = get_logger(__name__, category="connection")

# Raised to listeners when the streamer ends the broadcast
LIVE_ENDED_CAUSE = "LIVE_HAS_ENDED"


def _avatar_url(user: object) -> str:
    """First avatar thumbnail URL of a TikTok user, or empty string."""
    thumb = getattr(user, "avatar_thumb", None)
    urls = getattr(thumb, "m_urls", None) or getattr(thumb, "url_list", None) or []
    return urls[0] if urls else ""


def comment_from_event(event: CommentEvent) -> ChatComment:
    """Normalize a TikTokLive CommentEvent into a ChatComment."""
    user = event.user
    return ChatComment(
        comment=event.comment or "",
        nickname=getattr(user, "nickname", "") or getattr(user, "unique_id", ""),
        profile_picture_url=_avatar_url(user),
        user_id=getattr(user, "id", None) or getattr(user, "unique_id", ""),
    )


class TikTokChatSource:
    """ChatSource backed by a single TikTokLiveClient."""

    def __init__(self, username: str, client: Optional[TikTokLiveClient] = None):
        self.username = username.lstrip("@")
        self._client = client or TikTokLiveClient(unique_id=f"@{self.username}")
        self._chat_callbacks: List[ChatCallback] = []
        self._error_callbacks: List[ErrorCallback] = []
        self._disconnect_callbacks: List[DisconnectCallback] = []
        self._pending: Set[asyncio.Task] = set()
        self._closing = False

        self._client.add_listener(CommentEvent, self._handle_comment)
        self._client.add_listener(DisconnectEvent, self._handle_disconnect)
        self._client.add_listener(LiveEndEvent, self._handle_live_end)

    def on_chat(self, callback: ChatCallback) -> None:
        self._chat_callbacks.append(callback)

    def on_error(self, callback: ErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def on_disconnect(self, callback: DisconnectCallback) -> None:
        self._disconnect_callbacks.append(callback)

    def clear_listeners(self) -> None:
        self._chat_callbacks.clear()
        self._error_callbacks.clear()
        self._disconnect_callbacks.clear()

    async def connect(self) -> None:
        """
        Open the push connection.

        Returns once the websocket is up; the client keeps reading in a
        background task whose failure is reported through on_error.

        Raises:
            ConnectionFailure: If the user is unknown, offline, or unreachable
        """
        self._closing = False
        try:
            task = await self._client.start()
        except Exception as exc:
            raise ConnectionFailure(f"{type(exc).__name__}: {exc}") from exc

        if task is not None:
            task.add_done_callback(self._on_client_task_done)
        logger.info(f"TikTok LIVE connection opened for @{self.username}")

    async def disconnect(self) -> None:
        self._closing = True
        try:
            await self._client.disconnect(close_client=True)
        except Exception as e:
            logger.warning(f"Error closing TikTok LIVE connection for @{self.username}: {e}")

    async def _handle_comment(self, event: CommentEvent) -> None:
        try:
            comment = comment_from_event(event)
        except Exception as e:
            logger.error(f"Failed to parse comment from @{self.username}: {e}")
            return
        for callback in list(self._chat_callbacks):
            await callback(comment)

    async def _handle_disconnect(self, event: DisconnectEvent) -> None:
        for callback in list(self._disconnect_callbacks):
            await callback()

    async def _handle_live_end(self, event: LiveEndEvent) -> None:
        await self._dispatch_error(LIVE_ENDED_CAUSE)

    async def _dispatch_error(self, error) -> None:
        for callback in list(self._error_callbacks):
            await callback(error)

    def _on_client_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled() or self._closing:
            return
        exc = task.exception()
        if exc is None:
            return
        logger.warning(f"TikTok LIVE client for @{self.username} stopped: {exc}")
        pending = asyncio.ensure_future(self._dispatch_error(exc))
        self._pending.add(pending)
        pending.add_done_callback(self._pending.discard)
