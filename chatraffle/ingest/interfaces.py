from __future__ import annotations

from typing import Awaitable, Callable, Protocol, Union

from chatraffle.schemas.events import ChatComment

ChatCallback = Callable[[ChatComment], Awaitable[None]]
ErrorCallback = Callable[[Union[str, BaseException]], Awaitable[None]]
DisconnectCallback = Callable[[], Awaitable[None]]


class ChatSource(Protocol):
    """A push connection to one streamer's live chat."""

    username: str

    async def connect(self) -> None:
        ...

    async def disconnect(self) -> None:
        ...

    def on_chat(self, callback: ChatCallback) -> None:
        ...

    def on_error(self, callback: ErrorCallback) -> None:
        ...

    def on_disconnect(self, callback: DisconnectCallback) -> None:
        ...

    def clear_listeners(self) -> None:
        ...


ChatSourceFactory = Callable[[str], ChatSource]
