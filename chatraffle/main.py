"""
Chat Raffle Service - FastAPI + Socket.IO Application

This service:
- Accepts operator connections over Socket.IO
- Connects each operator to a TikTok LIVE chat on request
- Collects chatters who post the raffle keyword and draws winners

RUNNING THE SERVER:
    python -m chatraffle.main
    uvicorn chatraffle.main:asgi_app --port 8091
"""

import logging
from datetime import datetime, timezone

import socketio
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from chatraffle import __version__
from chatraffle.config import settings
from chatraffle.ingest.tiktok import TikTokChatSource
from chatraffle.raffle.manager import SessionManager
from chatraffle.schemas.events import ConnectRequest
from chatraffle.utils.localization import message
from chatraffle.utils.logging import get_logger

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = get_logger(__name__, category="system")
connection_logger = get_logger(f"{__name__}.connection", category="connection")

_cors_origins = settings.cors_origins()

sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=_cors_origins)

app = FastAPI(
    title="Chat Raffle Service",
    description="Keyword raffles over live TikTok chat",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if _cors_origins == "*" else _cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Socket.IO on /socket.io, everything else falls through to FastAPI
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)


def emitter_for(sid: str):
    """Build the emit coroutine bound to one operator socket."""

    async def emit(event: str, data=None) -> None:
        await sio.emit(event, data, to=sid)

    return emit


sessions = SessionManager(emitter_for, TikTokChatSource)


# ============================================================================
# OPERATOR CHANNEL
# ============================================================================


@sio.event
async def connect(sid, environ, auth=None):
    connection_logger.info(f"Operator connected: {sid}")


@sio.on("connect-to-room")
async def connect_to_room(sid, data=None):
    """Handle {username, keyword, allowDuplicates, email} from the operator."""
    try:
        request = ConnectRequest.model_validate(data or {})
    except ValidationError as exc:
        connection_logger.warning(f"Invalid connect-to-room from {sid}: {exc}")
        await sio.emit("error", message("invalid_request"), to=sid)
        return

    session = sessions.get_or_create(sid)
    await session.connect(
        request.username,
        request.keyword,
        allow_duplicates=request.allow_duplicates,
        operator=request.email,
    )


@sio.on("draw-winner")
async def draw_winner(sid, data=None):
    await sessions.get_or_create(sid).draw_winner()


@sio.on("reset-raffle")
async def reset_raffle(sid, data=None):
    await sessions.get_or_create(sid).reset_raffle()


@sio.event
async def disconnect(sid, reason=None):
    connection_logger.info(f"Operator disconnected: {sid}")
    await sessions.close(sid)


# ============================================================================
# HTTP
# ============================================================================


@app.get("/health")
async def health_check():
    """Liveness probe with a summary of the active raffle sessions."""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "sessions": len(sessions),
    }


@app.on_event("startup")
async def startup_event():
    logger.info(f"Chat raffle service starting on {settings.host}:{settings.port}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Chat raffle service shutting down")
    try:
        await sessions.close_all()
    except Exception as exc:
        logger.error(f"Error closing raffle sessions: {exc}")


def run() -> None:
    uvicorn.run(asgi_app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
