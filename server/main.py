"""FastAPI service streaming decoded ITS positions.

Start with::

    uvicorn server.main:app --host 0.0.0.0 --port 8000

On startup the service opens a TCP listener for ITS terminals (see
``server.config`` for the environment variables). WebSocket clients connect
to ``ws://<host>:8000/ws`` and receive one ``type="position"`` JSON message
per decoded sentence.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect

from server.broadcaster import add_subscriber, remove_subscriber
from server.config import load_settings
from server.listener import start_listener
from server.logging_config import setup_logging
from tracking.devices import DeviceRegistry

logger = logging.getLogger(__name__)

_QUEUE_MAX_SIZE = 10
_TIMEOUT_SECONDS = 5.0
_LISTENER_STOP_TIMEOUT = 1.0


async def _stop_listener(listener: asyncio.Server) -> None:
    listener.close()
    try:
        await asyncio.wait_for(listener.wait_closed(), timeout=_LISTENER_STOP_TIMEOUT)
    except TimeoutError:
        logger.warning("ITS listener did not close in time, continuing shutdown")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    settings = load_settings()
    setup_logging(settings)

    registry = DeviceRegistry(settings.devices, settings.register_unknown)
    listener = await start_listener(
        settings.tcp_host, settings.tcp_port, registry.resolve
    )
    application.state.registry = registry
    application.state.listener = listener
    try:
        yield
    finally:
        await _stop_listener(listener)


app = FastAPI(lifespan=_lifespan)


async def _send_messages_until_disconnect(
    queue: asyncio.Queue[str],
    websocket: WebSocket,
) -> None:
    try:
        while True:
            message = await asyncio.wait_for(queue.get(), timeout=_TIMEOUT_SECONDS)
            await websocket.send_text(message)
    except TimeoutError:
        await websocket.close(code=1001)
    except WebSocketDisconnect:
        pass


@app.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Report liveness and the number of registered devices."""
    return {"status": "ok", "devices": len(request.app.state.registry)}


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """Stream position JSON messages to a connected WebSocket client.

    Each client gets its own bounded queue (max ``_QUEUE_MAX_SIZE`` messages).
    The oldest message is dropped when the queue is full so slow clients do
    not stall the listener. The connection closes with code 1001, and the
    client should reconnect, if no message arrives within
    ``_TIMEOUT_SECONDS``.

    Args:
        websocket: The incoming WebSocket connection.
    """
    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=_QUEUE_MAX_SIZE)
    add_subscriber(queue)
    try:
        await websocket.accept()
        await _send_messages_until_disconnect(queue, websocket)
    finally:
        remove_subscriber(queue)
