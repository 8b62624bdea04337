"""Fan-out of position messages to WebSocket subscriber queues.

All functions run on the event loop thread: the TCP listener and the
WebSocket endpoints share one loop, so queues are touched directly.
"""

import asyncio
import logging

__all__ = [
    "add_subscriber",
    "broadcast_message",
    "remove_subscriber",
    "subscriber_count",
]

logger = logging.getLogger(__name__)

_subscriber_queues: list[asyncio.Queue[str]] = []


def add_subscriber(queue: asyncio.Queue[str]) -> None:
    """Add a new subscriber queue to the broadcast list."""
    _subscriber_queues.append(queue)


def remove_subscriber(queue: asyncio.Queue[str]) -> None:
    """Remove a subscriber queue; unknown queues are ignored."""
    if queue in _subscriber_queues:
        _subscriber_queues.remove(queue)


def subscriber_count() -> int:
    return len(_subscriber_queues)


def _enqueue_message(queue: asyncio.Queue[str], message: str) -> None:
    # Slow clients lose their oldest message rather than stalling the listener
    if queue.full():
        queue.get_nowait()
        logger.debug("Subscriber queue full, dropped oldest message")
    queue.put_nowait(message)


def broadcast_message(message: str) -> None:
    """Put a message on every active subscriber queue."""
    for queue in list(_subscriber_queues):
        _enqueue_message(queue, message)
