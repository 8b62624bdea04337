"""TCP listener for ITS terminals.

Each terminal keeps one TCP connection open and streams sentences terminated
by ``*``. Every frame is handed to the ITS decoder together with a
connection adapter, so the decoder can answer the handshake on the same
socket. Decoded records are broadcast to WebSocket subscribers.
"""

import asyncio
import contextlib
import functools
import logging
from typing import Any

from server.broadcaster import broadcast_message
from server.formatters import format_position_message
from tracking.its import FieldConversionError, PositionRecord, decode_sentence
from tracking.its.decoder import SessionResolver

__all__ = ["StreamConnection", "handle_connection", "start_listener"]

logger = logging.getLogger(__name__)

_FRAME_DELIMITER = b"*"
_FRAME_LIMIT = 4096
_ENCODING = "ascii"


class StreamConnection:
    """Adapts an asyncio stream writer to the decoder's connection interface."""

    def __init__(self, writer: asyncio.StreamWriter) -> None:
        self._writer = writer
        self.remote_address: Any = writer.get_extra_info("peername")

    def send(self, message: str) -> None:
        """Write without draining; the transport buffers the reply."""
        if self._writer.is_closing():
            logger.debug(f"Not replying to closed connection {self.remote_address}")
            return
        self._writer.write(message.encode(_ENCODING))


async def _read_frame(reader: asyncio.StreamReader) -> str | None:
    """Read one ``*``-terminated frame; None at end of stream.

    A trailing frame without terminator is returned once before EOF.
    """
    while True:
        try:
            raw = await reader.readuntil(_FRAME_DELIMITER)
        except asyncio.IncompleteReadError as e:
            raw = e.partial
            if not raw.strip():
                return None
        sentence = raw.decode(_ENCODING, errors="replace").strip()
        if sentence:
            return sentence


def process_sentence(
    sentence: str,
    connection: StreamConnection,
    resolve_session: SessionResolver,
) -> PositionRecord | None:
    """Decode one frame and broadcast the record, logging broken sentences."""
    try:
        record = decode_sentence(sentence, resolve_session, connection)
    except FieldConversionError:
        logger.exception(f"Failed to decode sentence from {connection.remote_address}")
        return None

    if record is not None:
        broadcast_message(format_position_message(record))
    return record


async def handle_connection(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    resolve_session: SessionResolver,
) -> None:
    """Serve one terminal until it disconnects."""
    connection = StreamConnection(writer)
    logger.info(f"Terminal connected from {connection.remote_address}")
    try:
        while True:
            sentence = await _read_frame(reader)
            if sentence is None:
                break
            process_sentence(sentence, connection, resolve_session)
    except asyncio.LimitOverrunError:
        logger.warning(
            f"Frame from {connection.remote_address} exceeds {_FRAME_LIMIT} bytes, "
            "closing connection"
        )
    except ConnectionError as e:
        logger.info(f"Connection from {connection.remote_address} lost: {e}")
    finally:
        writer.close()
        with contextlib.suppress(ConnectionError):
            await writer.wait_closed()
        logger.info(f"Terminal {connection.remote_address} disconnected")


async def start_listener(
    host: str,
    port: int,
    resolve_session: SessionResolver,
) -> asyncio.Server:
    """Start accepting terminal connections; the caller closes the server."""
    server = await asyncio.start_server(
        functools.partial(handle_connection, resolve_session=resolve_session),
        host,
        port,
        limit=_FRAME_LIMIT,
    )
    address = server.sockets[0].getsockname()
    logger.info(f"ITS listener on {address}")
    return server
