"""Tests for the ITS TCP connection handler."""

import asyncio
import json
import logging
from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest

from server.broadcaster import add_subscriber, remove_subscriber
from server.listener import StreamConnection, handle_connection, process_sentence
from tests.its.samples import IMEI, RICH_FULL, telemetry_sentence
from tracking.devices import DeviceRegistry


def _make_writer(closing: bool = False) -> MagicMock:
    writer = MagicMock()
    writer.get_extra_info.return_value = ("127.0.0.1", 40312)
    writer.is_closing.return_value = closing
    writer.wait_closed = AsyncMock()
    return writer


def _run_connection(data: bytes, writer: MagicMock, limit: int = 4096) -> None:
    async def _run() -> None:
        reader = asyncio.StreamReader(limit=limit)
        reader.feed_data(data)
        reader.feed_eof()
        await handle_connection(reader, writer, DeviceRegistry([IMEI]).resolve)

    asyncio.run(_run())


@pytest.fixture
def subscriber() -> Iterator[asyncio.Queue[str]]:
    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=10)
    add_subscriber(queue)
    yield queue
    remove_subscriber(queue)


def _drain(queue: asyncio.Queue[str]) -> list[dict]:
    messages = []
    while not queue.empty():
        messages.append(json.loads(queue.get_nowait()))
    return messages


class TestStreamConnection:
    def test_send_writes_ascii(self):
        writer = _make_writer()
        connection = StreamConnection(writer)
        connection.send("$,1,*")
        writer.write.assert_called_once_with(b"$,1,*")
        assert connection.remote_address == ("127.0.0.1", 40312)

    def test_send_skipped_when_closing(self):
        writer = _make_writer(closing=True)
        StreamConnection(writer).send("$,1,*")
        writer.write.assert_not_called()


class TestProcessSentence:
    def test_broadcasts_record(self, subscriber):
        connection = StreamConnection(_make_writer())
        record = process_sentence(RICH_FULL, connection, DeviceRegistry([IMEI]).resolve)
        assert record is not None
        [message] = _drain(subscriber)
        assert message["type"] == "position"
        assert message["device_id"] == record.device_id

    def test_conversion_error_logged(self, subscriber, caplog):
        connection = StreamConnection(_make_writer())
        sentence = telemetry_sentence(position="95.000000,N,077.668045,E")
        with caplog.at_level(logging.ERROR, logger="server.listener"):
            record = process_sentence(
                sentence, connection, DeviceRegistry([IMEI]).resolve
            )
        assert record is None
        assert "Failed to decode" in caplog.text
        assert _drain(subscriber) == []

    def test_unknown_device_not_broadcast(self, subscriber):
        connection = StreamConnection(_make_writer())
        assert process_sentence(RICH_FULL, connection, DeviceRegistry().resolve) is None
        assert _drain(subscriber) == []


class TestHandleConnection:
    def test_frames_split_on_terminator(self, subscriber):
        writer = _make_writer()
        second = telemetry_sentence(history="H")
        _run_connection(f"{RICH_FULL}\r\n{second}\r\n".encode("ascii"), writer)

        messages = _drain(subscriber)
        assert len(messages) == 2
        assert messages[0]["archive"] is False
        assert messages[1]["archive"] is True
        assert writer.write.call_count == 2
        writer.close.assert_called_once()

    def test_unterminated_tail_is_decoded(self, subscriber):
        writer = _make_writer()
        _run_connection(RICH_FULL.rstrip("*").encode("ascii"), writer)
        assert len(_drain(subscriber)) == 1

    def test_handshake_for_unknown_frame(self, subscriber):
        writer = _make_writer()
        _run_connection(b"$,01,hello*", writer)
        writer.write.assert_called_once_with(b"$,1,*")
        assert _drain(subscriber) == []

    def test_oversized_frame_closes(self, subscriber, caplog):
        writer = _make_writer()
        with caplog.at_level(logging.WARNING, logger="server.listener"):
            _run_connection(b"$" + b"0" * 200, writer, limit=64)
        assert "exceeds" in caplog.text
        writer.close.assert_called_once()
        writer.wait_closed.assert_awaited_once()

    def test_conversion_error_keeps_connection(self, subscriber):
        writer = _make_writer()
        broken = telemetry_sentence(date_time="09132018,083542")
        _run_connection(f"{broken}{RICH_FULL}".encode("ascii"), writer)
        assert len(_drain(subscriber)) == 1
