"""ITS sentence decoder.

Turns one framed sentence into a ``PositionRecord``:

    raw sentence -> match_sentence -> tagged blocks -> PositionRecord

Handshake:
    Terminals open a session with a sentence starting with ``$,01,``. The
    server must answer ``$,1,*`` on the same connection, whether or not the
    rest of the sentence decodes. The reply is written before matching and is
    not awaited.

Precedence:
    Some attributes can be supplied by more than one grammar branch. They are
    applied in wire order and the last assignment wins:
        alarm:    type header "EMR" -> SOS, then the effective status alarm
        status:   header status, then the status at the identity position
        valid:    identity digit, then the validity letter
        altitude: extended block, then the simple trailer
        speed:    rich trailer, then the simple trailer
    In practice the grammar only populates one branch of each pair.
"""

import logging
from collections.abc import Callable
from typing import Any, Protocol

from tracking.devices import DeviceSession
from tracking.its.alarms import ALARM_SOS, EMERGENCY_TYPE, decode_alarm
from tracking.its.cells import decode_network
from tracking.its.fields import (
    assemble_datetime,
    convert_latitude,
    convert_longitude,
    knots_from_kph,
    parse_binary_field,
    parse_flag_field,
    parse_float_field,
    parse_int_field,
)
from tracking.its.grammar import (
    ExtendedBlock,
    RichTrailer,
    SentenceMatch,
    SimpleTrailer,
    StatusIdentity,
    TelemetryHeader,
    TypeHeader,
    ValidityIdentity,
    match_sentence,
)
from tracking.its.types import PositionRecord

__all__ = [
    "HANDSHAKE_PREFIX",
    "HANDSHAKE_REPLY",
    "Connection",
    "SessionResolver",
    "decode_sentence",
    "respond_to_handshake",
]

logger = logging.getLogger(__name__)

HANDSHAKE_PREFIX = "$,01,"
HANDSHAKE_REPLY = "$,1,*"

_HISTORY_FLAG = "H"


class Connection(Protocol):
    """Outbound side of the terminal's connection."""

    remote_address: Any

    def send(self, message: str) -> None:
        """Queue ``message`` for writing without waiting for completion."""


SessionResolver = Callable[[Connection | None, str], DeviceSession | None]


def respond_to_handshake(sentence: str, connection: Connection | None) -> bool:
    """Send the acknowledgment if ``sentence`` opens a session.

    Returns:
        True if a reply was sent
    """
    if connection is None or not sentence.startswith(HANDSHAKE_PREFIX):
        return False
    connection.send(HANDSHAKE_REPLY)
    return True


def _apply_header(record: PositionRecord, header: TelemetryHeader | TypeHeader) -> None:
    if isinstance(header, TypeHeader):
        if header.type == EMERGENCY_TYPE:
            record.alarm = ALARM_SOS
        return
    record.event = parse_int_field(header.event, "event")
    if header.history == _HISTORY_FLAG:
        record.archive = True


def _effective_status(match: SentenceMatch) -> str | None:
    status = None
    if isinstance(match.header, TelemetryHeader):
        status = match.header.status
    if isinstance(match.identity, StatusIdentity):
        status = match.identity.status
    return status


def _apply_status(record: PositionRecord, match: SentenceMatch) -> None:
    status = _effective_status(match)
    if status is None:
        return
    alarm = decode_alarm(status)
    if alarm is not None:
        record.alarm = alarm


def _apply_validity(record: PositionRecord, match: SentenceMatch) -> None:
    if isinstance(match.identity, ValidityIdentity):
        record.valid = parse_int_field(match.identity.valid, "valid") == 1
    if match.validity is not None:
        record.valid = match.validity == "A"


def _apply_extended(record: PositionRecord, extended: ExtendedBlock) -> None:
    record.altitude = parse_float_field(extended.altitude, "altitude")
    record.ignition = parse_flag_field(extended.ignition, "ignition")
    record.charge = parse_flag_field(extended.charge, "charge")
    record.power = parse_float_field(extended.power, "power")
    record.battery = parse_float_field(extended.battery, "battery")
    record.emergency = parse_flag_field(extended.emergency, "emergency")
    record.network = decode_network(extended.cells)
    record.input = parse_binary_field(extended.inputs, "input")
    record.output = parse_binary_field(extended.outputs, "output")

    if extended.adc is not None:
        record.adc1 = parse_float_field(extended.adc.adc1, "adc1")
        record.adc2 = parse_float_field(extended.adc.adc2, "adc2")


def _apply_trailer(
    record: PositionRecord, trailer: RichTrailer | SimpleTrailer
) -> None:
    if isinstance(trailer, RichTrailer):
        record.speed = knots_from_kph(parse_float_field(trailer.speed, "speed"))
        record.course = parse_float_field(trailer.course, "course")
        record.satellites = parse_int_field(trailer.satellites, "satellites")
        if trailer.extended is not None:
            _apply_extended(record, trailer.extended)
    else:
        record.altitude = parse_float_field(trailer.altitude, "altitude")
        record.speed = knots_from_kph(parse_float_field(trailer.speed, "speed"))


def _build_record(match: SentenceMatch, session: DeviceSession) -> PositionRecord:
    """Apply the matched blocks to a new record in wire order."""
    record = PositionRecord(device_id=session.device_id)

    _apply_header(record, match.header)
    _apply_status(record, match)
    _apply_validity(record, match)

    record.time = assemble_datetime(*match.date, *match.time)
    record.latitude = convert_latitude(*match.latitude)
    record.longitude = convert_longitude(*match.longitude)

    _apply_trailer(record, match.trailer)
    return record


def decode_sentence(
    sentence: str,
    resolve_session: SessionResolver,
    connection: Connection | None = None,
) -> PositionRecord | None:
    """Decode one ITS sentence.

    This is the main entry point. It performs:
    1. Handshake reply (``$,01,`` prefix, only when a connection is given)
    2. Grammar match
    3. Device session lookup
    4. Field extraction in wire order

    Args:
        sentence: One sentence with transport framing removed
        resolve_session: Maps (connection, device identifier) to a session
        connection: Connection the sentence arrived on, used for the
            handshake reply and passed to ``resolve_session``

    Returns:
        PositionRecord, or None if the sentence is not an ITS sentence or the
        device is unknown

    Raises:
        FieldConversionError: If a matched token cannot be converted. This
            indicates a broken sentence (e.g. latitude "95.0") and is left to
            the caller to log.

    Example:
        >>> record = decode_sentence(sentence, DeviceRegistry([imei]).resolve)
        >>> record.alarm
        'sos'
    """
    respond_to_handshake(sentence, connection)

    match = match_sentence(sentence)
    if match is None:
        logger.debug(f"Not an ITS sentence: {sentence!r}")
        return None

    session = resolve_session(connection, match.imei)
    if session is None:
        logger.debug(f"Dropping sentence from unknown device {match.imei}")
        return None

    return _build_record(match, session)
