"""ITS sentence grammar.

ITS terminals (AIS-140 style vehicle trackers) send comma-separated ASCII
sentences whose shape varies with firmware and report type. Rather than a
fixed field list, a sentence is matched against one regular expression with
alternative header layouts and optional trailing blocks.

Sentence Format (telemetry header, rich trailer with all blocks):
    $,01,ITS,1.0.2,NR,01,L,861693034634154,KA01G1234,1,09112018,083542,A,12.975095,N,077.668045,E,36.0,271.5,12,920.0,1.2,0.9,AIRTEL,1,1,12.6,4.1,0,C,5,404,45,61B4,3F7D5,7,61B4,3F7D6,0,0,0,0,0,0,0,0,0,1011,10,3,1.25,2.50,*
     |  |   |     |  |  | |               |         | |        |      | |           |                         |
     |  |   |     |  |  | |               |         | |        |      | |           |                         +-- speed, course, satellites, extended block
     |  |   |     |  |  | |               |         | |        |      | +-----------+-- latitude/longitude + hemisphere
     |  |   |     |  |  | |               |         | |        |      +-- validity letter (optional)
     |  |   |     |  |  | |               |         | +--------+-- date (ddmmyyyy), time (hhmmss)
     |  |   |     |  |  | |               +---------+-- vehicle registration + validity digit
     |  |   |     |  |  | +-- device identifier (15 digits)
     |  |   |     |  |  +-- history flag (L=live, H=history)
     |  |   |     |  +-- event code
     |  |   |     +-- status code (two letters)
     |  +---+-- vendor, firmware version
     +-- event separator

Alternatives, tried in order (first match wins):
    Header:   vendor,firmware,status,event,history  |  type (e.g. EMR)
    Identity: status  |  registration,validity digit
    Trailer:  speed,course,satellites[,extended[,adc]]  |  altitude,speed

Every optional block is reported as its own tagged value (None when absent),
so the decoder never infers presence from token counts.
"""

import re
from dataclasses import dataclass

from tracking.its.cursor import FieldCursor

__all__ = [
    "AdcBlock",
    "ExtendedBlock",
    "RichTrailer",
    "SentenceMatch",
    "SimpleTrailer",
    "StatusIdentity",
    "TelemetryHeader",
    "TypeHeader",
    "ValidityIdentity",
    "match_sentence",
]

_PATTERN = re.compile(
    r"""
    [^$]*\$
    ,?[^,]+,                                # event separator
    (?:
        [^,]+,                              # vendor
        [^,]+,                              # firmware version
        (?P<header_status>..),
        (?P<event>\d+),
        (?P<history>[LH]),
    |
        (?P<type>[^,]+),
    )
    (?P<imei>\d{15}),
    (?:
        (?P<identity_status>..),
    |
        [^,]*,                              # vehicle registration
        (?P<identity_valid>[01]),
    )
    (?P<day>\d\d),?(?P<month>\d\d),?(?P<year>\d{4}|\d\d),
    (?P<hour>\d\d),?(?P<minute>\d\d),?(?P<second>\d\d),
    (?:(?P<validity>[AV]),)?
    (?P<latitude>\d+\.\d+),(?P<latitude_hemisphere>[NS]),
    (?P<longitude>\d+\.\d+),(?P<longitude_hemisphere>[EW]),
    (?:
        (?P<speed>\d+\.?\d*),
        (?P<course>\d+\.?\d*),
        (?P<satellites>\d+),
        (?:
            (?P<altitude>\d+\.?\d*),
            \d+\.?\d*,                      # pdop
            \d+\.?\d*,                      # hdop
            [^,]*,                          # operator name
            (?P<ignition>[01]),
            (?P<charge>[01]),
            (?P<power>\d+\.?\d*),
            (?P<battery>\d+\.?\d*),
            (?P<emergency>[01]),
            [CO]?,                          # tamper
            (?P<cells>(?:[0-9A-Fa-f]+,){5}(?:-?[0-9A-Fa-f]+,){12})
            (?P<inputs>[01]{4}),
            (?P<outputs>[01]{2}),
            (?:
                \d+,                        # frame index
                (?P<adc1>\d+\.\d+),
                (?P<adc2>\d+\.\d+),
            )?
        )?
    |
        (?P<simple_altitude>-?\d+\.\d+),
        (?P<simple_speed>\d+\.\d+),
    )
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class TelemetryHeader:
    """Header variant carrying vendor status, event code and history flag."""

    status: str
    event: str
    history: str


@dataclass(frozen=True)
class TypeHeader:
    """Header variant carrying only a free-form type token (e.g. "EMR")."""

    type: str


@dataclass(frozen=True)
class StatusIdentity:
    """Identity variant: a two-letter status follows the device identifier."""

    status: str


@dataclass(frozen=True)
class ValidityIdentity:
    """Identity variant: vehicle registration and a 0/1 validity digit."""

    valid: str


@dataclass(frozen=True)
class AdcBlock:
    adc1: str
    adc2: str


@dataclass(frozen=True)
class ExtendedBlock:
    """Optional telemetry block of the rich trailer.

    ``cells`` holds the 17 cell block tokens in wire order.
    """

    altitude: str
    ignition: str
    charge: str
    power: str
    battery: str
    emergency: str
    cells: tuple[str, ...]
    inputs: str
    outputs: str
    adc: AdcBlock | None


@dataclass(frozen=True)
class RichTrailer:
    speed: str
    course: str
    satellites: str
    extended: ExtendedBlock | None


@dataclass(frozen=True)
class SimpleTrailer:
    altitude: str
    speed: str


@dataclass(frozen=True)
class SentenceMatch:
    """Result of matching one sentence against the ITS grammar.

    Attributes:
        tokens: Every captured group in grammar order; None for groups that
            did not participate in the match.
        header: The header alternative that matched.
        imei: 15-digit device identifier.
        identity: The identity alternative that matched.
        date: (day, month, year) tokens.
        time: (hour, minute, second) tokens.
        validity: "A"/"V" letter, or None when absent.
        latitude: (degrees, hemisphere) tokens.
        longitude: (degrees, hemisphere) tokens.
        trailer: The trailer alternative that matched.
    """

    tokens: tuple[str | None, ...]
    header: TelemetryHeader | TypeHeader
    imei: str
    identity: StatusIdentity | ValidityIdentity
    date: tuple[str, str, str]
    time: tuple[str, str, str]
    validity: str | None
    latitude: tuple[str, str]
    longitude: tuple[str, str]
    trailer: RichTrailer | SimpleTrailer


def _split_cells(cells: str) -> tuple[str, ...]:
    return tuple(cells.rstrip(",").split(","))


def _read_header(cursor: FieldCursor) -> TelemetryHeader | TypeHeader:
    telemetry = cursor.take_block(3)
    type_block = cursor.take_block(1)
    if telemetry is not None:
        return TelemetryHeader(*telemetry)
    return TypeHeader(*type_block)


def _read_identity(cursor: FieldCursor) -> StatusIdentity | ValidityIdentity:
    status = cursor.take_block(1)
    valid = cursor.take_block(1)
    if status is not None:
        return StatusIdentity(*status)
    return ValidityIdentity(*valid)


def _read_extended(cursor: FieldCursor) -> ExtendedBlock | None:
    block = cursor.take_block(9)
    adc = cursor.take_block(2)
    if block is None:
        return None
    altitude, ignition, charge, power, battery, emergency, cells, inputs, outputs = (
        block
    )
    return ExtendedBlock(
        altitude=altitude,
        ignition=ignition,
        charge=charge,
        power=power,
        battery=battery,
        emergency=emergency,
        cells=_split_cells(cells),
        inputs=inputs,
        outputs=outputs,
        adc=AdcBlock(*adc) if adc is not None else None,
    )


def _read_trailer(cursor: FieldCursor) -> RichTrailer | SimpleTrailer:
    rich = cursor.take_block(3)
    extended = _read_extended(cursor)
    simple = cursor.take_block(2)
    if rich is not None:
        return RichTrailer(*rich, extended=extended)
    return SimpleTrailer(*simple)


def _build_match(tokens: tuple[str | None, ...]) -> SentenceMatch:
    """Walk the captured groups in grammar order and tag each block."""
    cursor = FieldCursor(tokens)

    header = _read_header(cursor)
    imei = cursor.next()
    identity = _read_identity(cursor)
    date = cursor.take(3)
    time = cursor.take(3)
    validity = cursor.next()
    latitude = cursor.take(2)
    longitude = cursor.take(2)
    trailer = _read_trailer(cursor)

    if cursor.remaining:
        raise RuntimeError(f"{cursor.remaining} grammar tokens left unread")

    return SentenceMatch(
        tokens=tokens,
        header=header,
        imei=imei,
        identity=identity,
        date=date,
        time=time,
        validity=validity,
        latitude=latitude,
        longitude=longitude,
        trailer=trailer,
    )


def match_sentence(sentence: str) -> SentenceMatch | None:
    """Match a sentence against the ITS grammar.

    Args:
        sentence: One sentence with transport framing removed

    Returns:
        SentenceMatch with every alternative resolved, or None if the sentence
        is not an ITS sentence. None is not an error: the caller should simply
        ignore the sentence.

    Example:
        >>> result = match_sentence(
        ...     "$,01,ITS,1.0,NR,01,L,861693034634154,KA01G1234,1,"
        ...     "09112018,083542,12.975095,N,077.668045,E,0.0,95.2,*"
        ... )
        >>> result.header
        TelemetryHeader(status='NR', event='01', history='L')
        >>> result.trailer
        SimpleTrailer(altitude='0.0', speed='95.2')
    """
    match = _PATTERN.match(sentence)
    if match is None:
        return None
    return _build_match(match.groups())
