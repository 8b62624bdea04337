"""ITS tracker protocol decoder."""

from tracking.its.alarms import decode_alarm
from tracking.its.cells import decode_network
from tracking.its.decoder import (
    HANDSHAKE_PREFIX,
    HANDSHAKE_REPLY,
    decode_sentence,
    respond_to_handshake,
)
from tracking.its.errors import FieldConversionError
from tracking.its.grammar import SentenceMatch, match_sentence
from tracking.its.types import CellTower, Network, PositionRecord

__all__ = [
    "HANDSHAKE_PREFIX",
    "HANDSHAKE_REPLY",
    "CellTower",
    "FieldConversionError",
    "Network",
    "PositionRecord",
    "SentenceMatch",
    "decode_alarm",
    "decode_network",
    "decode_sentence",
    "match_sentence",
    "respond_to_handshake",
]
