"""Tracking package for decoding vehicle tracker sentences."""

from tracking.devices import DeviceRegistry, DeviceSession
from tracking.its import (
    CellTower,
    FieldConversionError,
    Network,
    PositionRecord,
    decode_sentence,
    match_sentence,
)

__all__ = [
    "CellTower",
    "DeviceRegistry",
    "DeviceSession",
    "FieldConversionError",
    "Network",
    "PositionRecord",
    "decode_sentence",
    "match_sentence",
]
