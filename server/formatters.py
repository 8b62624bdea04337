"""JSON formatting for decoded position records."""

import json
from typing import Any

from tracking.its.types import CellTower, Network, PositionRecord

__all__ = ["format_position_message"]


def _tower_to_dict(tower: CellTower) -> dict[str, Any]:
    return {
        "mcc": tower.mobile_country_code,
        "mnc": tower.mobile_network_code,
        "lac": tower.location_area_code,
        "cid": tower.cell_id,
        "signal": tower.signal_strength,
    }


def _network_to_list(network: Network | None) -> list[dict[str, Any]] | None:
    if network is None:
        return None
    return [_tower_to_dict(tower) for tower in network.cell_towers]


def format_position_message(record: PositionRecord) -> str:
    """Serialize a position record into a JSON string for WebSocket transmission."""
    return json.dumps({
        "type": "position",
        "protocol": record.protocol,
        "device_id": record.device_id,
        "time": record.time.isoformat() if record.time is not None else None,
        "valid": record.valid,
        "lat": record.latitude,
        "lon": record.longitude,
        "speed_knots": record.speed,
        "course": record.course,
        "alt": record.altitude,
        "satellites": record.satellites,
        "ignition": record.ignition,
        "charge": record.charge,
        "emergency": record.emergency,
        "power": record.power,
        "battery": record.battery,
        "input": record.input,
        "output": record.output,
        "alarm": record.alarm,
        "archive": record.archive,
        "event": record.event,
        "adc1": record.adc1,
        "adc2": record.adc2,
        "cell_towers": _network_to_list(record.network),
    })
