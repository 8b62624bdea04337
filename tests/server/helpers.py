"""Helper factories for server tests."""

from datetime import datetime, timezone

from tracking.its.types import CellTower, Network, PositionRecord


def make_network() -> Network:
    network = Network(CellTower(404, 45, 0x61B4, 0x3F7D5, 5))
    network.add_cell_tower(CellTower(404, 45, 0x61B4, 0x3F7D6))
    return network


def make_record(with_network: bool = True) -> PositionRecord:
    return PositionRecord(
        device_id=7,
        time=datetime(2018, 11, 9, 8, 35, 42, tzinfo=timezone.utc),
        valid=True,
        latitude=12.975095,
        longitude=77.668045,
        speed=19.4,
        course=271.5,
        satellites=12,
        ignition=True,
        input=11,
        output=2,
        alarm="sos",
        event=1,
        network=make_network() if with_network else None,
    )
