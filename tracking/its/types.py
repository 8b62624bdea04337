"""ITS data types for decoded sentences.

This module defines dataclasses for the decoded position record and the
cellular network context attached to it.

Design Decisions:
    1. Optional fields (float | None): ITS sentences come in several shapes and
       most telemetry blocks are optional. Using None distinguishes "the
       sentence did not carry this block" from "measured zero".

    2. Separate valid flag: The valid field is the terminal's own fix validity
       flag, NOT parse validity. A successfully decoded sentence may still
       report an invalid fix; a sentence that does not decode yields no record
       at all.

    3. Network ordering: The serving tower is always first in
       ``Network.cell_towers``; neighbor towers follow in slot order.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class CellTower:
    """A cellular base station observed by the terminal.

    Attributes:
        mobile_country_code: MCC, decimal (e.g. 404 for India).
        mobile_network_code: MNC, decimal.
        location_area_code: LAC, transmitted as hex, stored as int.
        cell_id: Cell identifier, transmitted as hex, stored as int.
        signal_strength: Signal index, only reported for the serving cell.
            None for neighbor cells.
    """

    mobile_country_code: int
    mobile_network_code: int
    location_area_code: int
    cell_id: int
    signal_strength: int | None = None


@dataclass
class Network:
    """Cellular network context: one serving tower plus neighbor towers."""

    serving: CellTower
    neighbors: list[CellTower] = field(default_factory=list)

    def add_cell_tower(self, tower: CellTower) -> None:
        """Append a neighbor tower."""
        self.neighbors.append(tower)

    @property
    def cell_towers(self) -> list[CellTower]:
        """All towers, serving first."""
        return [self.serving, *self.neighbors]


@dataclass
class PositionRecord:
    """Decoded ITS position report.

    Attributes:
        device_id: Identifier of the resolved device session.
        time: Fix timestamp (UTC, timezone-aware).
        valid: Fix validity reported by the terminal.
        latitude: Decimal degrees, positive=North. Range: -90.0 to +90.0.
        longitude: Decimal degrees, positive=East. Range: -180.0 to +180.0.
        speed: Ground speed in knots (converted from km/h).
        course: Heading in degrees.
        altitude: Altitude in meters.
        satellites: Number of satellites in use.
        ignition: Ignition line state.
        charge: Main-power charging state.
        emergency: Emergency input state.
        power: External power voltage.
        battery: Internal battery voltage.
        input: Digital input bit flags (4 bits, MSB first on the wire).
        output: Digital output bit flags (2 bits).
        alarm: Alarm category string from ``tracking.its.alarms``, or None.
        archive: True for buffered (historical) reports.
        event: Numeric event code from the telemetry header.
        network: Observed cell towers, or None if not reported.
        adc1: First analog input reading.
        adc2: Second analog input reading.
        protocol: Protocol name, always "its".

    Example:
        >>> record = decode_sentence(sentence, registry.resolve)
        >>> record.latitude
        12.975095
        >>> record.network.serving.mobile_country_code
        404
    """

    device_id: int
    time: datetime | None = None
    valid: bool = False
    latitude: float | None = None
    longitude: float | None = None
    speed: float | None = None
    course: float | None = None
    altitude: float | None = None
    satellites: int | None = None
    ignition: bool | None = None
    charge: bool | None = None
    emergency: bool | None = None
    power: float | None = None
    battery: float | None = None
    input: int | None = None
    output: int | None = None
    alarm: str | None = None
    archive: bool = False
    event: int | None = None
    network: Network | None = None
    adc1: float | None = None
    adc2: float | None = None
    protocol: str = "its"
