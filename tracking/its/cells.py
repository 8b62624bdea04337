"""Cell tower block decoding.

The extended telemetry block carries a fixed-stride list of 17 tokens:

    5,404,45,61B4,3F7D5,7,61B4,3F7D6,3,61B4,0,0,0,0,0,0,0,0
    | |   |  |    |     |______________|  |____________|
    | |   |  |    |       neighbor 1..2    neighbor 3..4
    | |   |  |    +-- serving CID (hex)
    | |   |  +-- serving LAC (hex)
    | |   +-- MNC (decimal)
    | +-- MCC (decimal)
    +-- serving signal strength index

Each neighbor slot is a triple (signal, LAC hex, CID hex). The neighbor signal
is not used. Empty slots are reported as zeros and are dropped.
"""

from collections.abc import Sequence

from tracking.its.errors import FieldConversionError
from tracking.its.fields import parse_hex_field, parse_int_field
from tracking.its.types import CellTower, Network

SERVING_TOKEN_COUNT = 5
NEIGHBOR_SLOT_COUNT = 4
NEIGHBOR_SLOT_SIZE = 3
CELL_TOKEN_COUNT = SERVING_TOKEN_COUNT + NEIGHBOR_SLOT_COUNT * NEIGHBOR_SLOT_SIZE


def _decode_serving(tokens: Sequence[str]) -> CellTower:
    signal, mcc, mnc, lac, cid = tokens[:SERVING_TOKEN_COUNT]
    return CellTower(
        mobile_country_code=parse_int_field(mcc, "mcc"),
        mobile_network_code=parse_int_field(mnc, "mnc"),
        location_area_code=parse_hex_field(lac, "lac"),
        cell_id=parse_hex_field(cid, "cid"),
        signal_strength=parse_int_field(signal, "signal"),
    )


def decode_network(tokens: Sequence[str]) -> Network:
    """Assemble the serving tower and the non-empty neighbor towers.

    Neighbor towers inherit the serving tower's MCC and MNC and are added only
    when both LAC and CID are positive.

    Args:
        tokens: The 17 cell block tokens, in wire order

    Returns:
        Network with the serving tower and 0-4 neighbor towers

    Raises:
        FieldConversionError: If the token count is wrong or a token does not
            convert

    Example:
        >>> network = decode_network(
        ...     ["5", "222", "10", "1A2B", "3C4D", "0", "1A2C", "3C4E"]
        ...     + ["0", "0000", "0000"] * 3
        ... )
        >>> len(network.neighbors)
        1
    """
    if len(tokens) != CELL_TOKEN_COUNT:
        raise FieldConversionError(
            "network", ",".join(tokens), f"expected {CELL_TOKEN_COUNT} tokens"
        )

    serving = _decode_serving(tokens)
    network = Network(serving)

    for slot in range(NEIGHBOR_SLOT_COUNT):
        start = SERVING_TOKEN_COUNT + slot * NEIGHBOR_SLOT_SIZE
        _, lac, cid = tokens[start : start + NEIGHBOR_SLOT_SIZE]
        location_area_code = parse_hex_field(lac, "lac")
        cell_id = parse_hex_field(cid, "cid")
        if location_area_code > 0 and cell_id > 0:
            network.add_cell_tower(
                CellTower(
                    mobile_country_code=serving.mobile_country_code,
                    mobile_network_code=serving.mobile_network_code,
                    location_area_code=location_area_code,
                    cell_id=cell_id,
                )
            )

    return network
