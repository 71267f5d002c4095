"""Cargo vocabulary shared by quotes, shipments and guest quotes."""

import json
from enum import Enum

from protean.exceptions import ValidationError


class CargoType(Enum):
    GENERAL = "GENERAL"
    DANGEROUS = "DANGEROUS"
    PERISHABLE = "PERISHABLE"
    FRAGILE = "FRAGILE"
    BULK = "BULK"
    CONTAINER = "CONTAINER"
    PALLETIZED = "PALLETIZED"
    OTHER = "OTHER"


class TransportMode(Enum):
    ROAD = "ROAD"
    SEA = "SEA"
    AIR = "AIR"
    RAIL = "RAIL"


class Priority(Enum):
    STANDARD = "STANDARD"
    NORMAL = "NORMAL"
    EXPRESS = "EXPRESS"
    URGENT = "URGENT"


def encode_transport_modes(modes) -> str:
    """Validate transport modes and encode them as a JSON list."""
    if isinstance(modes, str):
        modes = json.loads(modes)
    values = []
    for mode in modes or []:
        value = mode.value if isinstance(mode, TransportMode) else str(mode).upper()
        if value not in TransportMode.__members__:
            raise ValidationError({"transport_modes": [f"Unknown transport mode: {mode}"]})
        if value not in values:
            values.append(value)
    return json.dumps(values)


def decode_transport_modes(encoded: str | None) -> list[str]:
    return json.loads(encoded) if encoded else []
