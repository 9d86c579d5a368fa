"""Warehouse floor plan: rooms on both sides of a central aisle.

The first half of the ordered room list runs along the left row, the rest
along the right row, front to back. Coordinates follow the 3D scene: x
across the aisle (left negative), y up, z along the corridor.
"""

import math
from typing import Dict, List, Optional, Sequence, Tuple

from frigo.shared.models import Room

ROOM_HEIGHT = 4.0
AISLE_WIDTH = 6.0
ROOM_GAP = 1.5
NOMINAL_CAPACITY = 6000

LEFT = "left"
RIGHT = "right"

OFFLINE_COLOR = "#cbd5e1"

# (upper bound exclusive, colour)
NORMAL_BANDS: List[Tuple[float, str]] = [
    (5, "#7dd3fc"),
    (10, "#5eead4"),
    (15, "#fcd34d"),
]
NORMAL_HOT = "#fdba74"

THERMAL_BANDS: List[Tuple[float, str]] = [
    (0, "#8b5cf6"),
    (3, "#3b82f6"),
    (6, "#06b6d4"),
    (9, "#10b981"),
    (12, "#eab308"),
    (15, "#f97316"),
]
THERMAL_HOT = "#ef4444"

Position = Tuple[float, float, float]


def room_scale(capacity: float) -> float:
    return 1.6 + (capacity / 10000) * 0.5


def room_dimensions(capacity: float = NOMINAL_CAPACITY) -> Tuple[float, float, float]:
    """(width, height, depth) of a room box for the given capacity."""
    scale = room_scale(capacity)
    return 3.5 * scale, ROOM_HEIGHT, 4.5 * scale


def assign_sides(rooms: Sequence[Room]) -> Dict[str, Tuple[str, int]]:
    """Map each room id to its (side, slot); slot 0 is nearest the door."""
    half_count = math.ceil(len(rooms) / 2)
    sides = {}
    for index, room in enumerate(rooms):
        if index < half_count:
            sides[room.id] = (LEFT, index)
        else:
            sides[room.id] = (RIGHT, index - half_count)
    return sides


def compute_room_positions(rooms: Sequence[Room]) -> Dict[str, Position]:
    """Centre position of every room box.

    Spacing uses the nominal room footprint so every slot has the same pitch
    regardless of individual capacities.
    """
    room_width, _, room_depth = room_dimensions(NOMINAL_CAPACITY)
    spacing = room_depth + ROOM_GAP
    half_count = math.ceil(len(rooms) / 2)
    x_offset = AISLE_WIDTH / 2 + room_width / 2

    positions: Dict[str, Position] = {}
    for room_id, (side, slot) in assign_sides(rooms).items():
        x = -x_offset if side == LEFT else x_offset
        z = slot * spacing - half_count * spacing / 2 + spacing / 2
        positions[room_id] = (x, ROOM_HEIGHT / 2, z)
    return positions


def temperature_color(temperature: Optional[float], thermal: bool = False) -> str:
    """Colour for a room box; grey when the room has no reading."""
    if temperature is None:
        return OFFLINE_COLOR
    bands, hot = (THERMAL_BANDS, THERMAL_HOT) if thermal else (NORMAL_BANDS, NORMAL_HOT)
    for upper, color in bands:
        if temperature < upper:
            return color
    return hot
