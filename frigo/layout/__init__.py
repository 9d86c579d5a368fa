"""Warehouse layout for room rendering."""

from .warehouse import (
    LEFT,
    RIGHT,
    assign_sides,
    compute_room_positions,
    room_dimensions,
    temperature_color,
)

__all__ = [
    "LEFT",
    "RIGHT",
    "assign_sides",
    "compute_room_positions",
    "room_dimensions",
    "temperature_color",
]
