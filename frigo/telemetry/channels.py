"""Mapping of logical sensor ids and beacon names to gateway channels."""

import re
from typing import Optional

# Gateways expose at most eight BLE channels
MAX_CHANNELS = 8

_NAME_PATTERN = re.compile(r"CH\s*(\d+)", re.IGNORECASE)
_DASH_CH_PATTERN = re.compile(r"-ch(\d+)", re.IGNORECASE)
_UNIFIED_PATTERN = re.compile(r"uT(\d+)R")
_DIGITS_PATTERN = re.compile(r"(\d+)")

# Names installers give beacon tags, checked in this order
BEACON_ID_TEMPLATES = (
    "chambre{n}",
    "chambre {n}",
    "ch{n}",
    "room{n}",
    "room {n}",
    "c{n}",
    "{n}",
)


def fold_channel(channel: int) -> int:
    """Wrap a number outside 1..MAX_CHANNELS back onto the gateway channels."""
    if channel > MAX_CHANNELS:
        return ((channel - 1) % MAX_CHANNELS) + 1
    return channel


def extract_channel_number(sensor_id: Optional[str], sensor_name: Optional[str] = None) -> Optional[int]:
    """Extract the gateway channel a logical sensor id refers to.

    The room name wins when it carries an explicit ``CH <n>``. Otherwise the
    id is tried against ``-ch<n>`` and the unified ``uT<n>R`` form, and
    finally any digit run, which is folded onto the available channels.

    Args:
        sensor_id: Logical sensor id stored on the room, e.g. ``"S-CH12"``.
        sensor_name: Optional display name of the room.

    Returns:
        The channel number, or None when neither input carries digits.
    """
    if sensor_name and "CH" in sensor_name:
        match = _NAME_PATTERN.search(sensor_name)
        if match:
            return int(match.group(1))

    if not sensor_id:
        return None

    for pattern in (_DASH_CH_PATTERN, _UNIFIED_PATTERN):
        match = pattern.search(sensor_id)
        if match:
            return int(match.group(1))

    match = _DIGITS_PATTERN.search(sensor_id)
    if match:
        return fold_channel(int(match.group(1)))

    return None


def match_beacon_id(beacon_id: str, channel: int) -> Optional[str]:
    """Check a beacon's free-text id against the naming patterns for a channel.

    Matching is case-insensitive and the channel number must not be part of
    a longer number, so ``"chambre12"`` does not match channel 1.

    Returns:
        The pattern that matched, or None.
    """
    ident = beacon_id.lower()
    for template in BEACON_ID_TEMPLATES:
        pattern = template.format(n=channel)
        if re.search(rf"(?<!\d){re.escape(pattern)}(?!\d)", ident):
            return pattern
    return None
