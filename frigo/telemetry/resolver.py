"""Resolution of bulk telemetry payloads into per-room readings.

A gateway reports every channel it hosts in one payload. Two layouts exist:

* channel keys: ``ble.sensor.temperature.<n>``, ``ble.sensor.humidity.<n>``,
  ``ble.sensor.battery.voltage.<n>``, ``ble.sensor.magnet.status.<n>``.
  Latest-telemetry snapshots wrap each value as ``{"value": ..., "ts": ...}``,
  history messages carry the raw value and a message-level ``timestamp``.
* beacons: a ``ble.beacons`` list of tags, each with its own ``id``,
  ``temperature``, ``humidity``, ``battery.voltage`` and ``magnet``.

Nothing here raises on bad input: a missing payload, unknown shapes or
absent fields all resolve to None ("no data").
"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from frigo.shared.models import Room, SensorReading, to_local_naive
from .channels import extract_channel_number, match_beacon_id

logger = logging.getLogger(__name__)

TEMPERATURE_KEY = "ble.sensor.temperature.{channel}"
HUMIDITY_KEY = "ble.sensor.humidity.{channel}"
BATTERY_KEY = "ble.sensor.battery.voltage.{channel}"
MAGNET_KEY = "ble.sensor.magnet.status.{channel}"
DEVICE_BATTERY_KEY = "battery.voltage"
BEACONS_KEY = "ble.beacons"

HISTORY_POINTS = 30


def channel_keys(channel: int) -> List[str]:
    """Telemetry keys that describe one channel."""
    return [
        key.format(channel=channel)
        for key in (TEMPERATURE_KEY, HUMIDITY_KEY, BATTERY_KEY, MAGNET_KEY)
    ]


def to_float(value: Any, default: float = 0.0) -> float:
    """Parse a numeric telemetry value, falling back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def coerce_magnet(value: Any) -> int:
    """Coerce a door contact value to 1 (closed) or 0 (open or unknown).

    Gateways send booleans, numbers, numeric strings or ``"true"``/``"false"``.
    """
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "closed"):
            return 1
        if text in ("false", "open", ""):
            return 0
    return 1 if to_float(value) != 0 else 0


def to_timestamp(value: Any) -> Optional[datetime]:
    """Convert an epoch value (seconds, or milliseconds) to a local datetime."""
    seconds = to_float(value, default=math.nan)
    if math.isnan(seconds):
        return None
    if seconds > 1e11:
        seconds /= 1000.0
    try:
        return datetime.fromtimestamp(seconds)
    except (OverflowError, OSError, ValueError):
        return None


def _field(payload: Dict[str, Any], key: str) -> Tuple[Any, Any]:
    """Return (value, ts) for a key, unwrapping ``{"value", "ts"}`` envelopes."""
    entry = payload.get(key)
    if isinstance(entry, dict) and "value" in entry:
        return entry.get("value"), entry.get("ts")
    return entry, None


def resolve_channel(payload: Dict[str, Any], channel: int) -> Optional[SensorReading]:
    """Resolve a channel-keyed payload for one channel.

    Returns None when both temperature and humidity are absent.
    """
    temperature, temperature_ts = _field(payload, TEMPERATURE_KEY.format(channel=channel))
    humidity, _ = _field(payload, HUMIDITY_KEY.format(channel=channel))
    if temperature is None and humidity is None:
        return None

    battery, _ = _field(payload, BATTERY_KEY.format(channel=channel))
    if battery is None:
        battery, _ = _field(payload, DEVICE_BATTERY_KEY)
    magnet, _ = _field(payload, MAGNET_KEY.format(channel=channel))

    ts = temperature_ts if temperature_ts is not None else payload.get("timestamp")
    timestamp = to_timestamp(ts) or datetime.now()

    return SensorReading(
        temperature=to_float(temperature),
        humidity=to_float(humidity),
        battery=to_float(battery),
        magnet=coerce_magnet(magnet),
        timestamp=timestamp,
    )


def resolve_beacon(
    beacons: Any,
    channel: int,
    timestamp: Optional[datetime] = None,
) -> Optional[SensorReading]:
    """Resolve the first beacon whose id names the channel.

    Beacons carry no timestamp of their own; the reading is stamped with
    ``timestamp`` if given, otherwise the current time.
    """
    if not isinstance(beacons, list):
        return None

    for beacon in beacons:
        if not isinstance(beacon, dict) or beacon.get("id") in (None, ""):
            continue
        pattern = match_beacon_id(str(beacon["id"]), channel)
        if pattern is None:
            continue

        logger.debug(f"Beacon {beacon['id']!r} matches {pattern!r} for channel {channel}")
        return SensorReading(
            temperature=to_float(beacon.get("temperature")),
            humidity=to_float(beacon.get("humidity")),
            battery=to_float(beacon.get(DEVICE_BATTERY_KEY)),
            magnet=coerce_magnet(beacon.get("magnet")),
            timestamp=timestamp or datetime.now(),
        )

    return None


def resolve_payload(
    payload: Any,
    channel: Optional[int],
    use_beacons: Optional[bool] = None,
    timestamp: Optional[datetime] = None,
) -> Optional[SensorReading]:
    """Resolve a device payload for a channel.

    Args:
        payload: Telemetry map or history message for the owning device.
        channel: Channel number, None when it could not be extracted.
        use_beacons: Force beacon (True) or channel (False) mode. None picks
            beacon mode when the payload carries a beacon list.
        timestamp: Timestamp to stamp beacon readings with.
    """
    if channel is None or not isinstance(payload, dict):
        return None

    beacons, _ = _field(payload, BEACONS_KEY)
    if use_beacons is None:
        use_beacons = isinstance(beacons, list)

    if use_beacons:
        return resolve_beacon(beacons, channel, timestamp)
    return resolve_channel(payload, channel)


def resolve_room_reading(
    room: Room,
    payload: Any,
    use_beacons: Optional[bool] = None,
) -> Optional[SensorReading]:
    """Resolve the reading for a room from its device's payload."""
    channel = extract_channel_number(room.sensor_id, room.name)
    if channel is None:
        logger.debug(f"No channel in sensor id {room.sensor_id!r} for room {room.name}")
        return None
    return resolve_payload(payload, channel, use_beacons)


def process_history(
    messages: Iterable[Any],
    channel: int,
    limit: int = HISTORY_POINTS,
) -> List[SensorReading]:
    """Turn gateway history messages into readings for one channel.

    Each message is resolved on its own (beacon or channel layout), stamped
    with the message timestamp, sorted oldest first and trimmed to the
    ``limit`` most recent points.
    """
    readings = []
    for message in messages or []:
        if not isinstance(message, dict):
            continue
        reading = resolve_payload(message, channel, timestamp=to_timestamp(message.get("timestamp")))
        if reading is not None:
            readings.append(reading)

    readings.sort(key=lambda r: r.timestamp)
    logger.debug(f"Processed {len(readings)} points for channel {channel}")
    return readings[-limit:] if limit else readings


def reading_from_rooms_latest(entry: Dict[str, Any]) -> Optional[SensorReading]:
    """Normalize one entry of the rooms-latest endpoint."""
    temperature = entry.get("temperature")
    humidity = entry.get("humidity")
    if temperature is None and humidity is None:
        return None

    timestamp = to_timestamp(entry.get("epoch"))
    if timestamp is None and isinstance(entry.get("local_time"), str):
        try:
            timestamp = to_local_naive(datetime.fromisoformat(entry["local_time"]))
        except ValueError:
            timestamp = None

    return SensorReading(
        temperature=to_float(temperature),
        humidity=to_float(humidity),
        battery=to_float(entry.get("battery")),
        magnet=coerce_magnet(entry.get("magnet")),
        timestamp=timestamp or datetime.now(),
    )


def match_rooms_latest(rooms: Iterable[Room], payload: Any) -> Dict[str, Optional[SensorReading]]:
    """Match rooms-latest entries to rooms by exact name.

    Returns a reading (or None) for every room; rooms with no entry of the
    same name get None.
    """
    entries = payload.get("data") if isinstance(payload, dict) else None
    by_name: Dict[str, Dict[str, Any]] = {}
    if isinstance(entries, list):
        for entry in entries:
            if isinstance(entry, dict) and isinstance(entry.get("room"), str):
                by_name.setdefault(entry["room"], entry)

    readings: Dict[str, Optional[SensorReading]] = {}
    for room in rooms:
        entry = by_name.get(room.name)
        readings[room.id] = reading_from_rooms_latest(entry) if entry else None
    return readings
