"""Tests for telemetry payload resolution."""

from datetime import datetime, timezone

from frigo.telemetry.resolver import (
    coerce_magnet,
    match_rooms_latest,
    process_history,
    resolve_beacon,
    resolve_channel,
    resolve_payload,
    resolve_room_reading,
    to_float,
    to_timestamp,
)


class TestResolveChannel:
    def test_wrapped_values(self, room_factory):
        room = room_factory("r2", "Chambre 2", "S-CH2")
        payload = {
            "ble.sensor.temperature.2": {"value": "4.5", "ts": 1700000000},
            "ble.sensor.humidity.2": {"value": "88"},
        }

        reading = resolve_room_reading(room, payload)

        assert reading is not None
        assert reading.temperature == 4.5
        assert reading.humidity == 88
        assert reading.battery == 0
        assert reading.magnet == 0
        assert reading.timestamp == datetime.fromtimestamp(1700000000)

    def test_other_channels_are_ignored(self):
        payload = {"ble.sensor.temperature.1": {"value": 2.0, "ts": 1700000000}}
        assert resolve_channel(payload, 2) is None

    def test_humidity_only_still_resolves(self):
        reading = resolve_channel({"ble.sensor.humidity.3": 75}, 3)
        assert reading is not None
        assert reading.temperature == 0
        assert reading.humidity == 75

    def test_channel_battery_and_magnet(self):
        payload = {
            "ble.sensor.temperature.1": 3.2,
            "ble.sensor.battery.voltage.1": "3.01",
            "ble.sensor.magnet.status.1": True,
            "battery.voltage": 12.4,
            "timestamp": 1700000100,
        }
        reading = resolve_channel(payload, 1)
        assert reading.battery == 3.01
        assert reading.magnet == 1
        assert reading.door_closed
        assert reading.timestamp == datetime.fromtimestamp(1700000100)

    def test_device_battery_fallback(self):
        payload = {"ble.sensor.temperature.1": 3.2, "battery.voltage": 12.4}
        assert resolve_channel(payload, 1).battery == 12.4

    def test_unparseable_values_default_to_zero(self):
        reading = resolve_channel({"ble.sensor.temperature.1": "n/a", "ble.sensor.humidity.1": None}, 1)
        assert reading.temperature == 0
        assert reading.humidity == 0


class TestResolveBeacon:
    BEACONS = [
        {"id": "Chambre3", "temperature": 2.5, "humidity": 91, "battery.voltage": 3.0, "magnet": False},
        {"id": "chambre 4", "temperature": 6.0, "humidity": 80},
    ]

    def test_matches_by_name(self):
        stamp = datetime(2024, 1, 1, 12, 0)
        reading = resolve_beacon(self.BEACONS, 3, stamp)
        assert reading.temperature == 2.5
        assert reading.humidity == 91
        assert reading.battery == 3.0
        assert reading.magnet == 0
        assert reading.timestamp == stamp

    def test_no_matching_beacon(self):
        assert resolve_beacon(self.BEACONS, 5) is None

    def test_first_match_wins(self):
        beacons = [{"id": "c4", "temperature": 1.0}, {"id": "chambre4", "temperature": 9.0}]
        assert resolve_beacon(beacons, 4).temperature == 1.0

    def test_beacons_without_id_are_skipped(self):
        assert resolve_beacon([{"temperature": 1.0}, "junk"], 1) is None

    def test_not_a_list(self):
        assert resolve_beacon({"id": "chambre1"}, 1) is None


class TestResolvePayload:
    def test_beacon_mode_is_detected(self):
        payload = {"ble.beacons": [{"id": "Chambre3", "temperature": 2.5}], "ble.sensor.temperature.3": 9.9}
        assert resolve_payload(payload, 3).temperature == 2.5

    def test_channel_mode_can_be_forced(self):
        payload = {"ble.beacons": [{"id": "Chambre3", "temperature": 2.5}], "ble.sensor.temperature.3": 9.9}
        assert resolve_payload(payload, 3, use_beacons=False).temperature == 9.9

    def test_missing_channel_or_payload(self):
        assert resolve_payload({"ble.sensor.temperature.1": 1}, None) is None
        assert resolve_payload(None, 1) is None
        assert resolve_payload({}, 1) is None

    def test_room_without_channel(self, room_factory):
        room = room_factory("r1", "Chambre", "SENSOR")
        assert resolve_room_reading(room, {"ble.sensor.temperature.1": 1}) is None


def test_to_float():
    assert to_float("4.5") == 4.5
    assert to_float(None) == 0.0
    assert to_float(True) == 0.0
    assert to_float("nan") == 0.0
    assert to_float("x", default=-1) == -1


def test_coerce_magnet():
    assert coerce_magnet(True) == 1
    assert coerce_magnet(False) == 0
    assert coerce_magnet(1) == 1
    assert coerce_magnet("1") == 1
    assert coerce_magnet("0") == 0
    assert coerce_magnet("true") == 1
    assert coerce_magnet("open") == 0
    assert coerce_magnet(None) == 0


def test_to_timestamp_accepts_milliseconds():
    assert to_timestamp(1700000000000) == datetime.fromtimestamp(1700000000)
    assert to_timestamp("1700000000") == datetime.fromtimestamp(1700000000)
    assert to_timestamp(None) is None
    assert to_timestamp("soon") is None


class TestProcessHistory:
    def test_sorted_and_trimmed(self):
        messages = [
            {"timestamp": 1700000000 + i * 60, "ble.sensor.temperature.1": float(i)}
            for i in range(40)
        ]
        messages.reverse()

        readings = process_history(messages, 1)

        assert len(readings) == 30
        assert readings[0].temperature == 10.0
        assert readings[-1].temperature == 39.0
        assert readings[-1].timestamp == datetime.fromtimestamp(1700000000 + 39 * 60)

    def test_mixed_layouts(self):
        messages = [
            {"timestamp": 1700000000, "ble.sensor.temperature.2": 3.0},
            {"timestamp": 1700000060, "ble.beacons": [{"id": "ch2", "temperature": 3.5}]},
            {"timestamp": 1700000120, "ble.sensor.temperature.1": 8.0},
            "garbage",
        ]
        readings = process_history(messages, 2)
        assert [r.temperature for r in readings] == [3.0, 3.5]
        assert readings[1].timestamp == datetime.fromtimestamp(1700000060)

    def test_empty(self):
        assert process_history([], 1) == []
        assert process_history(None, 1) == []


class TestMatchRoomsLatest:
    def test_match_by_name(self, rooms):
        payload = {
            "data": [
                {"room": "Chambre 1", "temperature": 3.2, "humidity": 80, "epoch": 1700000000},
                {"room": "Chambre 1", "temperature": 99, "humidity": 1},
                {"room": "Chambre 9", "temperature": 1, "humidity": 1},
            ]
        }

        readings = match_rooms_latest(rooms, payload)

        assert set(readings) == {"r1", "r2", "r3"}
        assert readings["r1"].temperature == 3.2
        assert readings["r1"].timestamp == datetime.fromtimestamp(1700000000)
        assert readings["r2"] is None
        assert readings["r3"] is None

    def test_local_time_fallback(self, rooms):
        payload = {"data": [{"room": "Chambre 2", "temperature": 5, "local_time": "2024-03-15T10:00:00"}]}
        assert match_rooms_latest(rooms, payload)["r2"].timestamp == datetime(2024, 3, 15, 10, 0)

    def test_local_time_with_offset_is_made_local(self, rooms):
        payload = {"data": [{"room": "Chambre 2", "temperature": 5, "local_time": "2024-03-15T10:00:00+00:00"}]}
        timestamp = match_rooms_latest(rooms, payload)["r2"].timestamp
        expected = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert timestamp.tzinfo is None
        assert timestamp == expected

    def test_bad_payload(self, rooms):
        assert all(r is None for r in match_rooms_latest(rooms, None).values())
