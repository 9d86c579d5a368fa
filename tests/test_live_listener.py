"""Tests for the live Flespi listener message handling."""

import json

import pytest

from frigo.live.listener import FlespiLiveListener
from frigo.shared.mqtt import MQTTConfig

MESSAGE_TOPIC = "flespi/message/gw/devices/6925665"
STATE_TOPIC = "flespi/state/gw/devices/6925665/telemetry/{key}"


@pytest.fixture
def listener():
    return FlespiLiveListener(MQTTConfig(), device_id="6925665", token="tok", channel=2)


@pytest.fixture
def received(listener):
    readings = []
    listener.on_reading(readings.append)
    return readings


def test_topics(listener):
    assert listener.topics == [
        "flespi/message/gw/devices/6925665",
        "flespi/state/gw/devices/6925665/telemetry/+",
    ]


def test_device_message(listener, received):
    payload = json.dumps({
        "timestamp": 1700000000,
        "ble.sensor.temperature.2": 4.5,
        "ble.sensor.humidity.2": 88,
        "ble.sensor.magnet.status.2": True,
    }).encode()

    reading = listener._process_message(MESSAGE_TOPIC, payload)

    assert reading.temperature == 4.5
    assert reading.magnet == 1
    assert received == [reading]


def test_device_message_for_other_channel(listener, received):
    payload = json.dumps({"ble.sensor.temperature.1": 4.5}).encode()
    assert listener._process_message(MESSAGE_TOPIC, payload) is None
    assert received == []


def test_telemetry_updates_wait_for_temperature(listener, received):
    assert listener._process_message(STATE_TOPIC.format(key="ble.sensor.humidity.2"), b"88") is None
    assert received == []

    reading = listener._process_message(STATE_TOPIC.format(key="ble.sensor.temperature.2"), b"4.5")
    assert reading.temperature == 4.5
    assert reading.humidity == 88

    listener._process_message(STATE_TOPIC.format(key="battery.voltage"), b"12.1")
    assert len(received) == 2
    assert received[-1].battery == 12.1
    assert received[-1].temperature == 4.5


def test_unwatched_keys_are_ignored(listener, received):
    assert listener._process_message(STATE_TOPIC.format(key="ble.sensor.temperature.1"), b"3.0") is None
    assert listener._process_message(STATE_TOPIC.format(key="position.speed"), b"0") is None
    assert received == []


def test_undecodable_payload(listener, received):
    assert listener._process_message(MESSAGE_TOPIC, b"\xff\xfe") is None
    assert received == []


def test_unsubscribe(listener):
    readings = []
    unsubscribe = listener.on_reading(readings.append)
    unsubscribe()
    unsubscribe()
    listener._process_message(STATE_TOPIC.format(key="ble.sensor.temperature.2"), b"4.5")
    assert readings == []


def test_failing_callback_does_not_block_others(listener):
    readings = []

    def broken(reading):
        raise RuntimeError("boom")

    listener.on_reading(broken)
    listener.on_reading(readings.append)
    listener._process_message(STATE_TOPIC.format(key="ble.sensor.temperature.2"), b"4.5")
    assert len(readings) == 1
