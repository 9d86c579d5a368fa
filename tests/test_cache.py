"""Tests for the per-device telemetry cache."""

from frigo.telemetry.cache import TelemetryCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_fresh_entry_is_returned():
    clock = FakeClock()
    cache = TelemetryCache(ttl=60, clock=clock)
    cache.set("dev", {"a": 1})
    clock.now += 59
    assert cache.get("dev") == {"a": 1}


def test_stale_entry_reads_as_missing_but_is_kept():
    clock = FakeClock()
    cache = TelemetryCache(ttl=60, clock=clock)
    cache.set("dev", {"a": 1})
    clock.now += 61
    assert cache.get("dev") is None
    assert len(cache) == 1
    assert cache.age("dev") == 61


def test_overwrite_refreshes():
    clock = FakeClock()
    cache = TelemetryCache(ttl=60, clock=clock)
    cache.set("dev", {"a": 1})
    clock.now += 120
    cache.set("dev", {"a": 2})
    assert cache.get("dev") == {"a": 2}


def test_unknown_key():
    cache = TelemetryCache()
    assert cache.get("nope") is None
    assert cache.age("nope") is None
