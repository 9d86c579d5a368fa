"""Short-lived telemetry cache keyed by device and key selector."""

import time
from typing import Any, Callable, Dict, Optional, Tuple


class TelemetryCache:
    """Timestamp-gated map that avoids refetching a device within one refresh cycle.

    Entries are never removed. An entry older than ``ttl`` seconds is treated
    as missing until it is overwritten by the next fetch.
    """

    def __init__(self, ttl: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value if it is still fresh."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at > self.ttl:
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def age(self, key: str) -> Optional[float]:
        """Seconds since the entry was stored, fresh or not."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return self._clock() - entry[0]

    def __len__(self) -> int:
        return len(self._entries)
