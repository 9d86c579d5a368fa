"""MQTT configuration and utilities."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class MQTTConfig:
    """MQTT broker configuration.

    Defaults point at the Flespi broker over secure websockets, which is how
    the gateway pushes live telemetry.
    """
    broker: str = "mqtt.flespi.io"
    port: int = 443
    client_id: str = "frigo-live"
    keepalive: int = 60
    qos: int = 1
    transport: str = "websockets"
    tls: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "MQTTConfig":
        """Create config from dictionary."""
        return cls(
            broker=data.get("broker", "mqtt.flespi.io"),
            port=data.get("port", 443),
            client_id=data.get("client_id", "frigo-live"),
            keepalive=data.get("keepalive", 60),
            qos=data.get("qos", 1),
            transport=data.get("transport", "websockets"),
            tls=data.get("tls", True),
        )


def decode_payload(payload: bytes) -> Optional[Any]:
    """Decode an MQTT payload.

    Args:
        payload: Raw message bytes, JSON or a plain scalar.

    Returns:
        The decoded JSON value, the plain text when it is not JSON,
        or None if the bytes are not valid UTF-8.
    """
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Could not decode MQTT payload as UTF-8")
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # Flespi publishes some telemetry states as bare strings
        return text.strip()
