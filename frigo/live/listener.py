"""Live Flespi listener - subscribes to a gateway's MQTT topics and emits readings."""

import logging
import signal
import uuid
from typing import Any, Callable, Dict, List, Optional

import paho.mqtt.client as mqtt
from paho.mqtt.enums import CallbackAPIVersion

from frigo.shared.models import SensorReading
from frigo.shared.mqtt import MQTTConfig, decode_payload
from frigo.telemetry.resolver import (
    DEVICE_BATTERY_KEY,
    TEMPERATURE_KEY,
    channel_keys,
    resolve_channel,
    resolve_payload,
    to_timestamp,
)

logger = logging.getLogger(__name__)

MESSAGE_TOPIC = "flespi/message/gw/devices/{device_id}"
TELEMETRY_TOPIC = "flespi/state/gw/devices/{device_id}/telemetry/+"

ReadingCallback = Callable[[SensorReading], None]


class FlespiLiveListener:
    """Pushes live readings for one channel of one gateway device.

    Two feeds are subscribed:

    * full device messages, resolved like a history message;
    * per-key telemetry state updates, buffered per key. Nothing is emitted
      until a temperature has been seen; after that every update of a
      watched key emits a reading built from the latest buffered values.
    """

    def __init__(
        self,
        config: MQTTConfig,
        device_id: str,
        token: str,
        channel: int = 1,
    ):
        self.config = config
        self.device_id = str(device_id)
        self.token = token
        self.channel = channel

        self.client: Optional[mqtt.Client] = None
        self._callbacks: List[ReadingCallback] = []
        self._buffer: Dict[str, Any] = {}
        self._watched_keys = set(channel_keys(channel)) | {DEVICE_BATTERY_KEY}
        self._running = False

    @property
    def topics(self) -> List[str]:
        return [
            MESSAGE_TOPIC.format(device_id=self.device_id),
            TELEMETRY_TOPIC.format(device_id=self.device_id),
        ]

    def on_reading(self, callback: ReadingCallback) -> Callable[[], None]:
        """Register a callback. Returns a function that unregisters it."""
        self._callbacks.append(callback)

        def unsubscribe():
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def _dispatch(self, reading: SensorReading) -> None:
        for callback in list(self._callbacks):
            try:
                callback(reading)
            except Exception as e:
                logger.error(f"Error in reading callback: {e}")

    def _on_connect(self, client: mqtt.Client, userdata, flags, reason_code, properties):
        """Callback when connected to MQTT broker."""
        if reason_code == 0:
            logger.info(f"Connected to MQTT broker at {self.config.broker}:{self.config.port}")
            for topic in self.topics:
                client.subscribe(topic, qos=self.config.qos)
                logger.info(f"Subscribed to: {topic}")
        else:
            logger.error(f"Failed to connect to MQTT broker, reason: {reason_code}")

    def _on_disconnect(self, client: mqtt.Client, userdata, disconnect_flags, reason_code, properties):
        """Callback when disconnected from MQTT broker."""
        if reason_code != 0:
            logger.warning(f"Unexpected disconnection from MQTT broker (reason={reason_code})")
        else:
            logger.info("Disconnected from MQTT broker")

    def _on_message(self, client: mqtt.Client, userdata, msg: mqtt.MQTTMessage):
        """Callback when a message is received."""
        try:
            self._process_message(msg.topic, msg.payload)
        except Exception as e:
            logger.error(f"Error processing message from {msg.topic}: {e}")

    def _process_message(self, topic: str, payload: bytes) -> Optional[SensorReading]:
        """Route a raw MQTT message and return the reading it produced, if any."""
        data = decode_payload(payload)
        if data is None:
            return None

        if topic.startswith("flespi/message/gw/devices/"):
            return self._process_device_message(data)
        if topic.startswith("flespi/state/gw/devices/") and "/telemetry/" in topic:
            return self._process_telemetry_update(topic.rsplit("/", 1)[-1], data)

        logger.debug(f"Ignoring topic: {topic}")
        return None

    def _process_device_message(self, data: Any) -> Optional[SensorReading]:
        if not isinstance(data, dict):
            logger.warning(f"Unexpected device message: {data!r}")
            return None
        reading = resolve_payload(data, self.channel, timestamp=to_timestamp(data.get("timestamp")))
        if reading is not None:
            logger.debug(f"Message reading for channel {self.channel}: {reading.to_dict()}")
            self._dispatch(reading)
        return reading

    def _process_telemetry_update(self, key: str, value: Any) -> Optional[SensorReading]:
        if key not in self._watched_keys:
            return None

        self._buffer[key] = value
        if self._buffer.get(TEMPERATURE_KEY.format(channel=self.channel)) is None:
            logger.debug(f"Buffered {key}; waiting for temperature")
            return None

        reading = resolve_channel(self._buffer, self.channel)
        if reading is not None:
            self._dispatch(reading)
        return reading

    def _setup_signal_handlers(self):
        """Set up signal handlers for graceful shutdown."""
        def signal_handler(signum, frame):
            signame = signal.Signals(signum).name
            logger.info(f"Received {signame}, shutting down...")
            self._running = False
            if self.client:
                self.client.disconnect()

        signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)

    def _create_client(self) -> mqtt.Client:
        client = mqtt.Client(
            callback_api_version=CallbackAPIVersion.VERSION2,
            client_id=f"{self.config.client_id}-{uuid.uuid4().hex[:8]}",
            transport=self.config.transport,
        )
        # Flespi authenticates with the token as username and an empty password
        client.username_pw_set(f"FlespiToken {self.token}", "")
        if self.config.tls:
            client.tls_set()
        client.reconnect_delay_set(min_delay=1, max_delay=10)

        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message
        return client

    def run(self):
        """Run the listener (blocking)."""
        self._setup_signal_handlers()
        self._running = True
        self.client = self._create_client()

        logger.info(f"Connecting to MQTT broker at {self.config.broker}:{self.config.port}")

        try:
            self.client.connect(self.config.broker, self.config.port, keepalive=self.config.keepalive)
            self.client.loop_forever()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        except Exception as e:
            logger.error(f"MQTT error: {e}")
        finally:
            self._running = False
            logger.info("Live listener stopped")

    def stop(self):
        self._running = False
        if self.client:
            self.client.disconnect()
