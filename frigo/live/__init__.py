"""Live telemetry listener for a Flespi gateway."""

from .listener import FlespiLiveListener


def main():
    """Entry point for the live listener.

    Watches the configured default device; the channel comes from
    FRIGO_LIVE_CHANNEL (default 1).
    """
    import os

    from frigo.shared.config import load_config
    from frigo.shared.logging import setup_logging

    config = load_config()
    setup_logging(config.log_level, service="live")

    listener = FlespiLiveListener(
        config.mqtt,
        device_id=config.flespi.default_device_id,
        token=config.flespi.token,
        channel=int(os.environ.get("FRIGO_LIVE_CHANNEL", "1")),
    )
    listener.on_reading(
        lambda reading: print(
            f"{reading.timestamp:%H:%M:%S}  {reading.temperature:.1f}°C  "
            f"{reading.humidity:.0f}%  door {'closed' if reading.door_closed else 'open'}"
        )
    )
    listener.run()


__all__ = ["FlespiLiveListener", "main"]
