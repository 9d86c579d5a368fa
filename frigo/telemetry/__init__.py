"""Room telemetry: channel resolution, provider clients and periodic polling."""

from .cache import TelemetryCache
from .channels import extract_channel_number, match_beacon_id
from .fetcher import FlespiClient, RoomsLatestClient, WeatherClient
from .poller import GenerationGuard, TelemetryPoller
from .resolver import (
    process_history,
    resolve_beacon,
    resolve_channel,
    resolve_payload,
    resolve_room_reading,
)
from .service import TelemetryService


def main():
    """Entry point for the telemetry poller."""
    import asyncio
    import logging

    from frigo.backoffice.rooms import RoomRepository
    from frigo.shared.config import load_config
    from frigo.shared.logging import setup_logging
    from frigo.shared.store import create_store

    config = load_config()
    setup_logging(config.log_level, service="poller")
    logger = logging.getLogger(__name__)

    rooms = RoomRepository(create_store(config.store), config.tenant_id)

    def log_readings(readings):
        for room_id, reading in readings.items():
            if reading is None:
                logger.info(f"{room_id}: no data")
            else:
                logger.info(f"{room_id}: {reading.temperature:.1f}°C {reading.humidity:.0f}%")

    async def run():
        service = TelemetryService(config)
        poller = TelemetryPoller(
            service,
            lambda: rooms.list_rooms(active_only=True),
            config.polling,
            on_readings=log_readings,
        )
        await poller.run()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


__all__ = [
    "TelemetryCache",
    "extract_channel_number",
    "match_beacon_id",
    "FlespiClient",
    "RoomsLatestClient",
    "WeatherClient",
    "GenerationGuard",
    "TelemetryPoller",
    "process_history",
    "resolve_beacon",
    "resolve_channel",
    "resolve_payload",
    "resolve_room_reading",
    "TelemetryService",
    "main",
]
