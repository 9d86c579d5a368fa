"""Room telemetry service: fetch per device, resolve per room, degrade on failure."""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

import aiohttp

from frigo.shared.config import Config
from frigo.shared.errors import TelemetryError
from frigo.shared.models import OutdoorWeather, Room, SensorReading
from .cache import TelemetryCache
from .channels import extract_channel_number
from .fetcher import FlespiClient, RoomsLatestClient, WeatherClient
from .resolver import process_history, resolve_room_reading

logger = logging.getLogger(__name__)


class TelemetryService:
    """Fetches and resolves telemetry for a tenant's rooms.

    Provider failures never propagate: the affected rooms resolve to None
    and the weather to None, and the error is logged.
    """

    def __init__(self, config: Config, session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self.cache = TelemetryCache(config.polling.cache_ttl)
        self.flespi = FlespiClient(config.flespi, session, self.cache)
        self.rooms_api = RoomsLatestClient(config.rooms_api, session)
        self.weather = WeatherClient(config.weather, session)

    def device_for(self, room: Room) -> str:
        """Gateway device hosting the room's sensor."""
        return room.boitie_sensor_id or self.config.flespi.default_device_id

    async def room_readings(self, rooms: List[Room]) -> Dict[str, Optional[SensorReading]]:
        """Latest reading for every room; None for rooms without sensor or data."""
        readings: Dict[str, Optional[SensorReading]] = {room.id: None for room in rooms}
        monitored = [room for room in rooms if room.capteur_installed]
        if not monitored:
            return readings

        if self.config.telemetry_source == "rooms_latest":
            try:
                readings.update(await self.rooms_api.readings_for(monitored))
            except TelemetryError as e:
                logger.error(f"Failed to fetch rooms-latest telemetry: {e}")
            return readings

        rooms_by_device: Dict[str, List[Room]] = {}
        for room in monitored:
            rooms_by_device.setdefault(self.device_for(room), []).append(room)

        # One request per device, all devices concurrently
        devices = list(rooms_by_device)
        payloads = await asyncio.gather(
            *[self.flespi.get_telemetry(device_id) for device_id in devices],
            return_exceptions=True,
        )

        for device_id, payload in zip(devices, payloads):
            if isinstance(payload, Exception):
                logger.error(f"Failed to fetch telemetry for device {device_id}: {payload}")
                continue
            for room in rooms_by_device[device_id]:
                readings[room.id] = resolve_room_reading(room, payload)

        online = sum(1 for reading in readings.values() if reading is not None)
        logger.info(f"Resolved {online}/{len(monitored)} monitored rooms")
        return readings

    async def room_history(
        self,
        room: Room,
        limit: Optional[int] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[SensorReading]:
        """Replay the gateway's stored messages for a room's channel."""
        channel = extract_channel_number(room.sensor_id, room.name)
        if channel is None:
            return []
        try:
            messages = await self.flespi.get_messages(self.device_for(room), limit, since, until)
        except TelemetryError as e:
            logger.error(f"Failed to fetch history for room {room.name}: {e}")
            return []
        return process_history(messages, channel)

    async def outdoor_weather(self) -> Optional[OutdoorWeather]:
        try:
            return await self.weather.current()
        except TelemetryError as e:
            logger.error(f"Failed to fetch outdoor weather: {e}")
            return None
