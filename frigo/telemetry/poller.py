"""Periodic telemetry refresh with a stale-response guard."""

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from frigo.shared.config import PollingConfig
from frigo.shared.models import OutdoorWeather, Room, SensorReading
from .service import TelemetryService

logger = logging.getLogger(__name__)

ReadingsCallback = Callable[[Dict[str, Optional[SensorReading]]], None]
WeatherCallback = Callable[[Optional[OutdoorWeather]], None]


class GenerationGuard:
    """Orders overlapping requests by issue order.

    Every request takes a generation number before it starts. A response is
    applied only if no later generation has been applied already.
    """

    def __init__(self):
        self._issued = 0
        self._applied = 0

    def next(self) -> int:
        self._issued += 1
        return self._issued

    def accept(self, generation: int) -> bool:
        if generation <= self._applied:
            return False
        self._applied = generation
        return True

    @property
    def applied(self) -> int:
        return self._applied


class TelemetryPoller:
    """Refreshes room readings and outdoor weather on fixed intervals."""

    def __init__(
        self,
        service: TelemetryService,
        rooms_provider: Callable[[], List[Room]],
        polling: PollingConfig,
        on_readings: Optional[ReadingsCallback] = None,
        on_weather: Optional[WeatherCallback] = None,
    ):
        self.service = service
        self.rooms_provider = rooms_provider
        self.polling = polling
        self.on_readings = on_readings
        self.on_weather = on_weather

        self.rooms: List[Room] = []
        self.readings: Dict[str, Optional[SensorReading]] = {}
        self.weather: Optional[OutdoorWeather] = None
        self._rooms_guard = GenerationGuard()
        self._weather_guard = GenerationGuard()
        self.running = False

    async def poll_rooms(self) -> bool:
        """Fetch room readings once. Returns False if the result was stale."""
        generation = self._rooms_guard.next()
        # Document store clients are synchronous
        rooms = await asyncio.to_thread(self.rooms_provider)
        readings = await self.service.room_readings(rooms)

        if not self._rooms_guard.accept(generation):
            logger.debug(f"Discarding stale room readings (generation {generation})")
            return False

        self.rooms = rooms
        self.readings = readings
        if self.on_readings:
            self.on_readings(readings)
        return True

    async def poll_weather(self) -> bool:
        """Fetch outdoor weather once. Returns False if the result was stale."""
        generation = self._weather_guard.next()
        weather = await self.service.outdoor_weather()

        if not self._weather_guard.accept(generation):
            logger.debug(f"Discarding stale weather (generation {generation})")
            return False

        self.weather = weather
        if self.on_weather:
            self.on_weather(weather)
        return True

    async def _loop(self, name: str, poll: Callable, interval: float) -> None:
        while self.running:
            try:
                await poll()
            except Exception as e:
                logger.error(f"Error in {name} poll: {e}")
            await asyncio.sleep(interval)

    async def run(self) -> None:
        """Run both refresh loops until stop() is called."""
        self.running = True
        logger.info(
            f"Starting telemetry poller (rooms every {self.polling.rooms_interval}s, "
            f"weather every {self.polling.weather_interval}s)"
        )
        await asyncio.gather(
            self._loop("rooms", self.poll_rooms, self.polling.rooms_interval),
            self._loop("weather", self.poll_weather, self.polling.weather_interval),
        )

    def stop(self) -> None:
        self.running = False
