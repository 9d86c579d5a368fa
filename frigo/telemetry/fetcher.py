"""HTTP clients for the telemetry providers.

Each client raises TelemetryError on transport errors, non-200 responses
and undecodable bodies. Degrading to "no data" is left to the caller.
"""

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import aiohttp

from frigo.shared.config import FlespiConfig, RoomsApiConfig, WeatherConfig
from frigo.shared.errors import TelemetryError
from frigo.shared.models import OutdoorWeather, Room, SensorReading
from .cache import TelemetryCache
from .resolver import match_rooms_latest

logger = logging.getLogger(__name__)


async def _fetch_json(
    session: aiohttp.ClientSession,
    url: str,
    params: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 15.0,
) -> Any:
    try:
        async with session.get(
            url,
            params=params,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            if response.status != 200:
                text = await response.text()
                raise TelemetryError(f"HTTP {response.status} from {url}: {text[:200]}")
            return await response.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        raise TelemetryError(f"Request to {url} failed: {e}") from e


class _HTTPClient:
    """Shares one aiohttp session when given, else opens one per request."""

    def __init__(self, timeout: float, session: Optional[aiohttp.ClientSession] = None):
        self.timeout = timeout
        self._session = session

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        if self._session is not None:
            return await _fetch_json(self._session, url, params, headers, self.timeout)
        async with aiohttp.ClientSession() as session:
            return await _fetch_json(session, url, params, headers, self.timeout)


class FlespiClient(_HTTPClient):
    """Flespi gateway REST client for device telemetry and message history."""

    def __init__(
        self,
        config: FlespiConfig,
        session: Optional[aiohttp.ClientSession] = None,
        cache: Optional[TelemetryCache] = None,
    ):
        super().__init__(config.timeout, session)
        self.config = config
        self.cache = cache

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"FlespiToken {self.config.token}"}

    async def get_telemetry(self, device_id: str, keys: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Fetch the latest telemetry snapshot of a device.

        Args:
            device_id: Gateway device id.
            keys: Telemetry keys to request. None requests all of them.

        Returns:
            Map of telemetry key to ``{"value": ..., "ts": ...}``; empty when
            the device has reported nothing.
        """
        device_id = str(device_id)
        selector = ",".join(keys) if keys else "all"
        # A key subset must never be served to a full request
        cache_key = f"{device_id}/{selector}"
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Using cached telemetry for device {device_id}")
                return cached

        url = f"{self.config.base_url}/gw/devices/{device_id}/telemetry/{selector}"
        data = await self._get_json(url, headers=self._headers)

        telemetry: Dict[str, Any] = {}
        result = data.get("result") if isinstance(data, dict) else None
        if isinstance(result, list) and result and isinstance(result[0], dict):
            telemetry = result[0].get("telemetry") or {}

        if self.cache is not None:
            self.cache.set(cache_key, telemetry)
        return telemetry

    async def get_messages(
        self,
        device_id: str,
        limit: Optional[int] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch stored messages of a device, optionally within a time window."""
        query: Dict[str, Any] = {"limit": limit or self.config.history_limit}
        if since is not None:
            query["from"] = int(since.timestamp())
        if until is not None:
            query["to"] = int(until.timestamp())

        url = f"{self.config.base_url}/gw/devices/{device_id}/messages"
        data = await self._get_json(url, params={"data": json.dumps(query)}, headers=self._headers)

        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, list):
            logger.warning(f"No messages in response for device {device_id}")
            return []
        return [message for message in result if isinstance(message, dict)]


class RoomsLatestClient(_HTTPClient):
    """Client for the rooms-latest telemetry endpoint."""

    def __init__(self, config: RoomsApiConfig, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(config.timeout, session)
        self.config = config

    @property
    def enabled(self) -> bool:
        return bool(self.config.base_url)

    async def get_latest(self) -> Dict[str, Any]:
        if not self.enabled:
            raise TelemetryError("Rooms-latest endpoint is not configured")
        data = await self._get_json(f"{self.config.base_url}/rooms/latest")
        return data if isinstance(data, dict) else {}

    async def readings_for(self, rooms: List[Room]) -> Dict[str, Optional[SensorReading]]:
        """Fetch the latest snapshot and match it to rooms by name."""
        return match_rooms_latest(rooms, await self.get_latest())


class WeatherClient(_HTTPClient):
    """Open-Meteo current conditions for the configured coordinates."""

    def __init__(self, config: WeatherConfig, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(config.timeout, session)
        self.config = config

    async def current(self) -> Optional[OutdoorWeather]:
        params = {
            "latitude": str(self.config.latitude),
            "longitude": str(self.config.longitude),
            "current": "temperature_2m,relative_humidity_2m",
            "timezone": "auto",
        }
        data = await self._get_json(f"{self.config.base_url}/v1/forecast", params=params)

        current = data.get("current") if isinstance(data, dict) else None
        if not isinstance(current, dict):
            return None
        temperature = current.get("temperature_2m")
        humidity = current.get("relative_humidity_2m")
        try:
            return OutdoorWeather(temperature=float(temperature), humidity=float(humidity))
        except (TypeError, ValueError):
            logger.warning(f"Unexpected weather payload: {current}")
            return None
