"""
Data Fetcher for the Dashboard
Turns the poller's latest rooms, readings and weather into display status,
with graceful error handling and caching.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from frigo.layout import LEFT, assign_sides, temperature_color
from frigo.shared.models import OutdoorWeather, Room, SensorReading
from frigo.telemetry.poller import TelemetryPoller

logger = logging.getLogger(__name__)


@dataclass
class RoomStatus:
    """Status information for a room"""
    room_id: str
    name: str
    side: str
    slot: int
    monitored: bool
    reading: Optional[SensorReading]
    is_online: bool
    status_text: str  # "4.5°C 88%" or "OFFLINE (no data)"
    color: str


@dataclass
class DashboardStatus:
    """Overall dashboard status"""
    connected: bool
    rooms: List[RoomStatus]
    weather: Optional[OutdoorWeather]
    alerts: List[str]
    last_update: Optional[datetime] = None
    cached: bool = False

    @property
    def left(self) -> List[RoomStatus]:
        return [room for room in self.rooms if room.side == LEFT]

    @property
    def right(self) -> List[RoomStatus]:
        return [room for room in self.rooms if room.side != LEFT]


class DashboardFetcher:
    """Builds dashboard status from the poller state"""

    # Readings older than this are shown as stale
    STALE_MINUTES = 15

    def __init__(self, poller: TelemetryPoller, alert_threshold: float = 10.0):
        self.poller = poller
        self.alert_threshold = alert_threshold
        self.last_successful_fetch: Optional[datetime] = None
        self.cached_status: Optional[DashboardStatus] = None

    def get_dashboard_status(self) -> DashboardStatus:
        """Get current dashboard status with error handling"""
        try:
            status = self.build_status(self.poller.rooms, self.poller.readings, self.poller.weather)
        except Exception as e:
            logger.error(f"Failed to build dashboard status: {e}")
            return self._get_fallback_status(str(e))

        self.last_successful_fetch = datetime.now()
        self.cached_status = status
        return status

    def build_status(
        self,
        rooms: List[Room],
        readings: Dict[str, Optional[SensorReading]],
        weather: Optional[OutdoorWeather],
        now: Optional[datetime] = None,
    ) -> DashboardStatus:
        now = now or datetime.now()
        sides = assign_sides(rooms)

        statuses = []
        for room in rooms:
            side, slot = sides[room.id]
            statuses.append(self._room_status(room, side, slot, readings.get(room.id), now))

        return DashboardStatus(
            connected=True,
            rooms=statuses,
            weather=weather,
            alerts=self._generate_alerts(statuses),
            last_update=now,
        )

    def _room_status(
        self,
        room: Room,
        side: str,
        slot: int,
        reading: Optional[SensorReading],
        now: datetime,
    ) -> RoomStatus:
        if not room.capteur_installed:
            return RoomStatus(room.id, room.name, side, slot, False, None, False, "NO SENSOR", temperature_color(None))
        if reading is None:
            return RoomStatus(room.id, room.name, side, slot, True, None, False, "OFFLINE (no data)", temperature_color(None))

        is_online = now - reading.timestamp < timedelta(minutes=self.STALE_MINUTES)
        if is_online:
            status_text = f"{reading.temperature:.1f}°C {reading.humidity:.0f}%"
        else:
            status_text = f"STALE ({self._format_time_ago(reading.timestamp, now)})"

        return RoomStatus(
            room_id=room.id,
            name=room.name,
            side=side,
            slot=slot,
            monitored=True,
            reading=reading,
            is_online=is_online,
            status_text=status_text,
            color=temperature_color(reading.temperature),
        )

    def _generate_alerts(self, rooms: List[RoomStatus]) -> List[str]:
        """Generate dashboard alerts"""
        alerts = []

        offline = [r.name for r in rooms if r.monitored and not r.is_online]
        if offline:
            alerts.append(f"⚠ Offline rooms: {', '.join(offline)}")

        online = [r for r in rooms if r.is_online and r.reading is not None]

        warm = [r for r in online if r.reading.temperature >= self.alert_threshold]
        if warm:
            listed = ", ".join(f"{r.name} ({r.reading.temperature:.1f}°C)" for r in warm)
            alerts.append(f"🚨 Temperature above {self.alert_threshold:.0f}°C: {listed}")

        open_doors = [r.name for r in online if not r.reading.door_closed]
        if open_doors:
            alerts.append(f"⚠ Door open: {', '.join(open_doors)}")

        return alerts

    def _format_time_ago(self, timestamp: datetime, now: datetime) -> str:
        """Format time ago string"""
        seconds = (now - timestamp).total_seconds()
        if seconds < 60:
            return f"{int(seconds)}s ago"
        elif seconds < 3600:
            return f"{int(seconds / 60)}m ago"
        elif seconds < 86400:
            return f"{int(seconds / 3600)}h ago"
        return f"{int(seconds / 86400)}d ago"

    def _get_fallback_status(self, error_msg: str) -> DashboardStatus:
        """Return fallback status when building the status fails"""
        # Use cached status if available and recent
        if (self.cached_status and self.last_successful_fetch and
                datetime.now() - self.last_successful_fetch < timedelta(minutes=5)):
            cached = self.cached_status
            return DashboardStatus(
                connected=False,
                rooms=cached.rooms,
                weather=cached.weather,
                alerts=[f"⚠ Data error: {error_msg}"] + cached.alerts,
                last_update=cached.last_update,
                cached=True,
            )

        return DashboardStatus(
            connected=False,
            rooms=[],
            weather=None,
            alerts=[f"🚨 System Error: {error_msg}"],
        )
