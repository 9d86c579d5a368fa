"""Terminal dashboard service."""

from .data_fetcher import DashboardFetcher, DashboardStatus, RoomStatus
from .terminal_monitor import TerminalMonitor


def main():
    """Entry point for the dashboard display."""
    import asyncio

    from frigo.backoffice.rooms import RoomRepository
    from frigo.shared.config import load_config
    from frigo.shared.logging import setup_logging
    from frigo.shared.store import create_store
    from frigo.telemetry.poller import TelemetryPoller
    from frigo.telemetry.service import TelemetryService

    config = load_config()
    setup_logging(config.log_level, service="display")

    rooms = RoomRepository(create_store(config.store), config.tenant_id)

    async def run():
        service = TelemetryService(config)
        poller = TelemetryPoller(service, lambda: rooms.list_rooms(active_only=True), config.polling)
        monitor = TerminalMonitor(DashboardFetcher(poller, config.temperature_alert_c))

        poller.on_readings = lambda _: monitor.update_display()
        poller.on_weather = lambda _: monitor.update_display()
        await poller.run()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


__all__ = ["DashboardFetcher", "DashboardStatus", "RoomStatus", "TerminalMonitor", "main"]
