"""
Terminal Monitor for the cold-storage dashboard
Full-screen terminal view using the Rich library. Rooms are drawn in two
columns matching the warehouse floor plan.
"""

import logging
from datetime import datetime
from typing import List, Optional

from rich.align import Align
from rich.console import Console
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .data_fetcher import DashboardFetcher, DashboardStatus, RoomStatus

logger = logging.getLogger(__name__)


class TerminalMonitor:
    """Terminal-based dashboard using Rich"""

    def __init__(self, fetcher: DashboardFetcher, console: Optional[Console] = None):
        self.fetcher = fetcher
        self.console = console or Console(force_terminal=True)

    def update_display(self):
        """Update the display with current dashboard status"""
        try:
            status = self.fetcher.get_dashboard_status()
            layout = self._create_layout(status)

            self.console.clear()
            self.console.print(layout)

        except Exception as e:
            logger.error(f"Display update failed: {e}")
            self._show_error_display(str(e))

    def _create_layout(self, status: DashboardStatus) -> Layout:
        """Create the main display layout"""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=8),
        )
        # Left and right rows of the warehouse, aisle in between
        layout["body"].split_row(
            Layout(name="left"),
            Layout(name="right"),
        )
        layout["footer"].split_row(
            Layout(name="weather", ratio=1),
            Layout(name="alerts", ratio=2),
        )

        layout["header"].update(self._create_header(status))
        layout["left"].update(self._create_rooms_panel(status.left, "LEFT ROW"))
        layout["right"].update(self._create_rooms_panel(status.right, "RIGHT ROW"))
        layout["weather"].update(self._create_weather_panel(status))
        layout["alerts"].update(self._create_alerts_panel(status))

        return layout

    def _create_header(self, status: DashboardStatus) -> Panel:
        """Create header with title and timestamp"""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        indicator = "🟢 LIVE" if status.connected else "🔴 CACHED" if status.cached else "🔴 OFFLINE"

        header_text = Text()
        header_text.append("COLD STORAGE MONITOR", style="bold cyan")
        header_text.append(f" - {timestamp}", style="white")
        header_text.append(f" - {indicator}", style="green" if status.connected else "red")

        return Panel(Align.center(header_text), style="cyan")

    def _create_rooms_panel(self, rooms: List[RoomStatus], title: str) -> Panel:
        """Create one row of rooms, front of the warehouse first"""
        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Room", style="white", width=16)
        table.add_column("Reading", width=16)
        table.add_column("Door", width=8)
        table.add_column("Battery", width=8)

        for room in sorted(rooms, key=lambda r: r.slot):
            indicator = "●" if room.is_online else "○"
            reading = room.reading

            if reading is not None and room.is_online:
                door = Text("closed", style="green") if reading.door_closed else Text("open", style="bold red")
                battery = f"{reading.battery:.2f}V" if reading.battery else "---"
            else:
                door = Text("---")
                battery = "---"

            table.add_row(
                f"{indicator} {room.name}",
                Text(room.status_text, style=f"bold {room.color}"),
                door,
                battery,
            )

        return Panel(table, title=title, style="cyan")

    def _create_weather_panel(self, status: DashboardStatus) -> Panel:
        """Create outdoor weather panel"""
        weather = status.weather
        if weather is None:
            content = Text("No weather data", style="yellow")
        else:
            content = Text()
            content.append(f"{weather.temperature:.1f}°C", style="bold white")
            content.append(f"  {weather.humidity:.0f}%\n", style="white")
            content.append(f"updated {weather.fetched_at:%H:%M}", style="dim")
        return Panel(content, title="OUTSIDE", style="cyan")

    def _create_alerts_panel(self, status: DashboardStatus) -> Panel:
        """Create alerts and warnings panel"""
        if not status.alerts:
            content = Text("✓ All rooms normal", style="green")
        else:
            content = Text()
            for i, alert in enumerate(status.alerts):
                if i > 0:
                    content.append("\n")
                style = "red" if "🚨" in alert else "yellow"
                content.append(alert, style=f"bold {style}")

        return Panel(content, title="ALERTS", style="cyan")

    def _show_error_display(self, error_msg: str):
        """Show error display when the dashboard fails"""
        try:
            self.console.clear()
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

            layout = Layout()
            layout.split_column(
                Layout(
                    Panel(
                        Align.center(Text(f"COLD STORAGE MONITOR - {timestamp} - ERROR", style="bold red")),
                        style="red",
                    ),
                    size=3,
                ),
                Layout(
                    Panel(
                        Align.center(Text(f"DISPLAY ERROR\n\n{error_msg}", style="bold red")),
                        title="System Error",
                        style="red",
                    )
                ),
            )
            self.console.print(layout)

        except Exception as e:
            logger.error(f"Failed to show error display: {e}")
