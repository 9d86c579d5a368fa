"""Cold-storage facility telemetry and back-office services."""

__version__ = "0.1.0"
