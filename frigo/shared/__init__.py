"""Shared utilities for frigo services."""

from .models import (
    CashMovement,
    Client,
    CrateType,
    OutdoorWeather,
    PoolSettings,
    Room,
    SensorReading,
)
from .config import Config, load_config, load_yaml_config, get_config_path
from .errors import DuplicateError, FrigoError, StoreError, TelemetryError, ValidationError
from .mqtt import MQTTConfig
from .store import DocumentStore, FirestoreStore, MemoryStore, create_store
from .logging import setup_logging

__all__ = [
    "CashMovement",
    "Client",
    "CrateType",
    "OutdoorWeather",
    "PoolSettings",
    "Room",
    "SensorReading",
    "Config",
    "load_config",
    "load_yaml_config",
    "get_config_path",
    "DuplicateError",
    "FrigoError",
    "StoreError",
    "TelemetryError",
    "ValidationError",
    "MQTTConfig",
    "DocumentStore",
    "FirestoreStore",
    "MemoryStore",
    "create_store",
    "setup_logging",
]
