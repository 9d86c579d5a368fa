"""Configuration loading utilities.

Settings come from ``config/config-{env}.yaml`` at the repo root, with
secrets and per-host overrides taken from the environment (a ``.env`` file
is loaded first when present).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import load_dotenv

from .mqtt import MQTTConfig

TELEMETRY_SOURCES = ("flespi", "rooms_latest")


def get_environment() -> str:
    """Get the current environment name.

    Returns:
        Environment name from FRIGO_ENV, defaults to 'frigo'.
    """
    return os.getenv("FRIGO_ENV", "frigo")


def get_config_path(
    config_name: Optional[str] = None,
    config_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """Get path to a configuration file.

    Args:
        config_name: Name of config file (without path). If None, uses
            config-{environment}.yaml based on FRIGO_ENV.
        config_dir: Directory containing config files. If None, uses
            the 'config' directory at the repo root.

    Returns:
        Path to the configuration file.
    """
    if config_dir is None:
        package_dir = Path(__file__).parent.parent.parent
        config_dir = package_dir / "config"

    config_dir = Path(config_dir)

    if config_name is None:
        config_name = f"config-{get_environment()}.yaml"

    return config_dir / config_name


def load_yaml_config(
    config_path: Optional[Union[str, Path]] = None,
    load_env: bool = True,
) -> dict:
    """Load YAML configuration file.

    Args:
        config_path: Path to config file. If None, uses get_config_path().
        load_env: Whether to load .env file first.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
    """
    if load_env:
        load_dotenv()

    if config_path is None:
        config_path = get_config_path()
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def get_log_level(config: dict) -> str:
    """Extract log level from config, with sensible default."""
    return config.get("log_level", "INFO").upper()


@dataclass
class FlespiConfig:
    """Flespi gateway REST settings."""
    base_url: str = "https://flespi.io"
    token: str = ""
    default_device_id: str = "6925665"
    history_limit: int = 200
    timeout: float = 15.0

    @classmethod
    def from_dict(cls, data: dict) -> "FlespiConfig":
        return cls(
            base_url=data.get("base_url", "https://flespi.io").rstrip("/"),
            token=data.get("token", ""),
            default_device_id=str(data.get("default_device_id", "6925665")),
            history_limit=data.get("history_limit", 200),
            timeout=data.get("timeout", 15.0),
        )


@dataclass
class RoomsApiConfig:
    """Rooms-latest telemetry endpoint. Disabled when base_url is empty."""
    base_url: str = ""
    timeout: float = 15.0

    @classmethod
    def from_dict(cls, data: dict) -> "RoomsApiConfig":
        return cls(
            base_url=(data.get("base_url") or "").rstrip("/"),
            timeout=data.get("timeout", 15.0),
        )


@dataclass
class WeatherConfig:
    """Outdoor weather lookup; defaults to the Midelt facility."""
    base_url: str = "https://api.open-meteo.com"
    latitude: float = 32.6852
    longitude: float = -4.7371
    timeout: float = 15.0

    @classmethod
    def from_dict(cls, data: dict) -> "WeatherConfig":
        return cls(
            base_url=data.get("base_url", "https://api.open-meteo.com").rstrip("/"),
            latitude=data.get("latitude", 32.6852),
            longitude=data.get("longitude", -4.7371),
            timeout=data.get("timeout", 15.0),
        )


@dataclass
class PollingConfig:
    """Refresh intervals and the per-device telemetry cache lifetime (seconds)."""
    rooms_interval: float = 60.0
    weather_interval: float = 300.0
    cache_ttl: float = 60.0

    @classmethod
    def from_dict(cls, data: dict) -> "PollingConfig":
        return cls(
            rooms_interval=data.get("rooms_interval", 60.0),
            weather_interval=data.get("weather_interval", 300.0),
            cache_ttl=data.get("cache_ttl", 60.0),
        )


@dataclass
class StoreConfig:
    """Document store backend: 'firestore' or 'memory'."""
    backend: str = "firestore"
    credentials_path: Optional[str] = None
    project_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "StoreConfig":
        return cls(
            backend=data.get("backend", "firestore"),
            credentials_path=data.get("credentials_path"),
            project_id=data.get("project_id"),
        )


@dataclass
class Config:
    """Main configuration."""
    tenant_id: str = ""
    telemetry_source: str = "flespi"
    temperature_alert_c: float = 10.0
    flespi: FlespiConfig = field(default_factory=FlespiConfig)
    rooms_api: RoomsApiConfig = field(default_factory=RoomsApiConfig)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    mqtt: MQTTConfig = field(default_factory=MQTTConfig)
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create config from dictionary."""
        source = data.get("telemetry_source", "flespi")
        if source not in TELEMETRY_SOURCES:
            raise ValueError(
                f"telemetry_source must be one of {', '.join(TELEMETRY_SOURCES)}, got {source!r}"
            )

        return cls(
            tenant_id=str(data.get("tenant_id", "")),
            telemetry_source=source,
            temperature_alert_c=data.get("temperature_alert_c", 10.0),
            flespi=FlespiConfig.from_dict(data.get("flespi", {})),
            rooms_api=RoomsApiConfig.from_dict(data.get("rooms_api", {})),
            weather=WeatherConfig.from_dict(data.get("weather", {})),
            polling=PollingConfig.from_dict(data.get("polling", {})),
            store=StoreConfig.from_dict(data.get("store", {})),
            mqtt=MQTTConfig.from_dict(data.get("mqtt", {})),
            log_level=get_log_level(data),
        )


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to YAML config file. If not provided, looks for
            FRIGO_CONFIG, then config/config-{env}.yaml. A missing default
            file falls back to built-in defaults.

    Returns:
        Config instance.
    """
    load_dotenv()

    if config_path is None:
        config_path = os.environ.get("FRIGO_CONFIG")

    if config_path is not None:
        data = load_yaml_config(config_path, load_env=False)
    else:
        default_path = get_config_path()
        data = load_yaml_config(default_path, load_env=False) if default_path.exists() else {}

    config = Config.from_dict(data)

    # Environment variable overrides
    if token := os.environ.get("FLESPI_TOKEN"):
        config.flespi.token = token
    if tenant_id := os.environ.get("FRIGO_TENANT_ID"):
        config.tenant_id = tenant_id
    if credentials := os.environ.get("GOOGLE_APPLICATION_CREDENTIALS"):
        config.store.credentials_path = credentials
    if mqtt_broker := os.environ.get("MQTT_BROKER"):
        config.mqtt.broker = mqtt_broker
    if log_level := os.environ.get("LOG_LEVEL"):
        config.log_level = log_level.upper()

    return config
