"""
Configuration
=============

Everything the backend needs to know about its environment lives here.

The server can run with two data sources:

- remote: Open-Meteo forecast/geocoding API AND the ESP32 sensors.
          This is what the hosted dashboard talks to.
- local:  ESP32 sensors only. Meant for a Raspberry Pi / Docker box sitting
          next to the sensors with its own MongoDB. No internet needed.

Both share the same handlers. A profile just decides which routes get mounted
and what placeholders are used when a device leaves fields out of its push.

Environment Variables:
    PORT: Port for uvicorn (default: 5000)
    HOST: Interface to bind (default: 0.0.0.0)
    MONGODB_URI: MongoDB connection string (default: mongodb://localhost:27017/weatherdb)
    MONGODB_TIMEOUT_MS: How long to wait for MongoDB before giving up (default: 5000)
    DATA_SOURCE: "remote" or "local" (default: remote)
    SENSOR_TIMESTAMP_MODE: "client" or "server" (default: depends on DATA_SOURCE)
    HTTP_TIMEOUT: Seconds to wait for Open-Meteo (default: 15)
    LOG_LEVEL: Python logging level name (default: INFO)
"""

import os
from typing import Optional

from dotenv import load_dotenv

from weather_station.models import DataSourceProfile, IngestDefaults, TimestampMode


# Load environment variables from .env file
load_dotenv()


DEFAULT_DATABASE = "weatherdb"


# =============================================================================
# DATA SOURCE PROFILES
# =============================================================================

PROFILES = {
    "remote": DataSourceProfile(
        name="remote",
        storage_label="MongoDB",
        weather_api_enabled=True,
        defaults=IngestDefaults(
            device_id="Unknown-ESP32",
            location_name="ESP32 Sensor",
            source="ESP32",
            timestamp_mode=TimestampMode.CLIENT,
        ),
    ),
    "local": DataSourceProfile(
        name="local",
        storage_label="Local MongoDB",
        weather_api_enabled=False,
        defaults=IngestDefaults(
            device_id="ESP32-Local",
            location_name="ESP32 Sensor (Local)",
            source="ESP32-Local",
            timestamp_mode=TimestampMode.SERVER,
        ),
    ),
}


def get_profile(name: str, timestamp_mode: Optional[str] = None) -> DataSourceProfile:
    """
    Look up a data source profile by name.

    Args:
        name: "remote" or "local" (case-insensitive)
        timestamp_mode: Optional "client"/"server" override for sensor timestamps

    Raises:
        ValueError: Unknown profile or timestamp mode
    """
    key = (name or "").strip().lower()
    if key not in PROFILES:
        raise ValueError(
            f"Unknown DATA_SOURCE '{name}'. Expected one of: {', '.join(sorted(PROFILES))}"
        )

    profile = PROFILES[key]
    if timestamp_mode:
        mode = TimestampMode(timestamp_mode.strip().lower())
        defaults = profile.defaults.model_copy(update={"timestamp_mode": mode})
        profile = profile.model_copy(update={"defaults": defaults})
    return profile


def database_name_from_uri(uri: str) -> str:
    """
    Pull the database name out of a MongoDB URI.

    mongodb://host:27017/weatherdb?retryWrites=true -> "weatherdb"
    mongodb+srv://user:pw@cluster.example.net/      -> "weatherdb" (fallback)
    """
    rest = uri.split("://", 1)[-1]
    if "/" not in rest:
        return DEFAULT_DATABASE
    path = rest.split("/", 1)[1]
    name = path.split("?", 1)[0].strip("/")
    return name or DEFAULT_DATABASE


class Config:
    """
    Application configuration loaded from environment variables.

    Subclass and override attributes to change settings in tests:

        class LocalConfig(Config):
            DATA_SOURCE = "local"
    """

    # uvicorn bind address
    PORT = int(os.getenv("PORT", "5000"))
    HOST = os.getenv("HOST", "0.0.0.0")

    # MongoDB
    MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/weatherdb")
    MONGODB_TIMEOUT_MS = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))

    # Which data source strategy to run ("remote" or "local")
    DATA_SOURCE = os.getenv("DATA_SOURCE", "remote")

    # "client" = trust the timestamp the device sends, "server" = always use our clock
    # Empty means "whatever the profile says"
    SENSOR_TIMESTAMP_MODE = os.getenv("SENSOR_TIMESTAMP_MODE", "")

    # Open-Meteo request timeout in seconds
    HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "15"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def profile(cls) -> DataSourceProfile:
        return get_profile(cls.DATA_SOURCE, cls.SENSOR_TIMESTAMP_MODE or None)

    @classmethod
    def database_name(cls) -> str:
        return database_name_from_uri(cls.MONGODB_URI)
