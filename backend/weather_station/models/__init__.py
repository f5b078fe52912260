"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from weather_station.models import SensorPushRequest, WeatherSnapshot
"""

from .base import CamelModel, Location

from .sensor import (
    # What an ESP32 sends us
    LocationInput,
    SensorDataInput,
    SensorPushRequest,

    # What we store
    SensorData,
    SensorReading,
    SensorStats,
)

from .weather import (
    WEATHER_CODES,
    UNKNOWN_WEATHER,
    describe_weather_code,
    CurrentConditions,
    ForecastDay,
    WeatherSnapshot,
    WeatherStats,
    LocationCandidate,
)

from .profile import TimestampMode, IngestDefaults, DataSourceProfile

__all__ = [
    "CamelModel",
    "Location",
    "LocationInput",
    "SensorDataInput",
    "SensorPushRequest",
    "SensorData",
    "SensorReading",
    "SensorStats",
    "WEATHER_CODES",
    "UNKNOWN_WEATHER",
    "describe_weather_code",
    "CurrentConditions",
    "ForecastDay",
    "WeatherSnapshot",
    "WeatherStats",
    "LocationCandidate",
    "TimestampMode",
    "IngestDefaults",
    "DataSourceProfile",
]
