"""
Weather Models
==============
Pydantic models for Open-Meteo snapshots, weather stats and location search.

A snapshot is the current conditions plus a 7-day forecast for one place,
captured at one point in time. Snapshots are never edited after insert.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from weather_station.models.base import CamelModel, Location


# =============================================================================
# WMO WEATHER CODES
# =============================================================================
# Open-Meteo reports conditions as WMO weather interpretation codes.
# https://open-meteo.com/en/docs (scroll to "WMO Weather interpretation codes")

WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

UNKNOWN_WEATHER = "Unknown"


def describe_weather_code(code) -> str:
    """Turn a WMO code into words. Anything not in the table is 'Unknown'."""
    return WEATHER_CODES.get(code, UNKNOWN_WEATHER)


# =============================================================================
# SNAPSHOT MODELS
# =============================================================================

class CurrentConditions(CamelModel):
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None
    weather_code: Optional[int] = None
    description: str = UNKNOWN_WEATHER
    timestamp: datetime


class ForecastDay(CamelModel):
    date: str = Field(..., description="Local calendar date, YYYY-MM-DD")
    max_temp: Optional[float] = None
    min_temp: Optional[float] = None
    weather_code: Optional[int] = None
    description: str = UNKNOWN_WEATHER
    precipitation: Optional[float] = None


class WeatherSnapshot(CamelModel):
    id: Optional[str] = Field(None, alias="_id")
    location: Location
    current: CurrentConditions
    forecast: list[ForecastDay] = Field(default_factory=list)
    created_at: Optional[datetime] = None


# =============================================================================
# STATS + SEARCH MODELS
# =============================================================================

class WeatherStats(CamelModel):
    """Aggregate over every stored snapshot's current conditions."""
    total_records: int = 0
    avg_temperature: float = 0
    max_temperature: float = 0
    min_temperature: float = 0
    unique_locations: list[str] = Field(default_factory=list)
    unique_location_count: int = 0


class LocationCandidate(CamelModel):
    """One geocoding hit, ready for a search dropdown."""
    name: str
    country: Optional[str] = None
    latitude: float
    longitude: float
    display_name: str
