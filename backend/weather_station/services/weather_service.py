"""
Weather Service
===============

Talks to Open-Meteo and keeps a history of what it said.

WHAT THIS DOES:
--------------
1. Asks Open-Meteo for current conditions + a 7-day forecast at a lat/lon
2. Turns the numeric WMO weather codes into words ("Partly cloudy")
3. Saves the whole thing to MongoDB as a snapshot
4. Hands the snapshot back to the dashboard

It also does location search (Open-Meteo geocoding) so the dashboard can turn
"Chiang Mai" into coordinates.

THE DATA FLOW:
-------------
    Dashboard
        |
        | GET /api/weather/current/13.75/100.5?name=Bangkok
        v
    [This Service] --GET--> api.open-meteo.com/v1/forecast
        |
        | map codes, build snapshot
        v
    [MongoDB: weathers]

No API key needed. Open-Meteo is free for non-commercial use.
"""

import logging
from typing import Optional

import httpx
from fastapi.concurrency import run_in_threadpool

from weather_station.db import MongoStorage
from weather_station.errors import UpstreamError
from weather_station.models import (
    CurrentConditions,
    ForecastDay,
    Location,
    LocationCandidate,
    WeatherSnapshot,
    WeatherStats,
    describe_weather_code,
)
from weather_station.utils.validation import utcnow

logger = logging.getLogger(__name__)


FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"

FORECAST_DAYS = 7
SEARCH_RESULT_COUNT = 5

CURRENT_VARIABLES = [
    "temperature_2m",
    "relative_humidity_2m",
    "wind_speed_10m",
    "wind_direction_10m",
    "weather_code",
]
DAILY_VARIABLES = [
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
]


# =============================================================================
# RESPONSE PARSING
# =============================================================================

def build_snapshot(
    raw: dict,
    latitude: float,
    longitude: float,
    name: Optional[str] = None,
) -> WeatherSnapshot:
    """
    Turn an Open-Meteo forecast response into a WeatherSnapshot.

    One forecast entry is built per element of daily.time, so the forecast
    list is exactly as long as what Open-Meteo returned.

    Raises:
        UpstreamError: The response is missing "current" or "daily", or the
                       daily arrays don't line up
    """
    try:
        current = raw["current"]
        daily = raw["daily"]
        forecast = [
            ForecastDay(
                date=date,
                max_temp=daily["temperature_2m_max"][i],
                min_temp=daily["temperature_2m_min"][i],
                weather_code=daily["weather_code"][i],
                description=describe_weather_code(daily["weather_code"][i]),
                precipitation=daily["precipitation_sum"][i],
            )
            for i, date in enumerate(daily["time"])
        ]
        conditions = CurrentConditions(
            temperature=current.get("temperature_2m"),
            humidity=current.get("relative_humidity_2m"),
            wind_speed=current.get("wind_speed_10m"),
            wind_direction=current.get("wind_direction_10m"),
            weather_code=current.get("weather_code"),
            description=describe_weather_code(current.get("weather_code")),
            timestamp=utcnow(),
        )
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
        raise UpstreamError(f"Malformed forecast response: {e!r}") from e

    return WeatherSnapshot(
        location=Location(
            name=name or f"{latitude}, {longitude}",
            latitude=latitude,
            longitude=longitude,
        ),
        current=conditions,
        forecast=forecast,
    )


def build_candidate(result: dict) -> LocationCandidate:
    """One geocoding hit -> LocationCandidate with a 'Name, Country' label."""
    country = result.get("country")
    region = country or result.get("admin1") or ""
    return LocationCandidate(
        name=result["name"],
        country=country,
        latitude=result["latitude"],
        longitude=result["longitude"],
        display_name=f"{result['name']}, {region}",
    )


# =============================================================================
# THE MAIN SERVICE CLASS
# =============================================================================

class WeatherService:
    """
    Open-Meteo client + weather history.

    HOW TO USE:
    ----------
    service = WeatherService(storage, http_client)

    snapshot = await service.fetch_current(13.75, 100.5, name="Bangkok")
    print(snapshot.current.description)   # "Partly cloudy"

    recent = service.history(location="bang", limit=5)   # sync, runs in a threadpool
    """

    def __init__(self, storage: MongoStorage, http_client: httpx.AsyncClient):
        """
        Args:
            storage: Where snapshots go
            http_client: Shared client for Open-Meteo. We don't own it, so
                         we don't close it.
        """
        self.storage = storage
        self.http_client = http_client

    async def _get_json(self, url: str, params: dict) -> dict:
        """GET a JSON object from Open-Meteo. Anything off raises UpstreamError."""
        try:
            response = await self.http_client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Open-Meteo returned HTTP {e.response.status_code} for {url}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Cannot reach Open-Meteo at {url}: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Open-Meteo sent invalid JSON from {url}") from e

        if not isinstance(data, dict):
            raise UpstreamError(f"Open-Meteo sent unexpected payload from {url}")
        return data

    # =========================================================================
    # FORECAST
    # =========================================================================

    async def fetch_current(
        self,
        latitude: float,
        longitude: float,
        name: Optional[str] = None,
    ) -> WeatherSnapshot:
        """
        Fetch, store and return a snapshot for one location.

        Args:
            latitude: Decimal degrees
            longitude: Decimal degrees
            name: Display name. Defaults to "<lat>, <lon>".

        Raises:
            UpstreamError: Open-Meteo failed
            StorageError: MongoDB failed
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join(CURRENT_VARIABLES),
            "daily": ",".join(DAILY_VARIABLES),
            "timezone": "auto",
            "forecast_days": FORECAST_DAYS,
        }
        logger.info(f"[WEATHER] Fetching forecast for {latitude}, {longitude}")
        raw = await self._get_json(FORECAST_URL, params)

        snapshot = build_snapshot(raw, latitude, longitude, name)
        stored = await run_in_threadpool(self.storage.insert_weather, snapshot.to_document())

        logger.info(
            f"[WEATHER] Saved snapshot for {snapshot.location.name}: "
            f"{snapshot.current.temperature}°C, {snapshot.current.description}"
        )
        return WeatherSnapshot.model_validate(stored)

    # =========================================================================
    # LOCATION SEARCH
    # =========================================================================

    async def search_locations(self, query: str) -> list[LocationCandidate]:
        """
        Free-text place search. Up to 5 hits; [] when Open-Meteo finds nothing.

        Raises:
            UpstreamError: Open-Meteo failed
        """
        params = {
            "name": query,
            "count": SEARCH_RESULT_COUNT,
            "language": "en",
            "format": "json",
        }
        data = await self._get_json(GEOCODING_URL, params)

        results = data.get("results") or []
        try:
            return [build_candidate(r) for r in results[:SEARCH_RESULT_COUNT]]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Malformed geocoding response: {e!r}") from e

    # =========================================================================
    # HISTORY + STATS (storage only)
    # =========================================================================

    def history(self, location: Optional[str] = None, limit: int = 10) -> list[WeatherSnapshot]:
        """Newest snapshots first, optionally filtered by location name."""
        docs = self.storage.find_weather(location=location, limit=limit)
        return [WeatherSnapshot.model_validate(doc) for doc in docs]

    def stats(self) -> WeatherStats:
        """Count/avg/min/max temperature and the set of locations seen."""
        raw = self.storage.weather_stats()
        if raw is None:
            return WeatherStats()

        locations = sorted(name for name in raw.get("uniqueLocations") or [] if name is not None)
        return WeatherStats(
            total_records=raw.get("totalRecords") or 0,
            avg_temperature=raw.get("avgTemperature") or 0,
            max_temperature=raw.get("maxTemperature") or 0,
            min_temperature=raw.get("minTemperature") or 0,
            unique_locations=locations,
            unique_location_count=len(locations),
        )
