"""
Weather API Router
==================

Open-Meteo backed endpoints. Only mounted when DATA_SOURCE=remote.

ALL ENDPOINTS:
-------------
GET    /api/weather/current/{lat}/{lon}   - Fetch + store a snapshot (?name=Bangkok)
GET    /api/weather/history               - Stored snapshots (?location=bang&limit=10)
GET    /api/weather/stats                 - Temperature stats + locations seen
GET    /api/locations/search/{query}      - Up to 5 matching places
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from weather_station.services import WeatherService

logger = logging.getLogger(__name__)


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


def build_weather_router(weather_service: WeatherService) -> APIRouter:
    """Create the weather + location search router around one WeatherService."""
    router = APIRouter(tags=["weather"])

    def get_weather_service() -> WeatherService:
        return weather_service

    @router.get("/api/weather/current/{lat}/{lon}")
    async def get_current_weather(
        lat: float,
        lon: float,
        name: Optional[str] = None,
        service: WeatherService = Depends(get_weather_service),
    ):
        """
        Current conditions + 7-day forecast for a location.

        The snapshot is saved to the history before it's returned.
        """
        try:
            snapshot = await service.fetch_current(lat, lon, name=name)
        except Exception:
            logger.exception(f"[WEATHER] Failed to fetch weather for {lat}, {lon}")
            return _error("Failed to fetch weather data")
        return snapshot.to_json()

    @router.get("/api/weather/history")
    def get_weather_history(
        location: Optional[str] = Query(None, description="Case-insensitive part of the location name"),
        limit: int = Query(10, ge=1, description="Max snapshots to return"),
        service: WeatherService = Depends(get_weather_service),
    ):
        """Stored snapshots, newest first."""
        try:
            snapshots = service.history(location=location, limit=limit)
        except Exception:
            logger.exception("[WEATHER] Failed to fetch historical data")
            return _error("Failed to fetch historical data")
        return [s.to_json() for s in snapshots]

    @router.get("/api/weather/stats")
    def get_weather_stats(service: WeatherService = Depends(get_weather_service)):
        """Count/avg/min/max temperature over every snapshot."""
        try:
            return service.stats().to_json()
        except Exception:
            logger.exception("[WEATHER] Failed to compute weather statistics")
            return _error("Failed to fetch statistics")

    @router.get("/api/locations/search/{query}")
    async def search_locations(
        query: str,
        service: WeatherService = Depends(get_weather_service),
    ):
        """Search places by name. Returns [] when nothing matches."""
        try:
            candidates = await service.search_locations(query)
        except Exception:
            logger.exception(f"[WEATHER] Location search failed for '{query}'")
            return _error("Failed to search locations")
        return [c.to_json() for c in candidates]

    return router
