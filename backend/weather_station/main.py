"""
Weather Station - Backend API
=============================
FastAPI application for the ESP32 weather dashboard.

ARCHITECTURE:
    ESP32 boards with DHT11/DHT22 probes push readings over WiFi. The hosted
    dashboard asks this backend for sensor history, Open-Meteo forecasts and
    stats. Prometheus scrapes /metrics for Grafana.

    [ESP32 sensors] --POST /api/sensors/data--> [This Backend] ---> [MongoDB]
                                                     ^    |
                                     [Dashboard] ----+    +--GET--> [Open-Meteo]
                                     [Prometheus] --/metrics

DATA SOURCES:
    remote - Open-Meteo weather/location routes + sensor routes (default)
    local  - Sensor routes only, for a box running next to the sensors

HOW TO RUN:
    # Install dependencies
    pip install -e .

    # Copy environment config
    cp env.example.txt .env
    # Edit .env with your settings

    # Run the server
    weather-station
    # or
    uvicorn weather_station.main:create_app --factory --app-dir backend --port 5000

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:5000/docs
    - ReDoc: http://localhost:5000/redoc
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from weather_station.config import Config
from weather_station.db import MongoStorage
from weather_station.errors import StorageError
from weather_station.routers import (
    build_metrics_router,
    build_sensors_router,
    build_weather_router,
)
from weather_station.services import MetricsService, SensorService, WeatherService

logger = logging.getLogger(__name__)


def configure_logging(level: str = Config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def connect_storage(storage: MongoStorage) -> None:
    """
    Make sure MongoDB is there before we take any requests.

    No database means nothing works, so we don't limp along: log it and exit.
    """
    try:
        storage.ping()
    except StorageError as e:
        logger.critical(f"MongoDB connection error: {e}")
        raise SystemExit(1) from e
    logger.info("Connected to MongoDB successfully")


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    config: type[Config] = Config,
    storage: Optional[MongoStorage] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        config: Config class (subclass it to override settings)
        storage: MongoStorage to use. Built from MONGODB_URI if not given.
        http_client: Client for Open-Meteo. Built here if not given.

    Whatever we build here, we also close on shutdown. Things passed in
    belong to the caller.
    """
    profile = config.profile()

    owns_storage = storage is None
    if storage is None:
        storage = MongoStorage.from_uri(
            config.MONGODB_URI,
            database=config.database_name(),
            timeout_ms=config.MONGODB_TIMEOUT_MS,
        )

    owns_http_client = http_client is None
    if http_client is None:
        http_client = httpx.AsyncClient(timeout=config.HTTP_TIMEOUT)

    sensor_service = SensorService(storage, profile)
    metrics_service = MetricsService(sensor_service)
    weather_service = WeatherService(storage, http_client) if profile.weather_api_enabled else None

    # ========== LIFESPAN ==========

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        STARTUP:
            1. Ping MongoDB (exit if it's not there)
            2. Log what we're serving

        SHUTDOWN:
            1. Close the Open-Meteo client
            2. Close the MongoDB client
        """
        logger.info("=" * 60)
        logger.info(f"WEATHER STATION - Starting Backend ({profile.name} data source)")
        logger.info("=" * 60)

        connect_storage(storage)

        logger.info(f"   Database: {profile.storage_label} ({config.database_name()})")
        logger.info(f"   Sensor timestamps: {profile.defaults.timestamp_mode.value}")
        logger.info(f"   Open-Meteo routes: {'enabled' if weather_service else 'disabled'}")
        logger.info("   Ready to receive ESP32 sensor data at /api/sensors/data")
        logger.info("   Prometheus metrics available at /metrics")

        yield  # Application runs here

        logger.info("Shutting down...")
        if owns_http_client:
            await http_client.aclose()
        if owns_storage:
            storage.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Weather Station API",
        description="""
## Overview

Collects temperature/humidity readings from ESP32 sensors, fetches forecasts
from Open-Meteo, and serves history, stats and Prometheus metrics.

## Data Sources

| Profile | Open-Meteo routes | Sensor routes | Default source label |
|---------|-------------------|---------------|----------------------|
| **remote** | Yes | Yes | ESP32 |
| **local** | No | Yes | ESP32-Local |

Set `DATA_SOURCE` to pick one.
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ========== CORS ==========
    # The dashboard is hosted elsewhere and devices don't send Origin at all
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ========== ROUTERS ==========
    app.include_router(build_sensors_router(sensor_service))
    app.include_router(build_metrics_router(metrics_service))
    if weather_service is not None:
        app.include_router(build_weather_router(weather_service))

    # ========== ROOT ENDPOINTS ==========

    @app.get(
        "/",
        summary="API Information",
        description="Get basic API information and available endpoints.",
    )
    async def root():
        endpoints = {
            "sensors": {
                "push": "POST /api/sensors/data",
                "latest": "GET /api/sensors/latest?deviceId=",
                "history": "GET /api/sensors/history?deviceId=&limit=20",
                "stats": "GET /api/sensors/stats",
            },
            "metrics": "GET /metrics",
            "health": "GET /health",
        }
        if weather_service is not None:
            endpoints["weather"] = {
                "current": "GET /api/weather/current/{lat}/{lon}?name=",
                "history": "GET /api/weather/history?location=&limit=10",
                "stats": "GET /api/weather/stats",
            }
            endpoints["locations"] = {"search": "GET /api/locations/search/{query}"}

        return {
            "name": "Weather Station API",
            "version": "1.0.0",
            "dataSource": profile.name,
            "documentation": {
                "swagger": "/docs",
                "redoc": "/redoc",
                "openapi": "/openapi.json",
            },
            "endpoints": endpoints,
        }

    @app.get(
        "/health",
        summary="Health Check",
        description="Check if the backend is running.",
    )
    async def health():
        """Health check endpoint."""
        return {
            "status": "OK",
            "message": "Weather Station API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": profile.storage_label,
            "dataSource": profile.name,
        }

    return app


def run() -> None:
    """Console entry point: configure logging, build the app and serve it with uvicorn."""
    configure_logging()
    uvicorn.run(create_app(), host=Config.HOST, port=Config.PORT)


if __name__ == "__main__":
    run()
