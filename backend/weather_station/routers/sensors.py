"""
Sensors API Router
==================

Where ESP32 boards push readings and where the dashboard reads them back.

ALL ENDPOINTS:
-------------
POST   /api/sensors/data      - An ESP32 pushes one reading
GET    /api/sensors/latest    - Newest reading (optionally ?deviceId=...)
GET    /api/sensors/history   - Recent readings, newest first (?deviceId=&limit=20)
GET    /api/sensors/stats     - Count/avg/min/max over everything + distinct devices

ERRORS:
------
Every endpoint catches its own failures, logs them and answers with
{"success": false, "error": "..."} and HTTP 500. /latest answers 404 when
there's nothing to return. Nothing is retried.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from weather_station.models import SensorPushRequest
from weather_station.services import SensorService

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def build_sensors_router(sensor_service: SensorService) -> APIRouter:
    """
    Create the /api/sensors router around one SensorService.

    The service is handed in here when the app is built, so there's no
    module-level "current manager" to set up before requests arrive.
    """
    router = APIRouter(prefix="/api/sensors", tags=["sensors"])

    def get_sensor_service() -> SensorService:
        return sensor_service

    # =========================================================================
    # INGEST
    # =========================================================================

    @router.post("/data")
    def receive_sensor_data(
        request: SensorPushRequest,
        service: SensorService = Depends(get_sensor_service),
    ):
        """
        Receive one reading from an ESP32.

        Send us:
        - deviceId: Which board (optional, defaults to a placeholder)
        - location: {name, latitude, longitude} (optional)
        - sensorData: {temperature, humidity, timestamp?, source?}

        We'll give you back the stored reading with its _id and createdAt.
        """
        logger.info(f"[SENSOR] Received push: {request.model_dump(by_alias=True, exclude_none=True)}")
        try:
            reading = service.ingest(request)
        except Exception:
            logger.exception("[SENSOR] Failed to save sensor data")
            return _error(500, "Failed to save sensor data")

        return {
            "success": True,
            "message": f"Sensor data saved to {service.storage_label}",
            "data": reading.to_json(),
        }

    # =========================================================================
    # QUERIES
    # =========================================================================

    @router.get("/latest")
    def get_latest_sensor_data(
        device_id: Optional[str] = Query(None, alias="deviceId"),
        service: SensorService = Depends(get_sensor_service),
    ):
        """Newest reading. Filter by device with ?deviceId=ESP32-DHT22-001"""
        try:
            reading = service.latest(device_id=device_id)
        except Exception:
            logger.exception("[SENSOR] Failed to fetch latest sensor data")
            return _error(500, "Failed to fetch sensor data")

        if reading is None:
            return JSONResponse(
                status_code=404,
                content={"success": False, "message": "No sensor data found"},
            )

        return {
            "success": True,
            "data": reading.to_json(),
            "source": service.storage_label,
        }

    @router.get("/history")
    def get_sensor_history(
        device_id: Optional[str] = Query(None, alias="deviceId"),
        limit: int = Query(20, ge=1, description="Max readings to return"),
        service: SensorService = Depends(get_sensor_service),
    ):
        """Recent readings, newest first."""
        try:
            readings = service.history(device_id=device_id, limit=limit)
        except Exception:
            logger.exception("[SENSOR] Failed to fetch sensor history")
            return _error(500, "Failed to fetch sensor history")

        return {
            "success": True,
            "data": [r.to_json() for r in readings],
            "count": len(readings),
            "source": service.storage_label,
        }

    @router.get("/stats")
    def get_sensor_stats(service: SensorService = Depends(get_sensor_service)):
        """
        Aggregate stats over every reading ever stored.

        An empty database is fine: you get zeros and an empty device list.
        """
        try:
            return service.stats().to_json()
        except Exception:
            logger.exception("[SENSOR] Failed to compute sensor statistics")
            return _error(500, "Failed to fetch statistics")

    return router
