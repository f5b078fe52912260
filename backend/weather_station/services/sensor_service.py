"""
Sensor Service
==============

Takes pushes from ESP32 boards and answers questions about them.

HOW A PUSH WORKS:
----------------
    ESP32 (DHT22)
        |
        | POST /api/sensors/data  {"deviceId": ..., "sensorData": {...}}
        v
    [IngestDefaults.apply]  <- fill in missing deviceId/location/source/timestamp
        |
        v
    [MongoDB: sensordatas]  <- one new document per push, never updated

Devices push whenever they like. Two pushes from the same device are two
independent rows; nothing is deduplicated.

All methods here are synchronous (pymongo). The routers run them in
FastAPI's threadpool.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from weather_station.db import MongoStorage
from weather_station.models import (
    DataSourceProfile,
    SensorPushRequest,
    SensorReading,
    SensorStats,
)
from weather_station.utils.validation import utcnow

logger = logging.getLogger(__name__)


class SensorService:
    """
    Ingest + query for sensor readings.

    HOW TO USE:
    ----------
    service = SensorService(storage, profile)

    reading = service.ingest(SensorPushRequest.model_validate(body))
    newest = service.latest(device_id="ESP32-DHT22-001")
    stats = service.stats()
    """

    def __init__(
        self,
        storage: MongoStorage,
        profile: DataSourceProfile,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            storage: Where readings go
            profile: Decides the placeholders and timestamp mode
            clock: Server time source for reading timestamps
        """
        self.storage = storage
        self.profile = profile
        self._clock = clock

    @property
    def storage_label(self) -> str:
        return self.profile.storage_label

    # =========================================================================
    # INGEST
    # =========================================================================

    def ingest(self, request: SensorPushRequest) -> SensorReading:
        """
        Apply defaults and store one reading.

        Raises:
            StorageError: MongoDB failed
        """
        reading = self.profile.defaults.apply(request, now=self._clock())
        stored = self.storage.insert_reading(reading.to_document())

        logger.info(
            f"[SENSOR {reading.device_id}] Saved reading: "
            f"{reading.sensor_data.temperature}°C, {reading.sensor_data.humidity}% "
            f"(source={reading.sensor_data.source})"
        )
        return SensorReading.model_validate(stored)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def latest(self, device_id: Optional[str] = None) -> Optional[SensorReading]:
        """Newest reading overall, or for one device. None if there isn't one."""
        doc = self.storage.latest_reading(device_id=device_id)
        return SensorReading.model_validate(doc) if doc else None

    def history(self, device_id: Optional[str] = None, limit: int = 20) -> list[SensorReading]:
        """Up to `limit` readings, newest first."""
        docs = self.storage.find_readings(device_id=device_id, limit=limit)
        return [SensorReading.model_validate(doc) for doc in docs]

    def stats(self) -> SensorStats:
        """
        Count/avg/min/max over every reading ever stored, plus distinct devices.

        An empty collection is not an error: everything comes back as zero.
        """
        raw = self.storage.reading_stats()
        if raw is None:
            return SensorStats(source=self.storage_label)

        devices = sorted(d for d in raw.get("uniqueDevices") or [] if d is not None)
        return SensorStats(
            total_records=raw.get("totalRecords") or 0,
            avg_temperature=raw.get("avgTemperature") or 0,
            max_temperature=raw.get("maxTemperature") or 0,
            min_temperature=raw.get("minTemperature") or 0,
            avg_humidity=raw.get("avgHumidity") or 0,
            max_humidity=raw.get("maxHumidity") or 0,
            min_humidity=raw.get("minHumidity") or 0,
            unique_devices=devices,
            unique_device_count=len(devices),
            source=self.storage_label,
        )
