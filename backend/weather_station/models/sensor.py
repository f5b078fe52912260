"""
Sensor Models
=============
Pydantic models for ESP32 sensor pushes and the readings we store.

This module defines:
- Request models: What an ESP32 sends to POST /api/sensors/data
- Stored models: What a reading looks like once it's in MongoDB
- Stats models: What the aggregate endpoints return

WHAT AN ESP32 SENDS:
-------------------
    {
        "deviceId": "ESP32-DHT22-001",
        "location": {"name": "Greenhouse", "latitude": 13.75, "longitude": 100.5},
        "sensorData": {
            "temperature": 28.4,
            "humidity": 61.0,
            "timestamp": 1767225600,
            "source": "ESP32"
        }
    }

Only temperature and humidity are required. Everything else gets a default
(see IngestDefaults in profile.py).
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import Field

from weather_station.models.base import CamelModel, Location


# =============================================================================
# REQUEST MODELS - What devices send to the backend
# =============================================================================

class LocationInput(CamelModel):
    """Device-reported location. Every field is optional."""
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class SensorDataInput(CamelModel):
    """
    The measurement part of a push.

    timestamp can be an ISO-8601 string, Unix seconds or Unix milliseconds.
    Whether we actually use it depends on the timestamp mode.
    """
    temperature: float = Field(..., description="Temperature in °C")
    humidity: float = Field(..., description="Relative humidity %")
    timestamp: Optional[Union[float, str]] = Field(None, description="Device clock reading")
    source: Optional[str] = Field(None, description="Device class label (e.g. 'ESP32')")


class SensorPushRequest(CamelModel):
    """
    Body for POST /api/sensors/data.

    Example Request:
        POST /api/sensors/data
        {"deviceId": "d1", "sensorData": {"temperature": 21.5, "humidity": 40}}
    """
    device_id: Optional[str] = Field(None, description="Device identifier")
    location: Optional[LocationInput] = None
    sensor_data: SensorDataInput


# =============================================================================
# STORED MODELS
# =============================================================================

class SensorData(CamelModel):
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    timestamp: datetime
    source: str


class SensorReading(CamelModel):
    """
    One stored measurement from a device.

    created_at is assigned by the server on insert and is the only thing
    "latest" and "history" sort on. There is no update or delete path.
    """
    id: Optional[str] = Field(None, alias="_id")
    device_id: str
    location: Location
    sensor_data: SensorData
    created_at: Optional[datetime] = None


# =============================================================================
# STATS MODELS
# =============================================================================

class SensorStats(CamelModel):
    """Aggregate over every stored reading. No time window."""
    total_records: int = 0
    avg_temperature: float = 0
    max_temperature: float = 0
    min_temperature: float = 0
    avg_humidity: float = 0
    max_humidity: float = 0
    min_humidity: float = 0
    unique_devices: list[str] = Field(default_factory=list)
    unique_device_count: int = 0
    source: str = ""
