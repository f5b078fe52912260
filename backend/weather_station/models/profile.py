"""
Data Source Profiles
====================

The backend used to be two near-identical servers: one talking to Open-Meteo
and the hosted database, one running next to the sensors with a local
database. They differed in a handful of defaults. A profile captures exactly
those differences so the handlers can stay the same.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from weather_station.models.base import Location
from weather_station.models.sensor import SensorData, SensorPushRequest, SensorReading
from weather_station.utils.validation import parse_client_timestamp


class TimestampMode(str, Enum):
    """
    Where a reading's sensorData.timestamp comes from.

    - CLIENT: Use the timestamp the device sent (falls back to server time
              if it's missing or can't be parsed)
    - SERVER: Ignore the device and always use server time
    """
    CLIENT = "client"
    SERVER = "server"


class IngestDefaults(BaseModel):
    """
    Placeholders for fields a device leaves out of its push.

    apply() is the one place these fallbacks happen. Empty strings count as
    missing, same as the firmware expects.
    """
    device_id: str
    location_name: str
    latitude: float = 0.0
    longitude: float = 0.0
    source: str
    timestamp_mode: TimestampMode = TimestampMode.CLIENT

    def resolve_timestamp(self, raw, now: datetime) -> datetime:
        if self.timestamp_mode == TimestampMode.SERVER:
            return now
        return parse_client_timestamp(raw) or now

    def apply(self, request: SensorPushRequest, now: datetime) -> SensorReading:
        """
        Fill in every missing field and build the reading to store.

        Args:
            request: What the device sent
            now: Server time for this request

        Returns:
            A SensorReading with no _id/created_at yet (storage sets those)
        """
        location = request.location
        data = request.sensor_data

        return SensorReading(
            device_id=request.device_id or self.device_id,
            location=Location(
                name=(location.name if location else None) or self.location_name,
                latitude=(location.latitude if location else None) or self.latitude,
                longitude=(location.longitude if location else None) or self.longitude,
            ),
            sensor_data=SensorData(
                temperature=data.temperature,
                humidity=data.humidity,
                timestamp=self.resolve_timestamp(data.timestamp, now),
                source=data.source or self.source,
            ),
        )


class DataSourceProfile(BaseModel):
    """
    One data source strategy.

    Fields:
        name: "remote" or "local"
        storage_label: Shown in /health and the sensor stats "source" tag
        weather_api_enabled: Mount the Open-Meteo weather/location routes?
        defaults: Placeholders for sensor pushes
    """
    name: str
    storage_label: str
    weather_api_enabled: bool = True
    defaults: IngestDefaults = Field(...)
