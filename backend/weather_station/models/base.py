"""
Shared model plumbing.

MongoDB documents and the dashboard both speak camelCase (deviceId, sensorData,
createdAt...). Python code speaks snake_case. CamelModel lets us have both.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """Dump for MongoDB: camelCase keys, no _id/createdAt (storage assigns those)."""
        return self.model_dump(by_alias=True, exclude={"id", "created_at"})

    def to_json(self) -> dict:
        """Dump for an HTTP response body."""
        return self.model_dump(by_alias=True, mode="json")


class Location(CamelModel):
    """Where a reading or snapshot was taken. Inlined into every record."""
    name: str = Field(..., description="Display name (e.g. 'Bangkok' or 'ESP32 Sensor')")
    latitude: float = Field(0.0, description="Latitude in decimal degrees")
    longitude: float = Field(0.0, description="Longitude in decimal degrees")
