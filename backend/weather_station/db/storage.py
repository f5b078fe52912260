"""
MongoDB Storage Adapter
=======================

The only code that talks to MongoDB.

COLLECTIONS:
-----------
- weathers     = Open-Meteo snapshots (current conditions + 7-day forecast)
- sensordatas  = ESP32 readings (one document per push)

Both are append-only. Every document gets a server-assigned createdAt, and
that field is the only thing "latest" and "history" sort on (ties broken by
_id, which grows with insertion order).

HOW TO USE:
----------
    storage = MongoStorage.from_uri("mongodb://localhost:27017/weatherdb")
    storage.ping()                      # raises StorageError if Mongo is down
    stored = storage.insert_reading({...})
    newest = storage.latest_reading(device_id="ESP32-DHT22-001")

The MongoClient is created once per process and handed to whoever needs it.
pymongo does its own connection pooling, so sharing one handle is fine.
"""

import logging
import re
from datetime import datetime
from typing import Callable, Optional

from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from weather_station.errors import StorageError
from weather_station.utils.validation import ensure_utc, utcnow

logger = logging.getLogger(__name__)


WEATHER_COLLECTION = "weathers"
READINGS_COLLECTION = "sensordatas"

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def _clean(doc: dict) -> dict:
    """
    Make a MongoDB document JSON/pydantic friendly.

    - ObjectId _id becomes a string
    - Naive datetimes (pymongo default) become UTC-aware
    """
    cleaned = {}
    for key, value in doc.items():
        if key == "_id":
            cleaned[key] = str(value)
        elif isinstance(value, datetime):
            cleaned[key] = ensure_utc(value)
        elif isinstance(value, dict):
            cleaned[key] = _clean(value)
        elif isinstance(value, list):
            cleaned[key] = [_clean(v) if isinstance(v, dict) else v for v in value]
        else:
            cleaned[key] = value
    return cleaned


class MongoStorage:
    """
    Insert/find/aggregate over the two collections.

    Every pymongo failure comes out of here as a StorageError so callers
    only have one thing to catch.
    """

    def __init__(
        self,
        client: MongoClient,
        database: str = "weatherdb",
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            client: A pymongo (or mongomock) client. We don't create it here.
            database: Database name
            clock: Where createdAt comes from. Tests swap this out.
        """
        self.client = client
        self.db = client[database]
        self.weather = self.db[WEATHER_COLLECTION]
        self.readings = self.db[READINGS_COLLECTION]
        self._clock = clock

    @classmethod
    def from_uri(cls, uri: str, database: str, timeout_ms: int = 5000) -> "MongoStorage":
        """
        Build storage from a connection string.

        MongoClient connects lazily, so this never fails on its own.
        Call ping() to find out whether the server is actually there.
        """
        client = MongoClient(
            uri, serverSelectionTimeoutMS=timeout_ms, tz_aware=True, connect=False
        )
        return cls(client, database)

    # =========================================================================
    # CONNECTION
    # =========================================================================

    def ping(self) -> None:
        """Round-trip to the server. Raises StorageError if it's not reachable."""
        try:
            self.client.admin.command("ping")
        except PyMongoError as e:
            raise StorageError(f"MongoDB is not reachable: {e}") from e

    def close(self) -> None:
        self.client.close()

    # =========================================================================
    # WRITES
    # =========================================================================

    def _insert(self, collection, doc: dict) -> dict:
        record = dict(doc)
        record["createdAt"] = self._clock()
        try:
            result = collection.insert_one(record)
        except PyMongoError as e:
            raise StorageError(f"Insert into {collection.name} failed: {e}") from e
        record["_id"] = result.inserted_id
        logger.debug(f"Inserted {result.inserted_id} into {collection.name}")
        return _clean(record)

    def insert_weather(self, doc: dict) -> dict:
        """Store one weather snapshot. Returns it with _id and createdAt."""
        return self._insert(self.weather, doc)

    def insert_reading(self, doc: dict) -> dict:
        """Store one sensor reading. Returns it with _id and createdAt."""
        return self._insert(self.readings, doc)

    # =========================================================================
    # READS
    # =========================================================================

    def _find(self, collection, query: dict, limit: int) -> list[dict]:
        try:
            cursor = collection.find(query).sort(NEWEST_FIRST).limit(limit)
            return [_clean(doc) for doc in cursor]
        except PyMongoError as e:
            raise StorageError(f"Query on {collection.name} failed: {e}") from e

    def find_weather(self, location: Optional[str] = None, limit: int = 10) -> list[dict]:
        """
        Newest snapshots first.

        Args:
            location: Case-insensitive substring of location.name
            limit: Max number of snapshots
        """
        query = {}
        if location:
            query["location.name"] = {"$regex": re.escape(location), "$options": "i"}
        return self._find(self.weather, query, limit)

    def find_readings(self, device_id: Optional[str] = None, limit: int = 20) -> list[dict]:
        """
        Newest readings first.

        Args:
            device_id: Exact device id to filter on
            limit: Max number of readings
        """
        query = {"deviceId": device_id} if device_id else {}
        return self._find(self.readings, query, limit)

    def latest_reading(self, device_id: Optional[str] = None) -> Optional[dict]:
        """The single newest reading (optionally for one device), or None."""
        found = self.find_readings(device_id=device_id, limit=1)
        return found[0] if found else None

    # =========================================================================
    # AGGREGATES
    # =========================================================================

    def _aggregate(self, collection, group: dict) -> Optional[dict]:
        try:
            results = list(collection.aggregate([{"$group": {"_id": None, **group}}]))
        except PyMongoError as e:
            raise StorageError(f"Aggregation on {collection.name} failed: {e}") from e
        # MongoDB yields no group for an empty collection, mongomock yields one with a zero count
        if not results or not results[0].get("totalRecords"):
            return None
        results[0].pop("_id", None)
        return results[0]

    def weather_stats(self) -> Optional[dict]:
        """One pass over every snapshot. None when the collection is empty."""
        return self._aggregate(self.weather, {
            "totalRecords": {"$sum": 1},
            "avgTemperature": {"$avg": "$current.temperature"},
            "maxTemperature": {"$max": "$current.temperature"},
            "minTemperature": {"$min": "$current.temperature"},
            "uniqueLocations": {"$addToSet": "$location.name"},
        })

    def reading_stats(self) -> Optional[dict]:
        """One pass over every reading. None when the collection is empty."""
        return self._aggregate(self.readings, {
            "totalRecords": {"$sum": 1},
            "avgTemperature": {"$avg": "$sensorData.temperature"},
            "maxTemperature": {"$max": "$sensorData.temperature"},
            "minTemperature": {"$min": "$sensorData.temperature"},
            "avgHumidity": {"$avg": "$sensorData.humidity"},
            "maxHumidity": {"$max": "$sensorData.humidity"},
            "minHumidity": {"$min": "$sensorData.humidity"},
            "uniqueDevices": {"$addToSet": "$deviceId"},
        })
