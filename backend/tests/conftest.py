"""Shared fixtures for the weather station tests.

MongoDB is replaced with mongomock and Open-Meteo with an httpx.MockTransport,
so nothing here touches the network.

Fixtures:
    clock: Deterministic clock that ticks one second per call.
    storage: MongoStorage over an in-memory mongomock client.
    remote_profile / local_profile: The two data source profiles.
    open_meteo: Recording fake for the forecast + geocoding APIs.
    http_client: httpx.AsyncClient wired to the fake.
    client: FastAPI TestClient for a remote-profile app.
"""
import logging
from datetime import datetime, timedelta, timezone

import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

from weather_station.config import Config, get_profile
from weather_station.db import MongoStorage
from weather_station.errors import StorageError
from weather_station.main import create_app


# Keep test output quiet
logging.getLogger("weather_station").setLevel(logging.WARNING)


class RemoteConfig(Config):
    DATA_SOURCE = "remote"
    SENSOR_TIMESTAMP_MODE = ""


class LocalConfig(Config):
    DATA_SOURCE = "local"
    SENSOR_TIMESTAMP_MODE = ""


START = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that advances a fixed step every time it is read."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


class BrokenStorage:
    """Storage stand-in where every call fails like a dead MongoDB."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise StorageError(f"{name}: connection refused")

        return fail


# ---------------------------------------------------------------------------
# Open-Meteo fake
# ---------------------------------------------------------------------------

def sample_forecast(codes=(0, 2, 61, 95, 3, 42, 80)):
    """A forecast response shaped like Open-Meteo's, one day per code."""
    days = len(codes)
    return {
        "latitude": 13.75,
        "longitude": 100.5,
        "timezone": "Asia/Bangkok",
        "current": {
            "time": "2026-01-01T07:00",
            "temperature_2m": 29.4,
            "relative_humidity_2m": 66,
            "wind_speed_10m": 7.2,
            "wind_direction_10m": 190,
            "weather_code": 2,
        },
        "daily": {
            "time": [f"2026-01-{d + 1:02d}" for d in range(days)],
            "weather_code": list(codes),
            "temperature_2m_max": [32.0 + d for d in range(days)],
            "temperature_2m_min": [24.0 + d for d in range(days)],
            "precipitation_sum": [0.1 * d for d in range(days)],
        },
    }


SAMPLE_GEOCODING = {
    "results": [
        {"name": "Bangkok", "country": "Thailand", "admin1": "Bangkok", "latitude": 13.75, "longitude": 100.50},
        {"name": "Bang Kruai", "admin1": "Nonthaburi", "latitude": 13.80, "longitude": 100.47},
    ]
}


class FakeOpenMeteo:
    """Answers forecast and geocoding requests and remembers what was asked."""

    def __init__(self):
        self.forecast = sample_forecast()
        self.geocoding = SAMPLE_GEOCODING
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": True, "reason": "boom"})
        if request.url.host == "geocoding-api.open-meteo.com":
            return httpx.Response(200, json=self.geocoding)
        return httpx.Response(200, json=self.forecast)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient(tz_aware=True)


@pytest.fixture
def storage(mongo_client, clock):
    return MongoStorage(mongo_client, "weatherdb", clock=clock)


@pytest.fixture
def remote_profile():
    return get_profile("remote")


@pytest.fixture
def local_profile():
    return get_profile("local")


@pytest.fixture
def open_meteo():
    return FakeOpenMeteo()


@pytest.fixture
def http_client(open_meteo):
    return httpx.AsyncClient(transport=httpx.MockTransport(open_meteo))


@pytest.fixture
def client(storage, http_client):
    return TestClient(create_app(RemoteConfig, storage=storage, http_client=http_client))
