from datetime import datetime, timezone

import pytest

from weather_station.config import get_profile
from weather_station.models import SensorPushRequest
from weather_station.services import SensorService

from conftest import FakeClock


SERVER_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _push(**body):
    body.setdefault("sensorData", {"temperature": 21.5, "humidity": 40})
    return SensorPushRequest.model_validate(body)


@pytest.fixture
def remote(storage, remote_profile):
    return SensorService(storage, remote_profile, clock=lambda: SERVER_NOW)


@pytest.fixture
def local(storage, local_profile):
    return SensorService(storage, local_profile, clock=lambda: SERVER_NOW)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

def test_missing_fields_get_remote_placeholders(remote):
    reading = remote.ingest(_push())

    assert reading.device_id == "Unknown-ESP32"
    assert reading.location.name == "ESP32 Sensor"
    assert reading.location.latitude == 0
    assert reading.location.longitude == 0
    assert reading.sensor_data.source == "ESP32"


def test_missing_fields_get_local_placeholders(local):
    reading = local.ingest(_push())

    assert reading.device_id == "ESP32-Local"
    assert reading.location.name == "ESP32 Sensor (Local)"
    assert reading.sensor_data.source == "ESP32-Local"


def test_empty_strings_count_as_missing(remote):
    reading = remote.ingest(_push(deviceId="", location={"name": ""}, sensorData={
        "temperature": 20, "humidity": 30, "source": "",
    }))

    assert reading.device_id == "Unknown-ESP32"
    assert reading.location.name == "ESP32 Sensor"
    assert reading.sensor_data.source == "ESP32"


def test_device_values_are_kept(remote):
    reading = remote.ingest(_push(
        deviceId="ESP32-DHT22-001",
        location={"name": "Greenhouse", "latitude": 13.75, "longitude": 100.5},
        sensorData={"temperature": 28.4, "humidity": 61, "source": "DHT22"},
    ))

    assert reading.device_id == "ESP32-DHT22-001"
    assert reading.location.name == "Greenhouse"
    assert reading.location.latitude == 13.75
    assert reading.sensor_data.source == "DHT22"
    assert reading.id is not None


def test_numeric_readings_are_not_range_checked(remote):
    reading = remote.ingest(_push(sensorData={"temperature": -400.0, "humidity": 250.0}))
    assert reading.sensor_data.temperature == -400.0


# ---------------------------------------------------------------------------
# Timestamp modes
# ---------------------------------------------------------------------------

def test_client_mode_uses_device_timestamp(remote):
    reading = remote.ingest(_push(sensorData={"temperature": 20, "humidity": 30, "timestamp": 1767225600}))
    assert reading.sensor_data.timestamp == datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize("timestamp", [None, "not-a-date", 0])
def test_client_mode_falls_back_to_server_time(remote, timestamp):
    reading = remote.ingest(_push(sensorData={"temperature": 20, "humidity": 30, "timestamp": timestamp}))
    assert reading.sensor_data.timestamp == SERVER_NOW


def test_server_mode_ignores_device_timestamp(local):
    reading = local.ingest(_push(sensorData={"temperature": 20, "humidity": 30, "timestamp": 1767225600}))
    assert reading.sensor_data.timestamp == SERVER_NOW


def test_timestamp_mode_is_configurable_per_profile(storage):
    service = SensorService(storage, get_profile("local", timestamp_mode="client"), clock=lambda: SERVER_NOW)

    reading = service.ingest(_push(sensorData={"temperature": 20, "humidity": 30, "timestamp": "2026-01-01T00:00:00Z"}))

    assert reading.sensor_data.source == "ESP32-Local"
    assert reading.sensor_data.timestamp == datetime(2026, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def test_latest_is_none_without_readings(remote):
    assert remote.latest() is None
    assert remote.latest(device_id="d1") is None


def test_latest_and_history_follow_created_at(remote):
    for i in range(5):
        remote.ingest(_push(deviceId="d1", sensorData={"temperature": 20.0 + i, "humidity": 40}))
    remote.ingest(_push(deviceId="d2", sensorData={"temperature": 99.0, "humidity": 40}))

    latest = remote.latest(device_id="d1")
    assert latest.sensor_data.temperature == 24.0
    assert remote.latest().device_id == "d2"

    for k in (1, 3, 5, 10):
        history = remote.history(device_id="d1", limit=k)
        assert len(history) == min(5, k)
        created = [r.created_at for r in history]
        assert created == sorted(created, reverse=True)
        assert history[0].created_at == latest.created_at


def test_stats_on_empty_collection(remote):
    stats = remote.stats()

    assert stats.total_records == 0
    assert stats.avg_temperature == 0
    assert stats.max_humidity == 0
    assert stats.unique_devices == []
    assert stats.unique_device_count == 0
    assert stats.source == "MongoDB"


def test_stats_over_all_readings(local):
    local.ingest(_push(deviceId="d1", sensorData={"temperature": 20, "humidity": 40}))
    local.ingest(_push(deviceId="d2", sensorData={"temperature": 30, "humidity": 60}))
    local.ingest(_push(deviceId="d1", sensorData={"temperature": 25, "humidity": 50}))

    stats = local.stats()

    assert stats.total_records == 3
    assert stats.avg_temperature == pytest.approx(25.0)
    assert stats.max_temperature == 30
    assert stats.min_temperature == 20
    assert stats.avg_humidity == pytest.approx(50.0)
    assert stats.max_humidity == 60
    assert stats.min_humidity == 40
    assert stats.unique_devices == ["d1", "d2"]
    assert stats.unique_device_count == 2
    assert stats.source == "Local MongoDB"


def test_service_clock_does_not_set_created_at(storage, remote_profile):
    service = SensorService(storage, remote_profile, clock=FakeClock(start=SERVER_NOW))

    reading = service.ingest(_push())

    # createdAt comes from the storage clock, not the ingest clock
    assert reading.created_at != SERVER_NOW
