import asyncio

import pytest

from weather_station.errors import UpstreamError
from weather_station.models import WEATHER_CODES, describe_weather_code
from weather_station.services import WeatherService
from weather_station.services.weather_service import FORECAST_DAYS, build_snapshot

from conftest import SAMPLE_GEOCODING, sample_forecast


@pytest.fixture
def service(storage, http_client):
    return WeatherService(storage, http_client)


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

def test_weather_code_table_covers_wmo_codes():
    assert len(WEATHER_CODES) >= 28
    assert describe_weather_code(0) == "Clear sky"
    assert describe_weather_code(99) == "Thunderstorm with heavy hail"


@pytest.mark.parametrize("code", [4, 42, 100, None, "2"])
def test_unmapped_weather_codes_are_unknown(code):
    assert describe_weather_code(code) == "Unknown"


@pytest.mark.parametrize("codes", [(0,), (1, 2, 3), (0, 2, 61, 95, 3, 42, 80), tuple(range(16))])
def test_forecast_has_one_entry_per_upstream_day(codes):
    snapshot = build_snapshot(sample_forecast(codes), 13.75, 100.5, "Bangkok")

    assert len(snapshot.forecast) == len(codes)
    for day, code in zip(snapshot.forecast, codes):
        assert day.weather_code == code
        assert day.description == WEATHER_CODES.get(code, "Unknown")


def test_snapshot_maps_current_conditions():
    snapshot = build_snapshot(sample_forecast(), 13.75, 100.5, "Bangkok")

    assert snapshot.location.name == "Bangkok"
    assert snapshot.current.temperature == 29.4
    assert snapshot.current.humidity == 66
    assert snapshot.current.wind_speed == 7.2
    assert snapshot.current.wind_direction == 190
    assert snapshot.current.description == "Partly cloudy"
    assert snapshot.forecast[0].date == "2026-01-01"
    assert snapshot.forecast[0].max_temp == 32.0


def test_snapshot_name_defaults_to_coordinates():
    snapshot = build_snapshot(sample_forecast(), 13.75, 100.5)
    assert snapshot.location.name == "13.75, 100.5"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"current": {}},
        {"current": {}, "daily": {"time": ["2026-01-01"]}},
        {"current": {}, "daily": {"time": ["2026-01-01", "2026-01-02"], "weather_code": [0],
                                  "temperature_2m_max": [1], "temperature_2m_min": [1], "precipitation_sum": [0]}},
    ],
)
def test_malformed_forecast_raises_upstream_error(payload):
    with pytest.raises(UpstreamError):
        build_snapshot(payload, 0.0, 0.0)


# ---------------------------------------------------------------------------
# Open-Meteo calls
# ---------------------------------------------------------------------------

def test_fetch_current_requests_seven_days_and_stores_snapshot(service, open_meteo, storage):
    snapshot = asyncio.run(service.fetch_current(13.75, 100.5, name="Bangkok"))

    request = open_meteo.requests[0]
    assert request.url.host == "api.open-meteo.com"
    assert request.url.params["forecast_days"] == str(FORECAST_DAYS)
    assert request.url.params["timezone"] == "auto"
    assert "weather_code" in request.url.params["current"]
    assert "precipitation_sum" in request.url.params["daily"]

    assert snapshot.id is not None
    assert snapshot.created_at is not None
    assert storage.weather.count_documents({}) == 1


def test_fetch_current_upstream_error_stores_nothing(service, open_meteo, storage):
    open_meteo.status_code = 502

    with pytest.raises(UpstreamError):
        asyncio.run(service.fetch_current(13.75, 100.5))

    assert storage.weather.count_documents({}) == 0


def test_search_locations_builds_display_names(service, open_meteo):
    candidates = asyncio.run(service.search_locations("bang"))

    request = open_meteo.requests[0]
    assert request.url.host == "geocoding-api.open-meteo.com"
    assert request.url.params["name"] == "bang"
    assert request.url.params["count"] == "5"

    assert [c.display_name for c in candidates] == ["Bangkok, Thailand", "Bang Kruai, Nonthaburi"]
    assert candidates[1].country is None


def test_search_locations_without_results_is_empty(service, open_meteo):
    open_meteo.geocoding = {"generationtime_ms": 0.3}
    assert asyncio.run(service.search_locations("zzzz")) == []


def test_search_locations_caps_at_five(service, open_meteo):
    hit = SAMPLE_GEOCODING["results"][0]
    open_meteo.geocoding = {"results": [hit] * 8}

    assert len(asyncio.run(service.search_locations("bangkok"))) == 5


# ---------------------------------------------------------------------------
# History + stats
# ---------------------------------------------------------------------------

def test_stats_on_empty_history(service):
    stats = service.stats()

    assert stats.total_records == 0
    assert stats.avg_temperature == 0
    assert stats.unique_locations == []
    assert stats.unique_location_count == 0


def test_history_and_stats_after_fetches(service, open_meteo):
    asyncio.run(service.fetch_current(13.75, 100.5, name="Bangkok"))
    open_meteo.forecast["current"]["temperature_2m"] = 21.0
    asyncio.run(service.fetch_current(18.79, 98.98, name="Chiang Mai"))

    history = service.history()
    assert [s.location.name for s in history] == ["Chiang Mai", "Bangkok"]
    assert [s.location.name for s in service.history(location="bang")] == ["Bangkok"]
    assert len(service.history(limit=1)) == 1

    stats = service.stats()
    assert stats.total_records == 2
    assert stats.max_temperature == 29.4
    assert stats.min_temperature == 21.0
    assert stats.unique_locations == ["Bangkok", "Chiang Mai"]
    assert stats.unique_location_count == 2
