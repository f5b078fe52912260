"""
Metrics Service
===============

Prometheus scrape endpoint for the ESP32 readings.

Every scrape re-runs the stats aggregation and looks up the newest reading,
then renders them in the Prometheus text exposition format. Nothing is cached
and nothing is kept between scrapes.

We don't use the global prometheus_client registry: its Counters/Gauges are
meant for values the process updates itself. Here the numbers live in MongoDB,
so a custom collector on a throwaway registry reports them as they are right
now.

Example output (trimmed):
    # HELP esp32_sensor_records_total Total number of sensor records in database
    # TYPE esp32_sensor_records_total counter
    esp32_sensor_records_total 42.0
    # HELP esp32_temperature_celsius Current temperature reading from ESP32
    # TYPE esp32_temperature_celsius gauge
    esp32_temperature_celsius 27.3
"""

import logging
from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily

from weather_station.models import SensorReading, SensorStats
from weather_station.services.sensor_service import SensorService

logger = logging.getLogger(__name__)


# (name, help) for every gauge, in output order
GAUGES = [
    ("esp32_temperature_celsius", "Current temperature reading from ESP32"),
    ("esp32_humidity_percent", "Current humidity reading from ESP32"),
    ("esp32_temperature_avg_celsius", "Average temperature from all readings"),
    ("esp32_temperature_max_celsius", "Maximum temperature recorded"),
    ("esp32_temperature_min_celsius", "Minimum temperature recorded"),
    ("esp32_humidity_avg_percent", "Average humidity from all readings"),
    ("esp32_humidity_max_percent", "Maximum humidity recorded"),
    ("esp32_humidity_min_percent", "Minimum humidity recorded"),
    ("esp32_last_update_timestamp", "Unix timestamp of last sensor reading"),
]

RECORDS_COUNTER = ("esp32_sensor_records_total", "Total number of sensor records in database")

METRIC_NAMES = [RECORDS_COUNTER[0]] + [name for name, _ in GAUGES]


def metric_values(stats: SensorStats, latest: Optional[SensorReading]) -> dict[str, float]:
    """
    Map every gauge name to its value. Anything we don't have is 0.
    """
    current_temp = latest.sensor_data.temperature if latest else None
    current_humidity = latest.sensor_data.humidity if latest else None
    last_update = latest.created_at.timestamp() if latest and latest.created_at else None

    return {
        "esp32_temperature_celsius": current_temp or 0,
        "esp32_humidity_percent": current_humidity or 0,
        "esp32_temperature_avg_celsius": stats.avg_temperature or 0,
        "esp32_temperature_max_celsius": stats.max_temperature or 0,
        "esp32_temperature_min_celsius": stats.min_temperature or 0,
        "esp32_humidity_avg_percent": stats.avg_humidity or 0,
        "esp32_humidity_max_percent": stats.max_humidity or 0,
        "esp32_humidity_min_percent": stats.min_humidity or 0,
        "esp32_last_update_timestamp": last_update or 0,
    }


class SensorSnapshotCollector:
    """A prometheus_client collector that reports one fixed set of values."""

    def __init__(self, stats: SensorStats, latest: Optional[SensorReading]):
        self.stats = stats
        self.latest = latest

    def collect(self):
        name, documentation = RECORDS_COUNTER
        yield CounterMetricFamily(name, documentation, value=self.stats.total_records or 0)

        values = metric_values(self.stats, self.latest)
        for name, documentation in GAUGES:
            yield GaugeMetricFamily(name, documentation, value=values[name])


class MetricsService:
    """
    Renders /metrics.

    HOW TO USE:
    ----------
    metrics = MetricsService(sensor_service)
    body = metrics.render()          # bytes, text/plain exposition format
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, sensor_service: SensorService):
        self.sensor_service = sensor_service

    def render(self) -> bytes:
        """
        Query MongoDB and render every metric.

        Raises:
            StorageError: MongoDB failed
        """
        stats = self.sensor_service.stats()
        latest = self.sensor_service.latest()

        registry = CollectorRegistry()
        registry.register(SensorSnapshotCollector(stats, latest))
        body = generate_latest(registry)

        logger.debug(f"[METRICS] Rendered {len(METRIC_NAMES)} metrics ({stats.total_records} records)")
        return body
