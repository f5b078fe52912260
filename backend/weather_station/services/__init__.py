"""
Services Package
================

These are the "workers" that do the actual work.

- WeatherService: Talks to Open-Meteo, stores weather snapshots
- SensorService: Takes ESP32 pushes, answers latest/history/stats
- MetricsService: Renders the Prometheus /metrics page
"""

from .weather_service import WeatherService
from .sensor_service import SensorService
from .metrics_service import MetricsService

__all__ = [
    "WeatherService",
    "SensorService",
    "MetricsService",
]
