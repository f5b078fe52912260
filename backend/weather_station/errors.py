"""
Errors raised by the weather station backend.

Routers catch these, log them and turn them into JSON error bodies.
Nothing is retried.
"""


class WeatherStationError(Exception):
    """Base class for everything this backend raises on purpose."""


class StorageError(WeatherStationError):
    """MongoDB is unreachable or rejected an operation."""


class UpstreamError(WeatherStationError):
    """Open-Meteo (forecast or geocoding) failed or sent something we can't read."""
