"""
Utility modules for the weather station backend.
"""

from weather_station.utils.validation import (
    utcnow,
    to_storage_precision,
    ensure_utc,
    parse_client_timestamp,
)

__all__ = [
    "utcnow",
    "to_storage_precision",
    "ensure_utc",
    "parse_client_timestamp",
]
