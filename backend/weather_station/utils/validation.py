"""
Input Validation Utilities
===========================

Helpers for cleaning up what devices and databases hand us.
Mostly about time: ESP32 clocks, MongoDB's millisecond precision,
and naive vs. timezone-aware datetimes.
"""

from datetime import datetime, timezone
from typing import Optional, Union


# Anything above this is treated as milliseconds (year 2286 in seconds)
_MILLISECONDS_THRESHOLD = 10_000_000_000


def utcnow() -> datetime:
    """Current time in UTC, truncated to what MongoDB can store."""
    return to_storage_precision(datetime.now(timezone.utc))


def to_storage_precision(value: datetime) -> datetime:
    """
    Truncate a datetime to milliseconds.

    MongoDB stores dates as milliseconds since the epoch, so anything finer
    is lost on the round trip anyway.
    """
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def ensure_utc(value: datetime) -> datetime:
    """
    Make a datetime timezone-aware (UTC).

    pymongo hands back naive datetimes unless the client is tz_aware.
    Naive values coming out of MongoDB are always UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_client_timestamp(value: Optional[Union[float, int, str]]) -> Optional[datetime]:
    """
    Parse a timestamp reported by a device.

    Accepts:
        - Unix seconds (what WiFi.getTime() returns on the ESP32): 1767225600
        - Unix milliseconds: 1767225600000
        - ISO-8601 strings: "2026-01-01T00:00:00Z"
        - Numeric strings: "1767225600"

    Args:
        value: Whatever the device put in sensorData.timestamp

    Returns:
        A UTC datetime, or None if the value is missing or garbage
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
            except ValueError:
                return None
            return to_storage_precision(ensure_utc(parsed))

    try:
        seconds = float(value)
        # ESP32 reports 0 when NTP hasn't synced yet
        if seconds <= 0:
            return None
        if seconds >= _MILLISECONDS_THRESHOLD:
            seconds /= 1000.0
        return to_storage_precision(datetime.fromtimestamp(seconds, tz=timezone.utc))
    except (OverflowError, OSError, ValueError):
        return None
