"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.

Each module exposes a build_*_router(service) factory. main.py builds the
services once and hands them in.
"""

from .sensors import build_sensors_router
from .weather import build_weather_router
from .metrics import build_metrics_router

__all__ = [
    "build_sensors_router",
    "build_weather_router",
    "build_metrics_router",
]
