"""
Database Package
================

MongoDB access. Routers and services never import pymongo directly.
"""

from .storage import MongoStorage, WEATHER_COLLECTION, READINGS_COLLECTION

__all__ = [
    "MongoStorage",
    "WEATHER_COLLECTION",
    "READINGS_COLLECTION",
]
