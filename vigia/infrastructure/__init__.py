"""Infrastructure public API for Vigia.

Exposes the Mongo client factory, the Mongo-backed repositories and the
external geocoder client.
"""
from .database import MongoClientFactory, MongoSettings, translate_store_errors
from .geocoding import NominatimGeocoder
from .repositories import (
    MongoEventRepository,
    MongoGeocodeCacheStorage,
    MongoTrackingMarkerRepository,
    ensure_event_indexes,
)

__all__ = [
    "MongoClientFactory",
    "MongoEventRepository",
    "MongoGeocodeCacheStorage",
    "MongoSettings",
    "MongoTrackingMarkerRepository",
    "NominatimGeocoder",
    "ensure_event_indexes",
    "translate_store_errors",
]
