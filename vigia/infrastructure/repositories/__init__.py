"""Implementações de repositórios baseadas em MongoDB."""
from .event_indexes import ensure_event_indexes
from .mongo_event_repository import MongoEventRepository
from .mongo_geocode_cache_storage import MongoGeocodeCacheStorage
from .mongo_tracking_marker_repository import (
    TRACKING_MARKER_KEY,
    MongoTrackingMarkerRepository,
)

__all__ = [
    "MongoEventRepository",
    "MongoGeocodeCacheStorage",
    "MongoTrackingMarkerRepository",
    "TRACKING_MARKER_KEY",
    "ensure_event_indexes",
]
