"""Interfaces de repositório utilizadas pela camada de domínio."""
from .event_repository import EventMutation, EventRepository
from .geocode_cache_storage import GeocodeCacheStorage
from .tracking_marker_repository import TrackingMarkerRepository

__all__ = [
    "EventMutation",
    "EventRepository",
    "GeocodeCacheStorage",
    "TrackingMarkerRepository",
]
