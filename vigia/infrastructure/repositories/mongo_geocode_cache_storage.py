"""Armazenamento do cache de geocodificação em MongoDB."""
from __future__ import annotations

from pymongo.collection import Collection

from vigia.application.timeutils import Clock, utc_now
from vigia.domain import Coordinates
from vigia.domain.repositories import GeocodeCacheStorage

from ..database import translate_store_errors


class MongoGeocodeCacheStorage(GeocodeCacheStorage):
    """Guarda uma entrada por consulta normalizada (``_id``)."""

    def __init__(self, collection: Collection, *, clock: Clock = utc_now) -> None:
        self._collection = collection
        self._clock = clock

    def get(self, query: str) -> Coordinates | None:
        with translate_store_errors("geocode_cache.get"):
            document = self._collection.find_one({"_id": query})
        if not document:
            return None
        return Coordinates.parse(document.get("lat"), document.get("lon"))

    def save(self, query: str, coordinates: Coordinates) -> None:
        document = {
            "_id": query,
            "lat": coordinates.lat,
            "lon": coordinates.lon,
            "updated_at": self._clock(),
        }
        with translate_store_errors("geocode_cache.save"):
            self._collection.replace_one({"_id": query}, document, upsert=True)

    def delete(self, query: str) -> bool:
        with translate_store_errors("geocode_cache.delete"):
            result = self._collection.delete_one({"_id": query})
        return bool(getattr(result, "deleted_count", 0))


__all__ = ["MongoGeocodeCacheStorage"]
