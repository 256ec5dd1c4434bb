"""Marcador de início de rastreamento gravado uma única vez em MongoDB."""
from __future__ import annotations

from datetime import datetime

from pymongo.collection import Collection

from vigia.application.timeutils import parse_timestamp
from vigia.domain.repositories import TrackingMarkerRepository

from ..database import translate_store_errors

TRACKING_MARKER_KEY = "duration_cutoff"


class MongoTrackingMarkerRepository(TrackingMarkerRepository):
    """Usa a coleção ``app_settings`` como armazenamento chave/valor."""

    def __init__(self, collection: Collection, *, key: str = TRACKING_MARKER_KEY) -> None:
        self._collection = collection
        self._key = key

    def ensure(self, now: datetime) -> datetime:
        with translate_store_errors("tracking_marker.ensure"):
            self._collection.update_one(
                {"_id": self._key},
                {"$setOnInsert": {"value": now, "updated_at": now}},
                upsert=True,
            )
        return self.get() or now

    def get(self) -> datetime | None:
        with translate_store_errors("tracking_marker.get"):
            document = self._collection.find_one({"_id": self._key})
        if not document:
            return None
        return parse_timestamp(document.get("value"))


__all__ = ["MongoTrackingMarkerRepository", "TRACKING_MARKER_KEY"]
