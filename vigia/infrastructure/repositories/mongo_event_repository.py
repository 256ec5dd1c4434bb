"""Repositório de ocorrências com persistência em MongoDB."""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any, Iterable

from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from vigia.domain import ConcurrentUpdateError, Coordinates, Event, GeoBounds
from vigia.domain.repositories import EventMutation, EventRepository

from ..database import translate_store_errors

log = logging.getLogger(__name__)

#: Toda escrita fora de :meth:`MongoEventRepository.apply` avança ``revision``.
_BUMP_REVISION = {"$inc": {"revision": 1}}

_EVENT_FIELDS = (
    "title",
    "link",
    "pub_date",
    "place_text",
    "city_text",
    "status_text",
    "event_type",
    "description_raw",
    "start_time_iso",
    "end_time_iso",
    "duration_min",
    "is_closed",
    "closed_detected_at",
    "lat",
    "lon",
    "first_seen_at",
    "last_seen_at",
    "created_at",
    "updated_at",
)


class MongoEventRepository(EventRepository):
    """Persiste :class:`Event` em uma coleção MongoDB com ``_id`` igual ao identificador.

    :meth:`apply` faz a fusão com controle otimista: cada documento carrega um
    ``revision`` e a escrita só é aceita se a revisão lida ainda for a atual.
    """

    #: Tentativas de escrita condicional antes de desistir.
    MAX_ATTEMPTS = 5

    def __init__(self, collection: Collection) -> None:
        self._collection: Collection = collection
        """Coleção MongoDB responsável por armazenar as ocorrências."""

    def get(self, event_id: str) -> Event | None:
        with translate_store_errors("get"):
            document = self._collection.find_one({"_id": event_id})
        return self._deserialize(document) if document else None

    def apply(self, event_id: str, mutate: EventMutation) -> Event:
        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            with translate_store_errors("apply"):
                document = self._collection.find_one({"_id": event_id})
            current = self._deserialize(document) if document else None
            merged = mutate(current)
            revision = (current.revision if current else 0) + 1
            payload = self._serialize(replace(merged, id=event_id, revision=revision))

            with translate_store_errors("apply"):
                if current is None:
                    try:
                        self._collection.insert_one(payload)
                    except DuplicateKeyError:
                        log.debug("Criação concorrente de %s (tentativa %d)", event_id, attempt)
                        continue
                else:
                    result = self._collection.replace_one(
                        {"_id": event_id, "revision": current.revision or None},
                        payload,
                    )
                    if not result.matched_count:
                        log.debug("Revisão de %s mudou (tentativa %d)", event_id, attempt)
                        continue
            return replace(merged, id=event_id, revision=revision)

        raise ConcurrentUpdateError(
            f"could not apply update to {event_id!r} after {self.MAX_ATTEMPTS} attempts"
        )

    def update_duration(self, event_id: str, duration_min: int | None) -> None:
        with translate_store_errors("update_duration"):
            self._collection.update_one(
                {"_id": event_id}, {"$set": {"duration_min": duration_min}, **_BUMP_REVISION}
            )

    def update_coordinates(self, event_id: str, coordinates: Coordinates) -> None:
        with translate_store_errors("update_coordinates"):
            self._collection.update_one(
                {"_id": event_id},
                {"$set": {"lat": coordinates.lat, "lon": coordinates.lon}, **_BUMP_REVISION},
            )

    def clear_coordinates(self, event_id: str) -> None:
        with translate_store_errors("clear_coordinates"):
            self._collection.update_one(
                {"_id": event_id}, {"$set": {"lat": None, "lon": None}, **_BUMP_REVISION}
            )

    def find(
        self,
        *,
        status: str = "all",
        event_type: str | None = None,
        city: str | None = None,
    ) -> Iterable[Event]:
        criteria: dict[str, Any] = {}
        if status == "open":
            criteria["is_closed"] = {"$ne": True}
        elif status == "closed":
            criteria["is_closed"] = True
        if event_type:
            criteria["event_type"] = event_type
        if city:
            pattern = {"$regex": re.escape(city), "$options": "i"}
            criteria["$or"] = [{"city_text": pattern}, {"place_text": pattern}]

        with translate_store_errors("find"):
            documents = list(self._collection.find(criteria))
        return [self._deserialize(document) for document in documents]

    def find_outside_bounds(self, bounds: GeoBounds, limit: int) -> list[Event]:
        criteria = {
            "lat": {"$ne": None},
            "lon": {"$ne": None},
            "$or": [
                {"lat": {"$lt": bounds.min_lat}},
                {"lat": {"$gt": bounds.max_lat}},
                {"lon": {"$lt": bounds.min_lon}},
                {"lon": {"$gt": bounds.max_lon}},
            ],
        }
        return self._find_recent(criteria, limit, "find_outside_bounds")

    def find_missing_duration(self, max_minutes: int, limit: int) -> list[Event]:
        criteria = {
            "is_closed": True,
            "$and": [
                {
                    "$or": [
                        {"end_time_iso": {"$nin": [None, ""]}},
                        {"closed_detected_at": {"$ne": None}},
                    ]
                },
                {
                    "$or": [
                        {"duration_min": None},
                        {"duration_min": {"$lte": 0}},
                        {"duration_min": {"$gt": max_minutes}},
                    ]
                },
            ],
        }
        return self._find_recent(criteria, limit, "find_missing_duration")

    def clear_durations_above(self, max_minutes: int) -> int:
        with translate_store_errors("clear_durations_above"):
            result = self._collection.update_many(
                {"duration_min": {"$gt": max_minutes}},
                {"$set": {"duration_min": None}, **_BUMP_REVISION},
            )
        return int(getattr(result, "modified_count", 0) or 0)

    def _find_recent(self, criteria: dict[str, Any], limit: int, operation: str) -> list[Event]:
        with translate_store_errors(operation):
            cursor = (
                self._collection.find(criteria)
                .sort("last_seen_at", DESCENDING)
                .limit(max(0, limit))
            )
            documents = list(cursor)
        return [self._deserialize(document) for document in documents]

    @staticmethod
    def _serialize(event: Event) -> dict[str, Any]:
        document: dict[str, Any] = {"_id": event.id, "revision": event.revision}
        for name in _EVENT_FIELDS:
            document[name] = getattr(event, name)
        return document

    @staticmethod
    def _deserialize(document: dict[str, Any]) -> Event:
        values = {name: document.get(name) for name in _EVENT_FIELDS}
        values["is_closed"] = bool(values["is_closed"])
        duration = values["duration_min"]
        values["duration_min"] = int(duration) if duration is not None else None
        return Event(
            id=str(document["_id"]),
            revision=int(document.get("revision") or 0),
            **values,
        )


__all__ = ["MongoEventRepository"]
