from __future__ import annotations

import copy
import operator
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Callable

import pytest
from pymongo.errors import DuplicateKeyError

from vigia.domain import Coordinates, GeocodeCandidate
from vigia.domain.ports import Geocoder

_MISSING = object()

_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    "$lt": operator.lt,
    "$lte": operator.le,
    "$gt": operator.gt,
    "$gte": operator.ge,
}


class FakeCursor:
    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self._documents = documents

    def sort(self, key: str, direction: int) -> "FakeCursor":
        self._documents.sort(
            key=lambda doc: (doc.get(key) is not None, doc.get(key) or 0),
            reverse=direction < 0,
        )
        return self

    def limit(self, count: int) -> "FakeCursor":
        if count:
            self._documents = self._documents[:count]
        return self

    def __iter__(self):
        return iter(self._documents)


class FakeCollection:
    """Subconjunto da API de ``pymongo.collection.Collection`` usado pelos repositórios."""

    def __init__(self, documents: list[dict[str, Any]] | None = None) -> None:
        self._documents = [copy.deepcopy(doc) for doc in documents or []]

    @property
    def documents(self) -> list[dict[str, Any]]:
        return self._documents

    def create_index(self, *args, **kwargs) -> None:
        return None

    def find_one(self, criteria: dict[str, Any]) -> dict[str, Any] | None:
        for document in self._documents:
            if _matches(document, criteria):
                return copy.deepcopy(document)
        return None

    def find(self, criteria: dict[str, Any] | None = None) -> FakeCursor:
        criteria = criteria or {}
        return FakeCursor(
            [copy.deepcopy(doc) for doc in self._documents if _matches(doc, criteria)]
        )

    def insert_one(self, document: dict[str, Any]):
        if any(doc.get("_id") == document.get("_id") for doc in self._documents):
            raise DuplicateKeyError("E11000 duplicate key error", 11000)
        self._documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document.get("_id"))

    def replace_one(self, criteria: dict[str, Any], replacement: dict[str, Any], upsert: bool = False):
        for index, document in enumerate(self._documents):
            if _matches(document, criteria):
                new_document = copy.deepcopy(replacement)
                new_document["_id"] = document.get("_id")
                self._documents[index] = new_document
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            new_document = copy.deepcopy(replacement)
            new_document.setdefault("_id", criteria.get("_id"))
            self._documents.append(new_document)
            return SimpleNamespace(
                matched_count=0, modified_count=0, upserted_id=new_document["_id"]
            )
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    def update_one(self, criteria: dict[str, Any], update: Any, upsert: bool = False):
        for document in self._documents:
            if _matches(document, criteria):
                _apply_update(document, update, inserting=False)
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            document = {
                key: value
                for key, value in criteria.items()
                if not key.startswith("$") and not isinstance(value, dict)
            }
            _apply_update(document, update, inserting=True)
            self._documents.append(document)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=document.get("_id"))
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    def update_many(self, criteria: dict[str, Any], update: Any):
        modified = 0
        for document in self._documents:
            if _matches(document, criteria):
                _apply_update(document, update, inserting=False)
                modified += 1
        return SimpleNamespace(matched_count=modified, modified_count=modified)

    def delete_one(self, criteria: dict[str, Any]):
        for index, document in enumerate(self._documents):
            if _matches(document, criteria):
                del self._documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


def _equals(value: Any, expected: Any) -> bool:
    if expected is None:
        return value is _MISSING or value is None
    return value is not _MISSING and value == expected


def _match_operators(value: Any, operators: dict[str, Any]) -> bool:
    present = value is not _MISSING
    actual = value if present else None
    for name, argument in operators.items():
        if name == "$exists":
            if bool(argument) != present:
                return False
        elif name == "$ne":
            if _equals(value, argument):
                return False
        elif name == "$in":
            if not any(_equals(value, item) for item in argument):
                return False
        elif name == "$nin":
            if any(_equals(value, item) for item in argument):
                return False
        elif name in _COMPARISONS:
            if actual is None:
                return False
            try:
                if not _COMPARISONS[name](actual, argument):
                    return False
            except TypeError:
                return False
        elif name == "$regex":
            flags = re.IGNORECASE if "i" in operators.get("$options", "") else 0
            if not isinstance(actual, str) or not re.search(argument, actual, flags):
                return False
        elif name == "$options":
            continue
        else:
            raise NotImplementedError(name)
    return True


def _matches(document: dict[str, Any], criteria: dict[str, Any]) -> bool:
    for key, expected in criteria.items():
        if key == "$or":
            if not any(_matches(document, branch) for branch in expected):
                return False
            continue
        if key == "$and":
            if not all(_matches(document, branch) for branch in expected):
                return False
            continue
        value = document.get(key, _MISSING)
        if isinstance(expected, dict) and any(name.startswith("$") for name in expected):
            if not _match_operators(value, expected):
                return False
        elif not _equals(value, expected):
            return False
    return True


def _apply_update(document: dict[str, Any], update: Any, *, inserting: bool) -> None:
    if isinstance(update, list):
        for stage in update:
            for name, expression in stage.get("$set", {}).items():
                if isinstance(expression, dict) and "$ifNull" in expression:
                    reference, default = expression["$ifNull"]
                    current = document.get(reference.lstrip("$"))
                    document[name] = current if current is not None else default
                else:
                    document[name] = copy.deepcopy(expression)
        return
    for name, value in update.get("$set", {}).items():
        document[name] = copy.deepcopy(value)
    if inserting:
        for name, value in update.get("$setOnInsert", {}).items():
            document[name] = copy.deepcopy(value)
    for name, amount in update.get("$inc", {}).items():
        document[name] = (document.get(name) or 0) + amount
    for name in update.get("$unset", {}):
        document.pop(name, None)


class FakeDatabase(dict):
    """Dicionário de coleções criadas sob demanda, como ``pymongo.database.Database``."""

    def __missing__(self, name: str) -> FakeCollection:
        collection = FakeCollection()
        self[name] = collection
        return collection


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@dataclass
class FakeGeocoder(Geocoder):
    """Geocodificador em memória: consulta -> candidatos ou exceção."""

    responses: dict[str, Any] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    def search(self, query: str):
        self.calls.append(query)
        response = self.responses.get(query, [])
        if isinstance(response, Exception):
            raise response
        return list(response)


def candidate(lat: float, lon: float, country_code: str | None = "cz") -> GeocodeCandidate:
    return GeocodeCandidate(coordinates=Coordinates(lat=lat, lon=lon), country_code=country_code)


@pytest.fixture
def fake_collection_cls() -> type[FakeCollection]:
    return FakeCollection


@pytest.fixture
def events_collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def fake_database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def make_candidate() -> Callable[..., GeocodeCandidate]:
    return candidate


@pytest.fixture
def container(fake_database, geocoder, clock):
    """Container completo sobre coleções em memória."""

    from zoneinfo import ZoneInfo

    from vigia.application import (
        BackfillCoordinator,
        EventQueryService,
        EventReconciler,
        GeocodeCache,
        StatsAggregator,
    )
    from vigia.container import VigiaContainer
    from vigia.infrastructure import (
        MongoEventRepository,
        MongoGeocodeCacheStorage,
        MongoTrackingMarkerRepository,
    )
    from vigia.jobs import DurationRecalcJob, RegeocodeJob

    zone = ZoneInfo("Europe/Prague")
    events = MongoEventRepository(fake_database["events"])
    markers = MongoTrackingMarkerRepository(fake_database["app_settings"])
    cache = GeocodeCache(
        MongoGeocodeCacheStorage(fake_database["geocode_cache"], clock=clock), geocoder
    )
    backfill = BackfillCoordinator(events, cache, clock=clock)
    return VigiaContainer(
        event_repository=events,
        marker_repository=markers,
        geocoder=geocoder,
        geocode_cache=cache,
        reconciler=EventReconciler(events, clock=clock),
        query_service=EventQueryService(events, zone=zone, clock=clock),
        stats=StatsAggregator(events, markers, zone=zone, clock=clock),
        backfill=backfill,
        regeocode_job=RegeocodeJob(events, cache),
        duration_recalc_job=DurationRecalcJob(events, backfill, max_duration_minutes=4320),
    )
