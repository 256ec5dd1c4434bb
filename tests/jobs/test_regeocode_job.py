from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from vigia.application import GeocodeCache
from vigia.domain import UnresolvedLookup
from vigia.infrastructure import MongoEventRepository, MongoGeocodeCacheStorage
from vigia.jobs import RegeocodeJob

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def cache_collection(fake_collection_cls):
    return fake_collection_cls([{"_id": "Kladno", "lat": 40.0, "lon": 10.0}])


@pytest.fixture
def job(events_collection, cache_collection, geocoder, clock, make_candidate):
    geocoder.responses.update(
        {
            "Kladno": [make_candidate(50.14, 14.10)],
            "Praha": UnresolvedLookup("timeout"),
        }
    )
    events_collection.documents.extend(
        [
            {"_id": "kladno", "city_text": "Kladno", "lat": 40.0, "lon": 10.0, "last_seen_at": NOW},
            {
                "_id": "praha",
                "place_text": "Praha",
                "lat": 52.0,
                "lon": 14.0,
                "last_seen_at": NOW - timedelta(minutes=1),
            },
            {"_id": "sem-local", "lat": 0.0, "lon": 0.0, "last_seen_at": NOW - timedelta(minutes=2)},
            {"_id": "ok", "city_text": "Brno", "lat": 49.19, "lon": 16.61, "last_seen_at": NOW},
        ]
    )
    cache = GeocodeCache(MongoGeocodeCacheStorage(cache_collection, clock=clock), geocoder)
    return RegeocodeJob(MongoEventRepository(events_collection), cache)


def test_regeocode_job_repairs_out_of_region_coordinates(job, events_collection, cache_collection):
    result = job.run(limit=10)

    assert result.processed == 3
    assert result.cache_deleted == 1
    assert result.coords_cleared == 3
    assert result.re_geocoded == 1
    assert result.failed == 2
    documents = {doc["_id"]: doc for doc in events_collection.documents}
    assert (documents["kladno"]["lat"], documents["kladno"]["lon"]) == (50.14, 14.10)
    assert documents["praha"]["lat"] is None
    assert documents["sem-local"]["lat"] is None
    assert documents["ok"]["lat"] == 49.19
    assert cache_collection.documents[0]["lat"] == 50.14


def test_regeocode_job_clamps_limit(job):
    result = job.run(limit=0)

    assert result.processed == 1
    assert set(result.to_mapping()) == {
        "processed",
        "cache_deleted",
        "coords_cleared",
        "re_geocoded",
        "failed",
        "elapsed_ms_total",
    }
