from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from vigia.api import include_routes
from vigia.domain import StoreUnavailable

API_KEY = "segredo"
ADMIN_PASSWORD = "admin"


@pytest.fixture
def client(container, geocoder, make_candidate):
    geocoder.responses["Praha"] = [make_candidate(50.08, 14.43)]
    app = FastAPI()
    include_routes(app, container, api_key=lambda: API_KEY, admin_password=lambda: ADMIN_PASSWORD)
    return TestClient(app)


def _ingest(client: TestClient, items: list[dict], key: str | None = API_KEY):
    headers = {"x-api-key": key} if key is not None else {}
    return client.post("/api/ingest", json={"source": "rss", "items": items}, headers=headers)


def test_ingest_requires_api_key(client):
    assert _ingest(client, [{"id": "E1"}], key=None).status_code == 401
    assert _ingest(client, [{"id": "E1"}], key="errada").status_code == 401


def test_ingest_fails_when_server_key_missing(container):
    app = FastAPI()
    include_routes(app, container, api_key=lambda: "", admin_password=lambda: "")

    response = TestClient(app).post(
        "/api/ingest", json={"items": [{"id": "E1"}]}, headers={"x-api-key": "x"}
    )

    assert response.status_code == 500


def test_ingest_counts_rejected_observations(client, fake_database):
    response = _ingest(
        client,
        [
            {"id": "E1", "isClosed": False, "startTimeIso": "2024-01-01T10:00:00Z", "cityText": "Praha"},
            {"id": "   ", "title": "bez identifikátoru"},
        ],
    )

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "source": "rss",
        "accepted": 1,
        "rejected": 1,
        "closed_seen_in_batch": 0,
    }
    stored = fake_database["events"].documents
    assert [doc["_id"] for doc in stored] == ["E1"]
    assert (stored[0]["lat"], stored[0]["lon"]) == (50.08, 14.43)


def test_ingest_rejects_empty_batch(client):
    assert _ingest(client, []).status_code == 422


def test_closed_event_is_listed_with_duration(client):
    _ingest(client, [{"id": "E1", "isClosed": False, "startTimeIso": "2024-01-01T10:00:00Z"}])
    response = _ingest(
        client, [{"id": "E1", "isClosed": True, "endTimeIso": "2024-01-01T11:30:00Z"}]
    )
    assert response.json()["closed_seen_in_batch"] == 1

    body = client.get("/api/events", params={"status": "closed"}).json()

    assert body["ok"] is True
    assert body["filters"]["status"] == "closed"
    assert [item["id"] for item in body["items"]] == ["E1"]
    assert body["items"][0]["duration_min"] == 90
    assert body["items"][0]["end_time_iso"] == "2024-01-01T11:30:00Z"


def test_events_listing_backfills_missing_durations(client, fake_database, clock):
    fake_database["events"].documents.append(
        {
            "_id": "old",
            "is_closed": True,
            "closed_detected_at": clock.now,
            "start_time_iso": "2024-01-01T10:00:00Z",
            "end_time_iso": "2024-01-01T10:20:00Z",
            "event_type": "fire",
        }
    )

    body = client.get("/api/events", params={"type": "fire"}).json()

    assert body["backfilled_durations"] == 1
    assert body["filters"]["type"] == "fire"
    assert body["items"][0]["duration_min"] == 20
    assert fake_database["events"].documents[0]["duration_min"] == 20


def test_stats_endpoint(client):
    _ingest(client, [{"id": "E1", "cityText": "Praha", "startTimeIso": "2024-01-01T10:00:00Z"}])

    body = client.get("/api/stats", params={"day": "today"}).json()

    assert body["ok"] is True
    assert body["open_vs_closed"] == {"open": 1, "closed": 0}
    assert body["by_day"] == [{"day": "2024-01-01", "count": 1}]
    assert body["top_locations"] == [{"location": "Praha", "count": 1}]
    assert body["longest"] == []


def test_regeocode_validates_mode(client):
    headers = {"x-api-key": API_KEY}

    bad = client.post("/api/admin/regeocode", json={"mode": "everything"}, headers=headers)
    good = client.post("/api/admin/regeocode", json={"limit": 5}, headers=headers)

    assert bad.status_code == 400
    assert good.status_code == 200
    assert good.json()["processed"] == 0


def test_recalc_requires_admin_password(client):
    denied = client.post("/api/admin/recalc", json={}, headers={"x-admin-password": "nope"})
    allowed = client.post(
        "/api/admin/recalc", json={"limit": 10}, headers={"x-admin-password": ADMIN_PASSWORD}
    )

    assert denied.status_code == 401
    assert allowed.status_code == 200
    assert allowed.json()["scanned"] == 0


def test_store_failures_map_to_503(client, container, monkeypatch):
    def unavailable(*args, **kwargs):
        raise StoreUnavailable("mongo fora do ar")

    monkeypatch.setattr(container.query_service, "list_events", unavailable)

    response = client.get("/api/events")

    assert response.status_code == 503
    assert response.json() == {"ok": False, "error": "store unavailable"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.text == "OK"


def test_ingest_accepts_numeric_identifiers(client, fake_database):
    response = _ingest(client, [{"id": 7001, "title": "Nehoda"}])

    assert response.json()["accepted"] == 1
    assert fake_database["events"].documents[0]["_id"] == "7001"
