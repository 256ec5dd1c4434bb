import pytest
from pydantic import ValidationError

from vigia.schemas import IngestBatchPayload, ObservationPayload


def test_observation_payload_reads_camel_case_fields():
    payload = ObservationPayload.model_validate(
        {
            "id": "E1",
            "pubDate": "Mon, 01 Jan 2024 10:00:00 +0100",
            "cityText": "Praha",
            "eventType": "fire",
            "startTimeIso": "2024-01-01T10:00:00Z",
            "durationMin": 42.5,
            "isClosed": True,
        }
    )

    observation = payload.to_domain()

    assert observation.key == "E1"
    assert observation.pub_date == "Mon, 01 Jan 2024 10:00:00 +0100"
    assert observation.city_text == "Praha"
    assert observation.event_type == "fire"
    assert observation.duration_min == 42.5
    assert observation.is_closed is True


def test_observation_payload_accepts_field_names():
    observation = ObservationPayload(city_text="Brno").to_domain()

    assert observation.city_text == "Brno"
    assert observation.key == ""


def test_observation_payload_rejects_non_numeric_duration():
    with pytest.raises(ValidationError):
        ObservationPayload.model_validate({"id": "E1", "durationMin": "dlouho"})


def test_batch_requires_items():
    with pytest.raises(ValidationError):
        IngestBatchPayload.model_validate({"source": "feed", "items": []})


def test_numeric_feed_identifier_is_accepted():
    batch = IngestBatchPayload.model_validate({"items": [{"id": 48213, "title": "Požár"}]})

    assert batch.items[0].to_domain().key == "48213"
