from unittest.mock import MagicMock

import pytest
from pymongo.errors import OperationFailure

from vigia.infrastructure.repositories.event_indexes import ensure_event_indexes


def test_ensure_event_indexes_ignores_existing_index_conflict():
    collection = MagicMock()
    error = OperationFailure(
        "Index already exists with a different name: is_closed_1",
        code=85,
        details={"errmsg": "Index already exists with a different name: is_closed_1"},
    )
    collection.create_index.side_effect = [error] + [None] * 4

    ensure_event_indexes(collection)

    assert collection.create_index.call_count == 5


def test_ensure_event_indexes_raises_for_unhandled_operation_failure():
    collection = MagicMock()
    error = OperationFailure("other failure", code=42, details={"errmsg": "other failure"})
    collection.create_index.side_effect = error

    with pytest.raises(OperationFailure):
        ensure_event_indexes(collection)


def test_coordinates_index_only_covers_geocoded_events():
    collection = MagicMock()

    ensure_event_indexes(collection)

    options = {
        call.kwargs["name"]: call.kwargs for call in collection.create_index.call_args_list
    }
    assert options["coordinates"]["partialFilterExpression"] == {"lat": {"$type": "double"}}
