"""Utilitários para criação de índices da coleção de ocorrências."""
from __future__ import annotations

import logging

from pymongo.collection import Collection
from pymongo.errors import OperationFailure

log = logging.getLogger(__name__)

#: Códigos do MongoDB para índice equivalente já existente com outro nome/opções.
_INDEX_CONFLICT_CODES = {85, 86}


def ensure_event_indexes(collection: Collection) -> None:
    """Garante que todos os índices necessários para ocorrências existam."""

    definitions: tuple[tuple[list[tuple[str, int]], dict[str, object]], ...] = (
        ([("is_closed", 1)], {"name": "is_closed"}),
        ([("event_type", 1)], {"name": "event_type"}),
        ([("closed_detected_at", -1)], {"name": "closed_detected_at"}),
        ([("last_seen_at", -1)], {"name": "last_seen_at"}),
        (
            [("lat", 1), ("lon", 1)],
            {
                "name": "coordinates",
                "partialFilterExpression": {"lat": {"$type": "double"}},
            },
        ),
    )

    for keys, options in definitions:
        try:
            collection.create_index(keys, **options)
        except OperationFailure as exc:
            if exc.code not in _INDEX_CONFLICT_CODES:
                raise
            log.debug("Índice %s já existe com outra definição: %s", options["name"], exc)


__all__ = ["ensure_event_indexes"]
