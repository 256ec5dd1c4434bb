"""Casos de uso relacionados à consulta de ocorrências."""
from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Iterator

from vigia.domain import Event
from vigia.domain.repositories import EventRepository

from .filters import EventFilters, event_time, matches
from .timeutils import Clock, ensure_aware, utc_now

DEFAULT_LIST_LIMIT = 400
MAX_LIST_LIMIT = 2000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _sort_key(event: Event) -> tuple[datetime, datetime]:
    created = ensure_aware(event.created_at) if event.created_at else _EPOCH
    return (event_time(event) or created, created)


class EventQueryService:
    """Fornece acesso somente leitura às ocorrências armazenadas."""

    def __init__(
        self,
        repository: EventRepository,
        *,
        zone: tzinfo,
        clock: Clock = utc_now,
    ) -> None:
        self._repository = repository
        self._zone = zone
        self._clock = clock

    def iter_matching(self, filters: EventFilters) -> Iterator[Event]:
        """Ocorrências que satisfazem ``filters`` (ordem do armazenamento)."""

        now = self._clock()
        candidates = self._repository.find(
            status=filters.status,
            event_type=filters.event_type,
            city=filters.city,
        )
        for event in candidates:
            if matches(event, filters, now=now, zone=self._zone):
                yield event

    def list_events(self, filters: EventFilters, limit: int = DEFAULT_LIST_LIMIT) -> list[Event]:
        """Ocorrências filtradas, das mais recentes para as mais antigas."""

        limit = max(1, min(int(limit), MAX_LIST_LIMIT))
        events = sorted(self.iter_matching(filters), key=_sort_key, reverse=True)
        return events[:limit]


__all__ = ["DEFAULT_LIST_LIMIT", "EventQueryService", "MAX_LIST_LIMIT"]
