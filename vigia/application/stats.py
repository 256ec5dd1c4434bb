"""Agregações de leitura sobre o conjunto reconciliado de ocorrências."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any

from vigia.domain import CZECHIA_BOUNDS, Event, GeoBounds
from vigia.domain.repositories import EventRepository, TrackingMarkerRepository

from .duration import DEFAULT_MAX_DURATION_MINUTES, is_plausible
from .filters import EventFilters, local_day
from .query_service import EventQueryService
from .timeutils import Clock, ensure_aware, to_iso, utc_now

HISTOGRAM_WINDOW = 31
TOP_LOCATIONS_LIMIT = 20
LONGEST_LIMIT = 20
UNKNOWN_LOCATION = "(neznámé)"
UNKNOWN_TYPE = "other"


@dataclass(frozen=True)
class DayCount:
    day: str
    count: int


@dataclass(frozen=True)
class LocationCount:
    name: str
    count: int


@dataclass(frozen=True)
class LongestEvent:
    """Ocorrência listada no ranking de maiores durações."""

    id: str
    title: str | None
    link: str | None
    location: str | None
    duration_min: int
    closed_detected_at: datetime


@dataclass(frozen=True)
class EventStats:
    """Resultado completo de uma consulta de estatísticas."""

    open: int
    closed: int
    by_day: tuple[DayCount, ...]
    by_type: tuple[tuple[str, int], ...]
    top_locations: tuple[LocationCount, ...]
    longest: tuple[LongestEvent, ...]
    tracking_started_at: datetime
    filters: EventFilters = field(default_factory=EventFilters)

    def to_mapping(self) -> dict[str, Any]:
        return {
            "filters": self.filters.to_mapping(),
            "open_vs_closed": {"open": self.open, "closed": self.closed},
            "by_day": [{"day": item.day, "count": item.count} for item in self.by_day],
            "by_type": [{"type": name, "count": count} for name, count in self.by_type],
            "top_locations": [
                {"location": item.name, "count": item.count} for item in self.top_locations
            ],
            "longest": [
                {
                    "id": item.id,
                    "title": item.title,
                    "link": item.link,
                    "location": item.location,
                    "duration_min": item.duration_min,
                    "closed_detected_at": to_iso(item.closed_detected_at),
                }
                for item in self.longest
            ],
            "tracking_started_at": to_iso(self.tracking_started_at),
        }


class StatsAggregator:
    """Calcula contagens, histograma diário e rankings a partir das ocorrências."""

    def __init__(
        self,
        repository: EventRepository,
        marker_repository: TrackingMarkerRepository,
        *,
        zone: tzinfo,
        clock: Clock = utc_now,
        bounds: GeoBounds = CZECHIA_BOUNDS,
        max_duration_minutes: int = DEFAULT_MAX_DURATION_MINUTES,
    ) -> None:
        self._repository = repository
        self._markers = marker_repository
        self._zone = zone
        self._clock = clock
        self._bounds = bounds
        self._max_duration = max_duration_minutes
        self._query = EventQueryService(repository, zone=zone, clock=clock)

    def compute(self, filters: EventFilters | None = None) -> EventStats:
        filters = filters or EventFilters()
        marker = self._markers.get()
        tracking_started_at = ensure_aware(marker) if marker else self._clock()

        matching = list(self._query.iter_matching(filters))
        closed = sum(1 for event in matching if event.is_closed)

        return EventStats(
            open=len(matching) - closed,
            closed=closed,
            by_day=self._histogram(matching),
            by_type=self._by_type(matching),
            top_locations=self._top_locations(),
            longest=self._longest(matching, tracking_started_at),
            tracking_started_at=tracking_started_at,
            filters=filters,
        )

    def _histogram(self, events: list[Event]) -> tuple[DayCount, ...]:
        counts: Counter[str] = Counter()
        for event in events:
            day = local_day(event, self._zone)
            if day is not None:
                counts[day.isoformat()] += 1
        days = sorted(counts, reverse=True)[:HISTOGRAM_WINDOW]
        return tuple(DayCount(day=day, count=counts[day]) for day in days)

    @staticmethod
    def _by_type(events: list[Event]) -> tuple[tuple[str, int], ...]:
        counts = Counter(event.event_type or UNKNOWN_TYPE for event in events)
        return tuple(sorted(counts.items(), key=lambda item: (-item[1], item[0])))

    def _top_locations(self) -> tuple[LocationCount, ...]:
        # Ignora os filtros da requisição de propósito: o ranking é sempre global.
        counts: Counter[str] = Counter()
        for event in self._repository.find():
            coordinates = event.coordinates
            if coordinates is not None and not self._bounds.contains(
                coordinates.lat, coordinates.lon
            ):
                continue
            counts[event.location_query or UNKNOWN_LOCATION] += 1
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return tuple(
            LocationCount(name=name, count=count)
            for name, count in ranked[:TOP_LOCATIONS_LIMIT]
        )

    def _longest(
        self, events: list[Event], tracking_started_at: datetime
    ) -> tuple[LongestEvent, ...]:
        eligible = [
            event
            for event in events
            if event.is_closed
            and event.closed_detected_at is not None
            and ensure_aware(event.closed_detected_at) > tracking_started_at
            and is_plausible(event.duration_min, self._max_duration)
        ]
        eligible.sort(key=lambda event: (-(event.duration_min or 0), event.id))
        return tuple(
            LongestEvent(
                id=event.id,
                title=event.title,
                link=event.link,
                location=event.location_query,
                duration_min=event.duration_min or 0,
                closed_detected_at=ensure_aware(event.closed_detected_at),
            )
            for event in eligible[:LONGEST_LIMIT]
        )


__all__ = [
    "DayCount",
    "EventStats",
    "HISTOGRAM_WINDOW",
    "LONGEST_LIMIT",
    "LocationCount",
    "LongestEvent",
    "StatsAggregator",
    "TOP_LOCATIONS_LIMIT",
    "UNKNOWN_LOCATION",
]
