"""Preenchimento oportunista de durações e coordenadas ausentes.

Atua sobre uma fatia limitada de um resultado recém-lido, nunca sobre o
armazenamento inteiro. Falhas de um registro (data ilegível, local não
encontrado) apenas pulam aquele registro.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Sequence

from vigia.domain import Event, UnresolvedLookup
from vigia.domain.repositories import EventRepository

from .duration import DEFAULT_MAX_DURATION_MINUTES, compute_duration_minutes, is_plausible
from .geocode_cache import GeocodeCache
from .timeutils import Clock, parse_feed_timestamp, utc_now

DEFAULT_DURATION_LIMIT = 80
DEFAULT_COORDINATE_LIMIT = 8


@dataclass(frozen=True)
class BackfillResult:
    """Resumo de uma rodada de preenchimento."""

    attempted: int
    fixed: int
    #: Eventos de entrada com os valores preenchidos aplicados.
    events: tuple[Event, ...]
    #: ``True`` quando a rodada parou por orçamento de tempo ou cancelamento.
    interrupted: bool = False


class BackfillCoordinator:
    """Recalcula durações e resolve coordenadas de ocorrências incompletas."""

    def __init__(
        self,
        repository: EventRepository,
        geocode_cache: GeocodeCache,
        *,
        clock: Clock = utc_now,
        max_duration_minutes: int = DEFAULT_MAX_DURATION_MINUTES,
        duration_limit: int = DEFAULT_DURATION_LIMIT,
        coordinate_limit: int = DEFAULT_COORDINATE_LIMIT,
        time_budget: float | None = None,
        monotonic: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        self._repository = repository
        self._geocode_cache = geocode_cache
        self._clock = clock
        self._max_duration = max_duration_minutes
        self._duration_limit = duration_limit
        self._coordinate_limit = coordinate_limit
        self._time_budget = time_budget
        self._monotonic = monotonic
        self._stop = threading.Event()
        self._log = logger or logging.getLogger("vigia.backfill")

    def cancel(self) -> None:
        """Interrompe rodadas de coordenadas em andamento e futuras."""

        self._stop.set()

    def needs_duration(self, event: Event, *, require_detection: bool = True) -> bool:
        if not event.is_closed:
            return False
        if require_detection and event.closed_detected_at is None:
            return False
        if not require_detection and not (event.end_time_iso or event.closed_detected_at):
            return False
        return not is_plausible(event.duration_min, self._max_duration)

    @staticmethod
    def needs_coordinates(event: Event) -> bool:
        return event.coordinates is None and event.location_query is not None

    def compute_duration(self, event: Event) -> int | None:
        """Duração a partir do início (ou publicação) até o fim registrado."""

        start = parse_feed_timestamp(event.start_time_iso) or parse_feed_timestamp(
            event.pub_date
        )
        end = event.end_time_iso or event.closed_detected_at
        return compute_duration_minutes(
            start,
            end,
            self._max_duration,
            fallback_start=event.first_seen_at or event.created_at,
            now=self._clock(),
        )

    def backfill_durations(
        self,
        events: Sequence[Event],
        limit: int | None = None,
        *,
        require_detection: bool = True,
    ) -> BackfillResult:
        """Persiste durações ausentes de até ``limit`` ocorrências fechadas."""

        limit = self._duration_limit if limit is None else limit
        updated = list(events)
        candidates = [
            index
            for index, event in enumerate(updated)
            if self.needs_duration(event, require_detection=require_detection)
        ][: max(0, limit)]

        fixed = 0
        for index in candidates:
            event = updated[index]
            minutes = self.compute_duration(event)
            if minutes is None:
                self._log.debug("Duração de %s continua desconhecida", event.id)
                continue
            self._repository.update_duration(event.id, minutes)
            updated[index] = replace(event, duration_min=minutes)
            fixed += 1

        if fixed:
            self._log.info("%d duração(ões) preenchida(s)", fixed)
        return BackfillResult(attempted=len(candidates), fixed=fixed, events=tuple(updated))

    def backfill_coordinates(
        self,
        events: Iterable[Event],
        limit: int | None = None,
        *,
        budget_seconds: float | None = None,
    ) -> BackfillResult:
        """Resolve coordenadas de até ``limit`` ocorrências dentro do orçamento de tempo."""

        limit = self._coordinate_limit if limit is None else limit
        budget = self._time_budget if budget_seconds is None else budget_seconds
        deadline = self._monotonic() + budget if budget is not None else None

        updated = list(events)
        candidates = [
            index for index, event in enumerate(updated) if self.needs_coordinates(event)
        ][: max(0, limit)]

        attempted = 0
        fixed = 0
        interrupted = False
        for index in candidates:
            if self._stop.is_set() or (deadline is not None and self._monotonic() >= deadline):
                interrupted = True
                break
            event = updated[index]
            attempted += 1
            try:
                coordinates = self._geocode_cache.resolve(event.location_query)
            except (UnresolvedLookup, ValueError) as exc:
                self._log.debug("Coordenadas de %s não resolvidas: %s", event.id, exc)
                continue
            if coordinates is None:
                continue
            self._repository.update_coordinates(event.id, coordinates)
            updated[index] = replace(event, lat=coordinates.lat, lon=coordinates.lon)
            fixed += 1

        if interrupted:
            self._log.info(
                "Preenchimento de coordenadas interrompido após %d de %d",
                attempted,
                len(candidates),
            )
        return BackfillResult(
            attempted=attempted,
            fixed=fixed,
            events=tuple(updated),
            interrupted=interrupted,
        )


__all__ = [
    "BackfillCoordinator",
    "BackfillResult",
    "DEFAULT_COORDINATE_LIMIT",
    "DEFAULT_DURATION_LIMIT",
]
