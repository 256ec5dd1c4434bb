"""Job que corrige coordenadas fora da região de operação."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from vigia.application import GeocodeCache
from vigia.domain import UnresolvedLookup
from vigia.domain.repositories import EventRepository

DEFAULT_LIMIT = 200
MAX_LIMIT = 2000


@dataclass(frozen=True)
class RegeocodeJobResult:
    """Resumo das métricas coletadas ao varrer coordenadas inválidas."""

    processed: int
    cache_deleted: int
    coords_cleared: int
    re_geocoded: int
    failed: int
    elapsed_ms_total: int

    def to_mapping(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "cache_deleted": self.cache_deleted,
            "coords_cleared": self.coords_cleared,
            "re_geocoded": self.re_geocoded,
            "failed": self.failed,
            "elapsed_ms_total": self.elapsed_ms_total,
        }


class RegeocodeJob:
    """Limpa coordenadas fora da região, invalida o cache e tenta resolver de novo."""

    def __init__(
        self,
        repository: EventRepository,
        geocode_cache: GeocodeCache,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._repository = repository
        self._cache = geocode_cache
        self._log = logger or logging.getLogger("vigia.regeocode_job")

    def run(self, *, limit: int = DEFAULT_LIMIT) -> RegeocodeJobResult:
        limit = max(1, min(int(limit), MAX_LIMIT))
        job_start = time.perf_counter()

        bad_events = self._repository.find_outside_bounds(self._cache.bounds, limit)

        cache_deleted = 0
        coords_cleared = 0
        re_geocoded = 0
        failed = 0

        for event in bad_events:
            query = event.location_query

            if query and self._cache.invalidate(query):
                cache_deleted += 1

            self._repository.clear_coordinates(event.id)
            coords_cleared += 1

            if not query:
                failed += 1
                continue

            try:
                coordinates = self._cache.resolve(query)
            except UnresolvedLookup:
                coordinates = None
            if coordinates is None:
                self._log.info("Ocorrência %s ficou sem coordenadas (%s)", event.id, query)
                failed += 1
                continue

            self._repository.update_coordinates(event.id, coordinates)
            re_geocoded += 1

        elapsed_ms = int((time.perf_counter() - job_start) * 1000)
        return RegeocodeJobResult(
            processed=len(bad_events),
            cache_deleted=cache_deleted,
            coords_cleared=coords_cleared,
            re_geocoded=re_geocoded,
            failed=failed,
            elapsed_ms_total=elapsed_ms,
        )


__all__ = ["RegeocodeJob", "RegeocodeJobResult"]
