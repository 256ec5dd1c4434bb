"""Job em lote que recalcula durações ausentes em todo o armazenamento."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from vigia.application import BackfillCoordinator
from vigia.domain.repositories import EventRepository

DEFAULT_LIMIT = 2000
MAX_LIMIT = 10000


@dataclass(frozen=True)
class DurationRecalcJobResult:
    scanned: int
    fixed: int
    skipped: int
    elapsed_ms_total: int

    def to_mapping(self) -> dict[str, Any]:
        return {
            "scanned": self.scanned,
            "fixed": self.fixed,
            "skipped": self.skipped,
            "elapsed_ms_total": self.elapsed_ms_total,
        }


class DurationRecalcJob:
    """Preenche a duração de ocorrências fechadas que ainda não a possuem."""

    def __init__(
        self,
        repository: EventRepository,
        coordinator: BackfillCoordinator,
        *,
        max_duration_minutes: int,
        logger: logging.Logger | None = None,
    ) -> None:
        self._repository = repository
        self._coordinator = coordinator
        self._max_duration = max_duration_minutes
        self._log = logger or logging.getLogger("vigia.duration_recalc_job")

    def run(self, *, limit: int = DEFAULT_LIMIT) -> DurationRecalcJobResult:
        limit = max(1, min(int(limit), MAX_LIMIT))
        job_start = time.perf_counter()

        events = self._repository.find_missing_duration(self._max_duration, limit)
        result = self._coordinator.backfill_durations(
            events, limit=limit, require_detection=False
        )

        elapsed_ms = int((time.perf_counter() - job_start) * 1000)
        self._log.info(
            "Recálculo de durações: %d verificada(s), %d corrigida(s)",
            len(events),
            result.fixed,
        )
        return DurationRecalcJobResult(
            scanned=len(events),
            fixed=result.fixed,
            skipped=len(events) - result.fixed,
            elapsed_ms_total=elapsed_ms,
        )


__all__ = ["DurationRecalcJob", "DurationRecalcJobResult"]
