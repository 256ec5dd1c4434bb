"""Reconciliação de observações com o registro persistido de cada ocorrência.

A regra de fusão vive em :func:`merge_event`, uma função pura
``(estado atual, observação, agora) -> novo estado``. O
:class:`EventReconciler` prepara a observação (calculando a duração quando o
fechamento é detectado nesta chamada) e delega a persistência ao repositório,
que aplica a fusão com uma única escrita condicional por identificador.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from vigia.domain import Event, InvalidInput, Observation
from vigia.domain.repositories import EventRepository

from .duration import DEFAULT_MAX_DURATION_MINUTES, clamp_duration, compute_duration_minutes
from .timeutils import Clock, parse_feed_timestamp, to_iso, utc_now

#: Campos descritivos: valor novo não vazio sempre substitui o armazenado.
TEXT_FIELDS = (
    "title",
    "link",
    "pub_date",
    "place_text",
    "city_text",
    "status_text",
    "event_type",
    "description_raw",
)


def _present(value: str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def merge_event(
    current: Event | None,
    observation: Observation,
    now: datetime,
    *,
    max_duration_minutes: int = DEFAULT_MAX_DURATION_MINUTES,
) -> Event:
    """Funde ``observation`` em ``current`` e devolve o novo estado.

    - textos descritivos: o valor recebido (não vazio) sempre vence;
    - início: só preenche quando o armazenado está vazio;
    - fim: explícito vence; senão o primeiro fechamento sintetiza ``now``;
    - fechamento é pegajoso e ``closed_detected_at`` é gravado uma única vez;
    - duração recebida válida vence; a armazenada acima do máximo é apagada.
    """

    key = observation.key
    if not key:
        raise InvalidInput("observation id is required")

    base = current or Event(id=key, first_seen_at=now, created_at=now)

    changes: dict[str, object] = {}
    for field_name in TEXT_FIELDS:
        incoming = _present(getattr(observation, field_name))
        if incoming is not None:
            changes[field_name] = incoming

    incoming_start = _present(observation.start_time_iso)
    if _present(base.start_time_iso) is None and incoming_start is not None:
        changes["start_time_iso"] = incoming_start

    newly_closed = bool(observation.is_closed) and not base.is_closed

    incoming_end = _present(observation.end_time_iso)
    if incoming_end is not None:
        changes["end_time_iso"] = incoming_end
    elif newly_closed:
        changes["end_time_iso"] = to_iso(now)

    if newly_closed:
        changes["is_closed"] = True
        changes["closed_detected_at"] = now

    incoming_duration = clamp_duration(observation.duration_min, max_duration_minutes)
    if incoming_duration is not None:
        changes["duration_min"] = incoming_duration
    elif base.duration_min is not None and base.duration_min > max_duration_minutes:
        changes["duration_min"] = None

    changes["last_seen_at"] = now
    changes["updated_at"] = now
    if base.first_seen_at is None:
        changes["first_seen_at"] = base.created_at or now
    if base.created_at is None:
        changes["created_at"] = base.first_seen_at or now

    return replace(base, **changes)


class EventReconciler:
    """Caso de uso que recebe observações e mantém o registro consolidado."""

    def __init__(
        self,
        repository: EventRepository,
        *,
        clock: Clock = utc_now,
        max_duration_minutes: int = DEFAULT_MAX_DURATION_MINUTES,
        logger: logging.Logger | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._max_duration = max_duration_minutes
        self._log = logger or logging.getLogger("vigia.reconciler")

    def reconcile(self, observation: Observation) -> Event:
        """Aplica a observação e retorna o registro persistido."""

        key = observation.key
        if not key:
            raise InvalidInput("observation id is required")

        now = self._clock()

        def mutate(current: Event | None) -> Event:
            prepared = self._with_duration(current, observation, now)
            return merge_event(
                current, prepared, now, max_duration_minutes=self._max_duration
            )

        event = self._repository.apply(key, mutate)
        self._log.debug(
            "Ocorrência %s reconciliada (fechada=%s, duração=%s)",
            event.id,
            event.is_closed,
            event.duration_min,
        )
        return event

    def _with_duration(
        self, current: Event | None, observation: Observation, now: datetime
    ) -> Observation:
        """Calcula a duração quando esta observação é a primeira a fechar a ocorrência."""

        if observation.duration_min is not None:
            if clamp_duration(observation.duration_min, self._max_duration) is not None:
                return observation
            self._log.debug(
                "Duração recebida implausível para %s descartada: %r",
                observation.key,
                observation.duration_min,
            )
            observation = replace(observation, duration_min=None)

        already_closed = current is not None and current.is_closed
        if not observation.is_closed or already_closed:
            return observation

        start = _present(observation.start_time_iso)
        if start is None and current is not None:
            start = _present(current.start_time_iso)
        start_dt = parse_feed_timestamp(start) if start else None
        if start_dt is None and current is not None:
            start_dt = parse_feed_timestamp(current.pub_date)
        if start_dt is None:
            start_dt = parse_feed_timestamp(_present(observation.pub_date))

        first_seen = current.first_seen_at if current is not None else now
        end = _present(observation.end_time_iso) or now

        minutes = compute_duration_minutes(
            start_dt,
            end,
            self._max_duration,
            fallback_start=first_seen,
            now=now,
        )
        return replace(observation, duration_min=minutes)


__all__ = ["EventReconciler", "TEXT_FIELDS", "merge_event"]
