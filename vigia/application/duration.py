"""Cálculo da duração de ocorrências com limites de plausibilidade.

Toda a lógica aqui é pura: os instantes entram como argumentos e a resposta é
um número inteiro de minutos ou ``None`` ("desconhecido"). Nenhum valor fora do
intervalo plausível escapa deste módulo.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta

from vigia.domain import ImplausibleDuration

from .timeutils import parse_timestamp

#: Máximo plausível padrão (3 dias).
DEFAULT_MAX_DURATION_MINUTES = 4320
#: Nenhum máximo configurado fica abaixo de uma hora.
MIN_MAX_DURATION_MINUTES = 60
#: Fins de ocorrência no futuro são aceitos até esta folga (relógios divergentes).
FUTURE_END_TOLERANCE = timedelta(minutes=5)


def effective_max(max_minutes: int | None) -> int:
    if max_minutes is None:
        return DEFAULT_MAX_DURATION_MINUTES
    return max(MIN_MAX_DURATION_MINUTES, int(max_minutes))


def require_plausible_duration(minutes: object, max_minutes: int | None = None) -> int:
    """Valida uma duração e a arredonda, levantando :class:`ImplausibleDuration`."""

    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
        raise ImplausibleDuration(f"duration {minutes!r} is not a number")
    if not math.isfinite(minutes):
        raise ImplausibleDuration(f"duration {minutes!r} is not finite")
    rounded = math.floor(minutes + 0.5)
    if rounded <= 0:
        raise ImplausibleDuration(f"duration {rounded} is not positive")
    limit = effective_max(max_minutes)
    if rounded > limit:
        raise ImplausibleDuration(f"duration {rounded} exceeds {limit}")
    return rounded


def clamp_duration(minutes: object, max_minutes: int | None = None) -> int | None:
    """Mesmas regras de :func:`require_plausible_duration`, devolvendo ``None`` quando inválida."""

    if minutes is None:
        return None
    try:
        return require_plausible_duration(minutes, max_minutes)
    except ImplausibleDuration:
        return None


def is_plausible(minutes: int | None, max_minutes: int | None = None) -> bool:
    return minutes is not None and clamp_duration(minutes, max_minutes) == minutes


def compute_duration_minutes(
    start: datetime | str | None,
    end: datetime | str | None,
    max_plausible_minutes: int | None = None,
    *,
    fallback_start: datetime | str | None = None,
    now: datetime | None = None,
) -> int | None:
    """Minutos inteiros entre ``start`` e ``end`` ou ``None`` quando desconhecido.

    ``fallback_start`` (normalmente o ``first_seen_at`` do registro) substitui um
    início ausente ou ilegível. Com ``now`` informado, fins mais de cinco minutos
    no futuro são rejeitados.
    """

    start_dt = parse_timestamp(start) or parse_timestamp(fallback_start)
    end_dt = parse_timestamp(end)
    if start_dt is None or end_dt is None:
        return None
    if end_dt <= start_dt:
        return None
    if now is not None and end_dt > parse_timestamp(now) + FUTURE_END_TOLERANCE:
        return None
    minutes = (end_dt - start_dt).total_seconds() / 60
    return clamp_duration(minutes, max_plausible_minutes)


__all__ = [
    "DEFAULT_MAX_DURATION_MINUTES",
    "FUTURE_END_TOLERANCE",
    "MIN_MAX_DURATION_MINUTES",
    "clamp_duration",
    "compute_duration_minutes",
    "effective_max",
    "is_plausible",
    "require_plausible_duration",
]
