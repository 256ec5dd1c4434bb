"""Filtros de consulta e o "horário do evento" usado para agrupar ocorrências."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Any

from vigia.domain import Event

from .timeutils import looks_like_date, parse_feed_timestamp, parse_timestamp

STATUS_VALUES = ("all", "open", "closed")
DAY_VALUES = ("all", "today", "yesterday")

_MONTH = re.compile(r"^(\d{4})-(\d{2})$")


def _choice(value: str | None, allowed: tuple[str, ...]) -> str:
    normalized = (value or "").strip().lower()
    return normalized if normalized in allowed else allowed[0]


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _month(value: str | None) -> str | None:
    text = _clean(value)
    if text is None:
        return None
    match = _MONTH.match(text)
    if not match or not 1 <= int(match.group(2)) <= 12:
        return None
    return text


@dataclass(frozen=True)
class EventFilters:
    """Conjunto de filtros aceitos por listagens e estatísticas."""

    status: str = "all"
    day: str = "all"
    city: str | None = None
    month: str | None = None
    event_type: str | None = None

    @classmethod
    def from_query(
        cls,
        *,
        status: str | None = None,
        day: str | None = None,
        city: str | None = None,
        month: str | None = None,
        event_type: str | None = None,
    ) -> "EventFilters":
        """Normaliza parâmetros crus; valores desconhecidos voltam ao padrão."""

        return cls(
            status=_choice(status, STATUS_VALUES),
            day=_choice(day, DAY_VALUES),
            city=_clean(city),
            month=_month(month),
            event_type=_clean(event_type),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "day": self.day,
            "city": self.city,
            "month": self.month,
            "type": self.event_type,
        }


def event_time(event: Event) -> datetime | None:
    """Início quando parece uma data, senão publicação, senão criação."""

    if looks_like_date(event.start_time_iso):
        parsed = parse_timestamp(event.start_time_iso)
        if parsed is not None:
            return parsed
    published = parse_feed_timestamp(event.pub_date)
    if published is not None:
        return published
    return parse_timestamp(event.created_at)


def local_day(event: Event, zone: tzinfo) -> date | None:
    moment = event_time(event)
    if moment is None:
        return None
    return moment.astimezone(zone).date()


def matches(event: Event, filters: EventFilters, *, now: datetime, zone: tzinfo) -> bool:
    """Avalia todos os filtros em memória no calendário local da região."""

    if filters.status == "open" and event.is_closed:
        return False
    if filters.status == "closed" and not event.is_closed:
        return False
    if filters.event_type and event.event_type != filters.event_type:
        return False
    if filters.city:
        needle = filters.city.lower()
        haystacks = (event.city_text or "", event.place_text or "")
        if not any(needle in text.lower() for text in haystacks):
            return False
    if filters.day != "all" or filters.month:
        day = local_day(event, zone)
        if day is None:
            return False
        if filters.day != "all":
            today = now.astimezone(zone).date()
            target = today - timedelta(days=1) if filters.day == "yesterday" else today
            if day != target:
                return False
        if filters.month and day.strftime("%Y-%m") != filters.month:
            return False
    return True


__all__ = [
    "DAY_VALUES",
    "EventFilters",
    "STATUS_VALUES",
    "event_time",
    "local_day",
    "matches",
]
