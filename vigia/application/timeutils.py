"""Utilidades de data e hora compartilhadas pelos casos de uso."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable

from vigia.domain.timestamps import ensure_aware, to_iso

Clock = Callable[[], datetime]

_DATE_LIKE = re.compile(r"^\s*\d{4}-\d{2}-\d{2}")


def utc_now() -> datetime:
    """Relógio padrão: instante atual em UTC com fuso explícito."""

    return datetime.now(timezone.utc)


def parse_timestamp(value: object) -> datetime | None:
    """Converte ``datetime`` ou texto ISO-8601 (aceitando ``Z``) em datetime UTC-aware."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return ensure_aware(datetime.fromisoformat(text))
    except ValueError:
        return None


def parse_feed_timestamp(value: object) -> datetime | None:
    """Lê datas de feed: ISO-8601 ou o formato RFC 822 usado em ``pubDate``."""

    parsed = parse_timestamp(value)
    if parsed is not None or not isinstance(value, str):
        return parsed
    try:
        return ensure_aware(parsedate_to_datetime(value.strip()))
    except (TypeError, ValueError, IndexError):
        return None


def looks_like_date(value: str | None) -> bool:
    """Indica se o texto começa com uma data ``YYYY-MM-DD``."""

    if not value:
        return False
    return bool(_DATE_LIKE.match(value))


__all__ = [
    "Clock",
    "ensure_aware",
    "looks_like_date",
    "parse_feed_timestamp",
    "parse_timestamp",
    "to_iso",
    "utc_now",
]
