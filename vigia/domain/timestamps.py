"""Normalização de instantes compartilhada por entidades e casos de uso."""
from __future__ import annotations

from datetime import datetime, timezone


def ensure_aware(value: datetime) -> datetime:
    """Trata datetimes sem fuso como UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_iso(value: datetime) -> str:
    """Formata em ISO-8601 UTC com sufixo ``Z``."""

    return ensure_aware(value).astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


__all__ = ["ensure_aware", "to_iso"]
