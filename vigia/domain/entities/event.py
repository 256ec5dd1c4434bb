"""Entidades que representam ocorrências rastreadas e suas observações."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..timestamps import to_iso
from .geo import Coordinates


@dataclass(frozen=True)
class Observation:
    """Relato parcial recebido do feed sobre uma ocorrência."""

    #: Identificador estável fornecido pela origem (guid, link ou título).
    id: str
    title: str | None = None
    link: str | None = None
    #: Data de publicação como veio do feed (texto livre, geralmente RFC 822).
    pub_date: str | None = None
    place_text: str | None = None
    city_text: str | None = None
    status_text: str | None = None
    event_type: str | None = None
    description_raw: str | None = None
    start_time_iso: str | None = None
    end_time_iso: str | None = None
    duration_min: float | None = None
    is_closed: bool | None = None

    @property
    def key(self) -> str:
        return (self.id or "").strip()


@dataclass(frozen=True)
class Event:
    """Registro reconciliado de uma ocorrência."""

    id: str
    title: str | None = None
    link: str | None = None
    pub_date: str | None = None
    place_text: str | None = None
    city_text: str | None = None
    status_text: str | None = None
    event_type: str | None = None
    description_raw: str | None = None
    start_time_iso: str | None = None
    end_time_iso: str | None = None
    duration_min: int | None = None
    is_closed: bool = False
    #: Momento em que o fechamento foi detectado pela primeira vez.
    closed_detected_at: datetime | None = None
    lat: float | None = None
    lon: float | None = None
    first_seen_at: datetime | None = None
    last_seen_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    #: Versão usada pela escrita condicional do repositório.
    revision: int = 0

    @property
    def coordinates(self) -> Coordinates | None:
        if self.lat is None or self.lon is None:
            return None
        return Coordinates(lat=self.lat, lon=self.lon)

    @property
    def location_query(self) -> str | None:
        """Texto usado para geocodificar: cidade quando houver, senão o local."""

        for value in (self.city_text, self.place_text):
            if value and value.strip():
                return value.strip()
        return None

    def to_record(self) -> dict[str, Any]:
        """Serializa no formato público de leitura/exportação."""

        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "pub_date": self.pub_date,
            "place_text": self.place_text,
            "city_text": self.city_text,
            "status_text": self.status_text,
            "event_type": self.event_type,
            "description_raw": self.description_raw,
            "start_time_iso": self.start_time_iso,
            "end_time_iso": self.end_time_iso,
            "duration_min": self.duration_min,
            "is_closed": self.is_closed,
            "closed_detected_at": _iso(self.closed_detected_at),
            "lat": self.lat,
            "lon": self.lon,
            "first_seen_at": _iso(self.first_seen_at),
            "last_seen_at": _iso(self.last_seen_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


def _iso(value: datetime | None) -> str | None:
    return to_iso(value) if value is not None else None


__all__ = ["Event", "Observation"]
