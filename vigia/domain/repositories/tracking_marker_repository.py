"""Contrato do marcador de início de rastreamento."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class TrackingMarkerRepository(ABC):
    """Guarda o instante a partir do qual as durações são confiáveis."""

    @abstractmethod
    def ensure(self, now: datetime) -> datetime:
        """Grava ``now`` apenas se o marcador ainda não existir e devolve o valor vigente."""

    @abstractmethod
    def get(self) -> datetime | None:
        """Lê o marcador persistido."""


__all__ = ["TrackingMarkerRepository"]
