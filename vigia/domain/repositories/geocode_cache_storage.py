"""Contrato do armazenamento do cache de geocodificação."""
from __future__ import annotations

from abc import ABC, abstractmethod

from ..entities import Coordinates


class GeocodeCacheStorage(ABC):
    """Mapeia consultas normalizadas para coordenadas resolvidas."""

    @abstractmethod
    def get(self, query: str) -> Coordinates | None:
        """Retorna a entrada armazenada ou ``None``."""

    @abstractmethod
    def save(self, query: str, coordinates: Coordinates) -> None:
        """Cria ou sobrescreve a entrada da consulta."""

    @abstractmethod
    def delete(self, query: str) -> bool:
        """Remove a entrada; retorna ``True`` quando algo foi apagado."""


__all__ = ["GeocodeCacheStorage"]
