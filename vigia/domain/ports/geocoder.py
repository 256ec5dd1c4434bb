"""Porta de entrada para o serviço externo de geocodificação."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ..entities import GeocodeCandidate


class Geocoder(ABC):
    """Resolve texto livre em candidatos com coordenadas."""

    @abstractmethod
    def search(self, query: str) -> Sequence[GeocodeCandidate]:
        """Consulta o serviço externo restrito ao país de operação.

        Levanta :class:`~vigia.domain.errors.UnresolvedLookup` em falhas de
        transporte ou respostas inválidas. Lista vazia significa "sem match".
        """


__all__ = ["Geocoder"]
