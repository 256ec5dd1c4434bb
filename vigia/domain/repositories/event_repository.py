"""Contrato de persistência para ocorrências reconciliadas."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterable

from ..entities import Coordinates, Event, GeoBounds

#: Função pura que recebe o estado atual (ou ``None``) e devolve o novo estado.
EventMutation = Callable[[Event | None], Event]


class EventRepository(ABC):
    """Define as operações de leitura e escrita sobre ocorrências."""

    @abstractmethod
    def get(self, event_id: str) -> Event | None:
        """Recupera uma ocorrência pelo identificador."""

    @abstractmethod
    def apply(self, event_id: str, mutate: EventMutation) -> Event:
        """Aplica ``mutate`` de forma atômica por identificador e persiste o resultado.

        Implementações devem garantir que duas chamadas concorrentes para o
        mesmo identificador nunca percam atualizações uma da outra.
        """

    @abstractmethod
    def update_duration(self, event_id: str, duration_min: int | None) -> None:
        """Grava somente a duração (último escritor vence)."""

    @abstractmethod
    def update_coordinates(self, event_id: str, coordinates: Coordinates) -> None:
        """Grava somente as coordenadas (último escritor vence)."""

    @abstractmethod
    def clear_coordinates(self, event_id: str) -> None:
        """Remove latitude e longitude do registro."""

    @abstractmethod
    def find(
        self,
        *,
        status: str = "all",
        event_type: str | None = None,
        city: str | None = None,
    ) -> Iterable[Event]:
        """Lista ocorrências aplicando os filtros que o armazenamento resolve sozinho."""

    @abstractmethod
    def find_outside_bounds(self, bounds: GeoBounds, limit: int) -> list[Event]:
        """Ocorrências com coordenadas fora de ``bounds``, vistas mais recentemente primeiro."""

    @abstractmethod
    def find_missing_duration(self, max_minutes: int, limit: int) -> list[Event]:
        """Ocorrências fechadas sem duração válida."""

    @abstractmethod
    def clear_durations_above(self, max_minutes: int) -> int:
        """Apaga durações acima do máximo plausível e retorna quantas foram afetadas."""


__all__ = ["EventMutation", "EventRepository"]
