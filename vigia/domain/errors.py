"""Taxonomia de erros do núcleo de reconciliação."""
from __future__ import annotations


class VigiaError(Exception):
    """Erro base de todas as falhas conhecidas do Vigia."""


class InvalidInput(VigiaError, ValueError):
    """Observação rejeitada antes de qualquer escrita (ex.: identificador vazio)."""


class StoreUnavailable(VigiaError, RuntimeError):
    """O armazenamento durável não respondeu; a operação deve falhar visivelmente."""


class ConcurrentUpdateError(StoreUnavailable):
    """A escrita condicional perdeu a disputa repetidas vezes para outro escritor."""


class UnresolvedLookup(VigiaError):
    """O geocodificador não produziu candidato utilizável nesta rodada."""


class OutOfBoundsCoordinate(VigiaError, ValueError):
    """Coordenada fora do retângulo da região de operação."""


class ImplausibleDuration(VigiaError, ValueError):
    """Duração calculada ou armazenada fora do intervalo plausível."""


__all__ = [
    "ConcurrentUpdateError",
    "ImplausibleDuration",
    "InvalidInput",
    "OutOfBoundsCoordinate",
    "StoreUnavailable",
    "UnresolvedLookup",
    "VigiaError",
]
