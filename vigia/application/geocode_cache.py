"""Cache de geocodificação com validação pela região de operação."""
from __future__ import annotations

import logging
import re

from vigia.domain import (
    CZECHIA_BOUNDS,
    Coordinates,
    GeoBounds,
    GeocodeCandidate,
    OutOfBoundsCoordinate,
    UnresolvedLookup,
)
from vigia.domain.ports import Geocoder
from vigia.domain.repositories import GeocodeCacheStorage

_WHITESPACE = re.compile(r"\s+")
_DISTRICT_PREFIX = re.compile(r"^(okres\s+|ok\.\s*)", re.IGNORECASE)

#: Consultas menores que isso não identificam um local.
MIN_QUERY_LENGTH = 2


def normalize_query(text: str | None) -> str:
    """Chave do cache: texto aparado com espaços internos colapsados."""

    if not text:
        return ""
    return _WHITESPACE.sub(" ", str(text)).strip()


def query_variants(query: str) -> list[str]:
    """Consultas tentadas em ordem: a recebida e, se houver, sem o prefixo de distrito."""

    variants = [query]
    stripped = _DISTRICT_PREFIX.sub("", query).strip()
    if stripped and stripped != query:
        variants.append(stripped)
    return variants


class GeocodeCache:
    """Resolve nomes de locais em coordenadas validadas, evitando chamadas repetidas."""

    def __init__(
        self,
        storage: GeocodeCacheStorage,
        geocoder: Geocoder,
        *,
        bounds: GeoBounds = CZECHIA_BOUNDS,
        country_code: str | None = "cz",
        logger: logging.Logger | None = None,
    ) -> None:
        self._storage = storage
        self._geocoder = geocoder
        self._bounds = bounds
        self._country_code = country_code.lower() if country_code else None
        self._log = logger or logging.getLogger("vigia.geocode_cache")

    @property
    def bounds(self) -> GeoBounds:
        return self._bounds

    def resolve(self, query: str | None) -> Coordinates | None:
        """Coordenadas válidas para ``query`` ou ``None`` quando não resolvida."""

        key = normalize_query(query)
        if len(key) < MIN_QUERY_LENGTH:
            return None

        cached = self._storage.get(key)
        if cached is not None:
            if self._bounds.contains(cached.lat, cached.lon):
                return cached
            self._log.info(
                "Entrada de cache fora da região removida: %s (%s, %s)",
                key,
                cached.lat,
                cached.lon,
            )
            self._storage.delete(key)

        for variant in query_variants(key):
            try:
                candidates = self._geocoder.search(variant)
            except UnresolvedLookup as exc:
                self._log.debug("Geocodificação de %r não resolvida: %s", variant, exc)
                return None
            if not candidates:
                continue
            try:
                coordinates = self._validate(candidates[0])
            except OutOfBoundsCoordinate as exc:
                self._log.info("Candidato descartado para %r: %s", variant, exc)
                return None
            self._storage.save(key, coordinates)
            return coordinates

        return None

    def invalidate(self, query: str | None) -> bool:
        """Apaga incondicionalmente a entrada de ``query``."""

        key = normalize_query(query)
        if not key:
            return False
        return self._storage.delete(key)

    def _validate(self, candidate: GeocodeCandidate) -> Coordinates:
        coordinates = self._bounds.require(candidate.coordinates)
        country = (candidate.country_code or "").lower()
        if self._country_code and country and country != self._country_code:
            raise OutOfBoundsCoordinate(
                f"candidate country {country!r} differs from {self._country_code!r}"
            )
        return coordinates


__all__ = ["GeocodeCache", "MIN_QUERY_LENGTH", "normalize_query", "query_variants"]
