"""Estruturas geográficas usadas para validar coordenadas."""
from __future__ import annotations

import math
from dataclasses import dataclass

from ..errors import OutOfBoundsCoordinate


@dataclass(frozen=True, slots=True)
class Coordinates:
    """Par latitude/longitude resolvido para um local."""

    lat: float
    lon: float

    @classmethod
    def parse(cls, lat: object, lon: object) -> "Coordinates | None":
        """Converte valores crus em coordenadas, ignorando entradas não numéricas."""

        try:
            lat_value = float(lat)  # type: ignore[arg-type]
            lon_value = float(lon)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat_value) and math.isfinite(lon_value)):
            return None
        return cls(lat=lat_value, lon=lon_value)


@dataclass(frozen=True, slots=True)
class GeoBounds:
    """Retângulo de latitude/longitude válido para a região de operação."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @classmethod
    def from_string(cls, value: str) -> "GeoBounds":
        """Lê ``min_lat,max_lat,min_lon,max_lon`` a partir de texto."""

        parts = [item.strip() for item in value.split(",")]
        if len(parts) != 4:
            raise ValueError("bounds must have four comma-separated numbers")
        min_lat, max_lat, min_lon, max_lon = (float(item) for item in parts)
        if min_lat >= max_lat or min_lon >= max_lon:
            raise ValueError("bounds must describe a non-empty rectangle")
        return cls(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)

    def contains(self, lat: float | None, lon: float | None) -> bool:
        if lat is None or lon is None:
            return False
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return False
        return self.min_lat <= lat <= self.max_lat and self.min_lon <= lon <= self.max_lon

    def require(self, coordinates: Coordinates) -> Coordinates:
        """Retorna as coordenadas ou levanta :class:`OutOfBoundsCoordinate`."""

        if not self.contains(coordinates.lat, coordinates.lon):
            raise OutOfBoundsCoordinate(
                f"({coordinates.lat}, {coordinates.lon}) is outside the operating region"
            )
        return coordinates

    def viewbox(self) -> str:
        """Formato ``left,top,right,bottom`` aceito pelo Nominatim."""

        return f"{self.min_lon},{self.max_lat},{self.max_lon},{self.min_lat}"


#: Retângulo padrão da República Tcheca.
CZECHIA_BOUNDS = GeoBounds(min_lat=48.55, max_lat=51.06, min_lon=12.09, max_lon=18.87)


@dataclass(frozen=True, slots=True)
class GeocodeCandidate:
    """Candidato devolvido pelo geocodificador externo."""

    coordinates: Coordinates
    country_code: str | None = None
    display_name: str | None = None


__all__ = ["CZECHIA_BOUNDS", "Coordinates", "GeoBounds", "GeocodeCandidate"]
