"""Entidades de domínio do rastreador de ocorrências."""
from .event import Event, Observation
from .geo import CZECHIA_BOUNDS, Coordinates, GeoBounds, GeocodeCandidate

__all__ = [
    "CZECHIA_BOUNDS",
    "Coordinates",
    "Event",
    "GeoBounds",
    "GeocodeCandidate",
    "Observation",
]
