"""API pública do domínio do Vigia."""
from .entities import (
    CZECHIA_BOUNDS,
    Coordinates,
    Event,
    GeoBounds,
    GeocodeCandidate,
    Observation,
)
from .errors import (
    ConcurrentUpdateError,
    ImplausibleDuration,
    InvalidInput,
    OutOfBoundsCoordinate,
    StoreUnavailable,
    UnresolvedLookup,
    VigiaError,
)

__all__ = [
    "CZECHIA_BOUNDS",
    "ConcurrentUpdateError",
    "Coordinates",
    "Event",
    "GeoBounds",
    "GeocodeCandidate",
    "ImplausibleDuration",
    "InvalidInput",
    "Observation",
    "OutOfBoundsCoordinate",
    "StoreUnavailable",
    "UnresolvedLookup",
    "VigiaError",
]
