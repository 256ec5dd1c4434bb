"""Esquemas de entrada utilizados pela API do Vigia."""
from .observation_payload import (
    IngestBatchPayload,
    ObservationPayload,
    RecalcRequest,
    RegeocodeRequest,
)

__all__ = [
    "IngestBatchPayload",
    "ObservationPayload",
    "RecalcRequest",
    "RegeocodeRequest",
]
