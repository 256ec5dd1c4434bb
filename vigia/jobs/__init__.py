"""Rotinas de execução em lote para manutenção das ocorrências."""
from .duration_recalc_job import DurationRecalcJob, DurationRecalcJobResult
from .regeocode_job import RegeocodeJob, RegeocodeJobResult

__all__ = [
    "DurationRecalcJob",
    "DurationRecalcJobResult",
    "RegeocodeJob",
    "RegeocodeJobResult",
]
