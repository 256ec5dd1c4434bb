"""Interface pública dos casos de uso do Vigia."""
from .backfill import BackfillCoordinator, BackfillResult
from .duration import clamp_duration, compute_duration_minutes
from .filters import EventFilters, event_time
from .geocode_cache import GeocodeCache, normalize_query
from .query_service import EventQueryService
from .reconciler import EventReconciler, merge_event
from .stats import EventStats, StatsAggregator
from .timeutils import Clock, utc_now

__all__ = [
    "BackfillCoordinator",
    "BackfillResult",
    "Clock",
    "EventFilters",
    "EventQueryService",
    "EventReconciler",
    "EventStats",
    "GeocodeCache",
    "StatsAggregator",
    "clamp_duration",
    "compute_duration_minutes",
    "event_time",
    "merge_event",
    "normalize_query",
    "utc_now",
]
