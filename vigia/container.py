"""Dependency container for the incident tracking services."""
from __future__ import annotations

from dataclasses import dataclass

from vigia import settings
from vigia.application import (
    BackfillCoordinator,
    Clock,
    EventQueryService,
    EventReconciler,
    GeocodeCache,
    StatsAggregator,
    utc_now,
)
from vigia.domain.ports import Geocoder
from vigia.infrastructure import (
    MongoClientFactory,
    MongoEventRepository,
    MongoGeocodeCacheStorage,
    MongoTrackingMarkerRepository,
    NominatimGeocoder,
)
from vigia.jobs import DurationRecalcJob, RegeocodeJob


@dataclass
class VigiaContainer:
    """Container exposing the service dependencies."""

    event_repository: MongoEventRepository
    marker_repository: MongoTrackingMarkerRepository
    geocoder: Geocoder
    geocode_cache: GeocodeCache
    reconciler: EventReconciler
    query_service: EventQueryService
    stats: StatsAggregator
    backfill: BackfillCoordinator
    regeocode_job: RegeocodeJob
    duration_recalc_job: DurationRecalcJob
    factory: MongoClientFactory | None = None

    def close(self) -> None:
        """Cancels pending backfills and releases network resources."""

        self.backfill.cancel()
        close_geocoder = getattr(self.geocoder, "close", None)
        if callable(close_geocoder):
            close_geocoder()
        if self.factory is not None:
            self.factory.close()


def build_container(
    factory: MongoClientFactory | None = None,
    *,
    clock: Clock = utc_now,
    geocoder: Geocoder | None = None,
) -> VigiaContainer:
    """Build the service container from environment settings."""

    factory = factory or MongoClientFactory()
    database = factory.get_database()

    max_duration = settings.get_max_duration_minutes()
    bounds = settings.get_region_bounds()
    zone = settings.get_timezone()

    event_repository = MongoEventRepository(database["events"])
    marker_repository = MongoTrackingMarkerRepository(database["app_settings"])
    cache_storage = MongoGeocodeCacheStorage(database["geocode_cache"], clock=clock)

    geocoder = geocoder or NominatimGeocoder(
        settings.get_geocode_url(),
        user_agent=settings.get_geocode_user_agent(),
        country_code=settings.get_country_code(),
        bounds=bounds,
        timeout=settings.get_geocode_timeout(),
        min_interval=settings.get_geocode_min_interval(),
    )
    geocode_cache = GeocodeCache(
        cache_storage,
        geocoder,
        bounds=bounds,
        country_code=settings.get_country_code(),
    )

    reconciler = EventReconciler(
        event_repository, clock=clock, max_duration_minutes=max_duration
    )
    query_service = EventQueryService(event_repository, zone=zone, clock=clock)
    stats = StatsAggregator(
        event_repository,
        marker_repository,
        zone=zone,
        clock=clock,
        bounds=bounds,
        max_duration_minutes=max_duration,
    )
    backfill = BackfillCoordinator(
        event_repository,
        geocode_cache,
        clock=clock,
        max_duration_minutes=max_duration,
        duration_limit=settings.get_backfill_duration_limit(),
        coordinate_limit=settings.get_backfill_coordinate_limit(),
        time_budget=settings.get_backfill_time_budget(),
    )

    return VigiaContainer(
        event_repository=event_repository,
        marker_repository=marker_repository,
        geocoder=geocoder,
        geocode_cache=geocode_cache,
        reconciler=reconciler,
        query_service=query_service,
        stats=stats,
        backfill=backfill,
        regeocode_job=RegeocodeJob(event_repository, geocode_cache),
        duration_recalc_job=DurationRecalcJob(
            event_repository, backfill, max_duration_minutes=max_duration
        ),
        factory=factory,
    )


__all__ = ["VigiaContainer", "build_container"]
