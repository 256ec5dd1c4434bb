"""Migrations de bootstrap executadas na inicialização do serviço."""
from __future__ import annotations

import logging
from collections.abc import Callable

from pymongo.database import Database

from vigia import settings
from vigia.application import utc_now
from vigia.infrastructure import (
    MongoClientFactory,
    MongoEventRepository,
    MongoTrackingMarkerRepository,
    ensure_event_indexes,
    translate_store_errors,
)

Migration = Callable[[Database], None]

log = logging.getLogger(__name__)


def _ensure_event_indexes(database: Database) -> None:
    """Cria os índices necessários na coleção de ocorrências."""

    with translate_store_errors("ensure_event_indexes"):
        ensure_event_indexes(database["events"])


def _ensure_tracking_marker(database: Database) -> None:
    """Grava o marcador de início de rastreamento se ele ainda não existir."""

    marker = MongoTrackingMarkerRepository(database["app_settings"]).ensure(utc_now())
    log.info("Rastreamento de durações confiável desde %s", marker.isoformat())


def _normalize_legacy_events(database: Database) -> None:
    """Completa campos obrigatórios ausentes em documentos antigos."""

    collection = database["events"]
    now = utc_now()
    with translate_store_errors("normalize_legacy_events"):
        collection.update_many(
            {"is_closed": {"$exists": False}}, {"$set": {"is_closed": False}}
        )
        collection.update_many(
            {"last_seen_at": {"$exists": False}}, {"$set": {"last_seen_at": now}}
        )
        collection.update_many(
            {"first_seen_at": {"$exists": False}},
            [{"$set": {"first_seen_at": {"$ifNull": ["$created_at", now]}}}],
        )


def _clear_implausible_durations(database: Database) -> None:
    """Apaga durações acima do máximo plausível configurado."""

    repository = MongoEventRepository(database["events"])
    cleared = repository.clear_durations_above(settings.get_max_duration_minutes())
    if cleared:
        log.info("%d duração(ões) implausível(is) apagada(s)", cleared)


_MIGRATIONS: tuple[Migration, ...] = (
    _ensure_event_indexes,
    _ensure_tracking_marker,
    _normalize_legacy_events,
    _clear_implausible_durations,
)


def run(factory: MongoClientFactory | None = None) -> None:
    """Executa as migrations de bootstrap contra o banco configurado."""

    factory = factory or MongoClientFactory()
    database = factory.get_database()

    for migration in _MIGRATIONS:
        migration(database)


__all__ = ["run"]
