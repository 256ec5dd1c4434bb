"""Configurações compartilhadas carregadas a partir de variáveis de ambiente."""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

from vigia.application.duration import DEFAULT_MAX_DURATION_MINUTES, effective_max
from vigia.domain import CZECHIA_BOUNDS, GeoBounds

load_dotenv()

log = logging.getLogger(__name__)

_DEFAULT_API_BIND_HOST = "0.0.0.0"
_DEFAULT_API_PORT = 8000
_DEFAULT_TIMEZONE = "Europe/Prague"
_DEFAULT_GEOCODE_URL = "https://nominatim.openstreetmap.org/search"
_DEFAULT_GEOCODE_USER_AGENT = "vigia/1.0 (contact: missing)"


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        log.warning("Valor inválido em %s; usando %s", name, default)
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        log.warning("Valor inválido em %s; usando %s", name, default)
        return default


@lru_cache(maxsize=None)
def get_api_port() -> int:
    """Retorna a porta configurada para expor a API."""

    return _env_int("VIGIA_API_PORT", _env_int("PORT", _DEFAULT_API_PORT))


@lru_cache(maxsize=None)
def get_api_bind_host() -> str:
    """Retorna o host utilizado pelo Uvicorn para escutar conexões."""

    return os.getenv("VIGIA_API_BIND_HOST", _DEFAULT_API_BIND_HOST)


@lru_cache(maxsize=None)
def get_api_key() -> str:
    """Chave exigida na ingestão e nas rotas de manutenção de coordenadas."""

    return os.getenv("VIGIA_API_KEY", "")


@lru_cache(maxsize=None)
def get_admin_password() -> str:
    """Senha exigida no recálculo administrativo de durações."""

    return os.getenv("VIGIA_ADMIN_PASSWORD", "")


@lru_cache(maxsize=None)
def get_max_duration_minutes() -> int:
    """Duração máxima plausível, nunca abaixo de uma hora."""

    return effective_max(_env_int("DURATION_MAX_MINUTES", DEFAULT_MAX_DURATION_MINUTES))


@lru_cache(maxsize=None)
def get_timezone() -> ZoneInfo:
    """Fuso do calendário local da região de operação."""

    return ZoneInfo(os.getenv("VIGIA_TIMEZONE", _DEFAULT_TIMEZONE))


@lru_cache(maxsize=None)
def get_region_bounds() -> GeoBounds:
    """Retângulo válido de coordenadas da região de operação."""

    raw = os.getenv("VIGIA_REGION_BOUNDS")
    if not raw:
        return CZECHIA_BOUNDS
    try:
        return GeoBounds.from_string(raw)
    except ValueError:
        log.warning("VIGIA_REGION_BOUNDS inválido (%r); usando padrão", raw)
        return CZECHIA_BOUNDS


@lru_cache(maxsize=None)
def get_country_code() -> str:
    return os.getenv("VIGIA_COUNTRY_CODE", "cz").lower()


@lru_cache(maxsize=None)
def get_geocode_url() -> str:
    return os.getenv("GEOCODE_URL", _DEFAULT_GEOCODE_URL)


@lru_cache(maxsize=None)
def get_geocode_user_agent() -> str:
    return os.getenv("GEOCODE_USER_AGENT", _DEFAULT_GEOCODE_USER_AGENT)


@lru_cache(maxsize=None)
def get_geocode_min_interval() -> float:
    """Intervalo mínimo, em segundos, entre duas chamadas ao geocodificador."""

    return max(0.0, _env_float("GEOCODE_MIN_INTERVAL_SECONDS", 1.0))


@lru_cache(maxsize=None)
def get_geocode_timeout() -> float:
    return _env_float("GEOCODE_TIMEOUT_SECONDS", 10.0)


@lru_cache(maxsize=None)
def get_backfill_duration_limit() -> int:
    return max(0, _env_int("BACKFILL_DURATION_LIMIT", 80))


@lru_cache(maxsize=None)
def get_backfill_coordinate_limit() -> int:
    return max(0, _env_int("BACKFILL_COORDINATE_LIMIT", 8))


@lru_cache(maxsize=None)
def get_backfill_time_budget() -> float:
    """Tempo máximo, em segundos, de uma rodada de preenchimento de coordenadas."""

    return max(0.0, _env_float("BACKFILL_TIME_BUDGET_SECONDS", 20.0))


__all__ = [
    "get_admin_password",
    "get_api_bind_host",
    "get_api_key",
    "get_api_port",
    "get_backfill_coordinate_limit",
    "get_backfill_duration_limit",
    "get_backfill_time_budget",
    "get_country_code",
    "get_geocode_min_interval",
    "get_geocode_timeout",
    "get_geocode_url",
    "get_geocode_user_agent",
    "get_max_duration_minutes",
    "get_region_bounds",
    "get_timezone",
]
