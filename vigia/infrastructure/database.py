"""Mongo database utilities."""
from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

from pymongo import MongoClient
from pymongo.errors import ConnectionFailure

from vigia.domain import StoreUnavailable


def get_env(name: str, default: str | None = None) -> str:
    value = os.getenv(name, default)
    if value is None:
        raise RuntimeError(f"Environment variable '{name}' is not set")
    return value


@dataclass
class MongoSettings:
    uri: str
    database: str
    timeout_ms: int = 5000

    @classmethod
    def from_env(cls) -> "MongoSettings":
        uri = os.getenv("MONGO_URI", "mongodb://localhost:27017")
        database = get_env("MONGO_DATABASE", "vigia")
        try:
            timeout_ms = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))
        except ValueError:
            timeout_ms = 5000
        return cls(uri=uri, database=database, timeout_ms=timeout_ms)


class MongoClientFactory:
    """Creates a single Mongo client per process and hands out the database."""

    def __init__(self, settings: MongoSettings | None = None) -> None:
        self._settings = settings or MongoSettings.from_env()
        self._client: MongoClient | None = None

    def create_client(self) -> MongoClient:
        if not self._client:
            self._client = MongoClient(
                self._settings.uri,
                tz_aware=True,
                serverSelectionTimeoutMS=self._settings.timeout_ms,
            )
        return self._client

    def get_database(self) -> Any:
        client = self.create_client()
        return client[self._settings.database]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Converts connectivity failures raised by pymongo into :class:`StoreUnavailable`."""

    try:
        yield
    except ConnectionFailure as exc:
        raise StoreUnavailable(f"store unavailable during {operation}: {exc}") from exc


__all__ = [
    "MongoClientFactory",
    "MongoSettings",
    "get_env",
    "translate_store_errors",
]
