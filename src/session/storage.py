"""Storage ports for persisted sessions (the console's ``localStorage``)."""

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path

from src.core.db import get_item, init_db, remove_item, set_item

logger = logging.getLogger(__name__)


class Storage(ABC):
    """String key/value storage that outlives a single run."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the value stored under key, or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete key. Missing keys are ignored."""


class MemoryStorage(Storage):
    """Process-local storage. Lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)


class SqliteStorage(Storage):
    """Durable storage in a SQLite file.

    Usage::

        storage = SqliteStorage.open("data/session.db")
        storage.set_item("token", "...")
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @classmethod
    def open(cls, path: str | Path) -> "SqliteStorage":
        logger.debug("Opening session storage at %s", path)
        return cls(init_db(path))

    def get_item(self, key: str) -> str | None:
        return get_item(self._conn, key)

    def set_item(self, key: str, value: str) -> None:
        set_item(self._conn, key, value)

    def remove_item(self, key: str) -> None:
        remove_item(self._conn, key)

    def close(self) -> None:
        self._conn.close()
