"""Persistent stores for in-flight messages, with an in-memory implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Iterable, Optional

PERSISTENCE_ERROR = -2


class PersistenceType(IntEnum):
    """Kinds of persistence a client can be created with."""

    DEFAULT = 0
    NONE = 1
    USER = 2


class PersistenceError(Exception):
    """Raised when a persistence operation cannot be completed."""

    code = PERSISTENCE_ERROR


class Persistence(ABC):
    """Interface of a persistent data store keyed by string."""

    @abstractmethod
    def open(self, client_id: str, server_uri: str, context: Any = None) -> None:
        """Open the store for this client and server; no-op if already open."""

    @abstractmethod
    def close(self) -> None:
        """Close the store."""

    @abstractmethod
    def put(self, key: str, buffers: Iterable[bytes]) -> None:
        """Store the buffers under ``key``."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the data stored under ``key``."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove the data stored under ``key``."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return the keys in the store."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all persisted data."""

    @abstractmethod
    def contains_key(self, key: str) -> bool:
        """Return whether data has been persisted under ``key``."""


class MemoryPersistence(Persistence):
    """A store that keeps its data in a dictionary."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._is_open = False
        self.client_id: Optional[str] = None
        self.server_uri: Optional[str] = None
        self.context: Any = None

    def _require_open(self) -> None:
        if not self._is_open:
            raise PersistenceError("persistence store is not open")

    def open(self, client_id: str, server_uri: str, context: Any = None) -> None:
        if self._is_open:
            return
        self.client_id = client_id
        self.server_uri = server_uri
        self.context = context
        self._is_open = True

    def close(self) -> None:
        self._require_open()
        self._is_open = False

    def put(self, key: str, buffers: Iterable[bytes]) -> None:
        self._require_open()
        self._data[key] = b"".join(bytes(buffer) for buffer in buffers)

    def get(self, key: str) -> bytes:
        self._require_open()
        try:
            return self._data[key]
        except KeyError:
            raise PersistenceError(f"no data for key {key!r}") from None

    def remove(self, key: str) -> None:
        self._require_open()
        if self._data.pop(key, None) is None:
            raise PersistenceError(f"no data for key {key!r}")

    def keys(self) -> list[str]:
        self._require_open()
        return list(self._data)

    def clear(self) -> None:
        self._require_open()
        self._data.clear()

    def contains_key(self, key: str) -> bool:
        self._require_open()
        return key in self._data


__all__ = [
    "PERSISTENCE_ERROR",
    "MemoryPersistence",
    "Persistence",
    "PersistenceError",
    "PersistenceType",
]