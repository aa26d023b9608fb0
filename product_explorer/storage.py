"""Durable key-value cells.

Provides:
- KeyValueStore: key -> string store interface (MemoryStore, JsonFileStore)
- PersistentValue: a typed value loaded once from a store and written back on every change

Persistence is advisory: store failures are logged and the in-memory value wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageError(Exception):
    """Raised by a KeyValueStore when it cannot read or write."""


class KeyValueStore:
    """Interface for durable key -> string stores."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore(KeyValueStore):
    """All keys live in one JSON object on disk.

    Writes go to a temp file in the same directory and replace the original,
    so a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError, RecursionError) as e:
            raise StorageError(f"cannot read {self.path}: {e}") from e
        if not isinstance(raw, dict):
            raise StorageError(f"{self.path} does not hold a JSON object")
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageError:
            # Unreadable file: start over rather than refuse every write.
            logger.warning("Overwriting unreadable store %s", self.path)
            data = {}
        data[key] = value
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".store-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"cannot write {self.path}: {e}") from e


class PersistentValue(Generic[T]):
    """A value mirrored to one key of a KeyValueStore.

    Loaded once on construction, falling back to `default` when the key is
    missing, the stored text does not decode, or the store is unavailable.
    Every change is written back immediately; write failures are logged and
    swallowed.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        default: T,
        encode: Callable[[T], str] = json.dumps,
        decode: Callable[[str], Any] = json.loads,
    ) -> None:
        self.store = store
        self.key = key
        self.default = default
        self._encode = encode
        self._decode = decode
        self._value: T = self.load()

    def load(self) -> T:
        try:
            raw = self.store.get(self.key)
        except StorageError as e:
            logger.warning("Store unavailable for %r, using default: %s", self.key, e)
            return self.default
        if raw is None:
            return self.default
        try:
            return self._decode(raw)
        except Exception as e:
            # Any decode failure counts as absence.
            logger.warning("Discarding undecodable value for %r: %s", self.key, e)
            return self.default

    def save(self) -> bool:
        """Write the current value; returns False when the write did not land."""
        try:
            self.store.set(self.key, self._encode(self._value))
        except (StorageError, ValueError, TypeError) as e:
            logger.warning("Failed to persist %r: %s", self.key, e)
            return False
        return True

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self.save()

    def update(self, fn: Callable[[T], T]) -> T:
        """Apply `fn` to the latest value and persist the result."""
        self.set(fn(self._value))
        return self._value
