"""Device-local key/value media.

A ``KeyValueStore`` is a synchronous, quota-limited string store. Back-ends
signal failure by raising ``StorageError`` from their private hooks; the
public methods catch it, log it and degrade to a no-op, so callers never see
a storage exception.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base error raised by key/value back-ends."""


class StorageUnavailableError(StorageError):
    """The medium cannot be read or written at all."""


class StorageQuotaExceededError(StorageError):
    """A write would push the medium past its quota."""


def _entry_size(key: str, value: str) -> int:
    return len(key) + len(value)


class KeyValueStore(ABC):
    """Never-raising facade over a string key/value medium."""

    def __init__(self, quota_chars: int | None = None) -> None:
        """Initialize the store.

        Args:
            quota_chars: Maximum total characters across all keys and values,
                or None for no limit.
        """
        self.quota_chars = quota_chars
        self._lock = Lock()

    def get(self, key: str) -> str | None:
        """Read the raw value stored under ``key``.

        Returns:
            The stored string, or None if absent or the medium failed.
        """
        with self._lock:
            try:
                return self._read(key)
            except StorageError as e:
                logger.warning("Storage read failed for key %s: %s", key, e)
                return None

    def set(self, key: str, value: str) -> bool:
        """Write ``value`` under ``key``.

        Returns:
            True if the value was written, False if the medium refused it.
        """
        with self._lock:
            try:
                self._check_quota(key, value)
                self._write(key, value)
                return True
            except StorageError as e:
                logger.warning("Storage write failed for key %s: %s", key, e)
                return False

    def remove(self, key: str) -> bool:
        """Delete ``key``. A missing key counts as removed.

        Returns:
            True unless the medium failed.
        """
        with self._lock:
            try:
                self._delete(key)
                return True
            except StorageError as e:
                logger.warning("Storage delete failed for key %s: %s", key, e)
                return False

    def keys(self) -> list[str]:
        """List stored keys; empty if the medium failed."""
        with self._lock:
            try:
                return self._keys()
            except StorageError as e:
                logger.warning("Storage key listing failed: %s", e)
                return []

    def _check_quota(self, key: str, value: str) -> None:
        if self.quota_chars is None:
            return
        used = self._used_chars()
        current = self._read(key)
        if current is not None:
            used -= _entry_size(key, current)
        if used + _entry_size(key, value) > self.quota_chars:
            raise StorageQuotaExceededError(
                f"writing {_entry_size(key, value)} chars exceeds quota of {self.quota_chars}"
            )

    def _used_chars(self) -> int:
        total = 0
        for key in self._keys():
            value = self._read(key)
            if value is not None:
                total += _entry_size(key, value)
        return total

    @abstractmethod
    def _read(self, key: str) -> str | None: ...

    @abstractmethod
    def _write(self, key: str, value: str) -> None: ...

    @abstractmethod
    def _delete(self, key: str) -> None: ...

    @abstractmethod
    def _keys(self) -> list[str]: ...


class InMemoryKeyValueStore(KeyValueStore):
    """Process-lifetime medium.

    Serves as the per-browser-session store and as the persistent store in
    tests and the ``memory`` backend.
    """

    def __init__(self, quota_chars: int | None = None) -> None:
        super().__init__(quota_chars)
        self._data: dict[str, str] = {}

    def _read(self, key: str) -> str | None:
        return self._data.get(key)

    def _write(self, key: str, value: str) -> None:
        self._data[key] = value

    def _delete(self, key: str) -> None:
        self._data.pop(key, None)

    def _keys(self) -> list[str]:
        return list(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """Persistent medium backed by a single JSON object on disk.

    Every operation reads the file so separate processes observe each other's
    writes (last write wins, no merge). Writes replace the file atomically.
    """

    def __init__(self, path: str | Path, quota_chars: int | None = None) -> None:
        super().__init__(quota_chars)
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as e:
            raise StorageUnavailableError(f"medium is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageUnavailableError(str(e)) from e

        try:
            data = json.loads(raw) if raw.strip() else {}
        except (ValueError, RecursionError) as e:
            raise StorageUnavailableError(f"medium is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise StorageUnavailableError("medium root is not an object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".kv-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageUnavailableError(str(e)) from e

    def _read(self, key: str) -> str | None:
        return self._load().get(key)

    def _write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def _delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def _keys(self) -> list[str]:
        return list(self._load())

    def _used_chars(self) -> int:
        return sum(_entry_size(k, v) for k, v in self._load().items())
