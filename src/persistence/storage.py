"""Key-value storage backends for content, cart and session records.

Reads are synchronous and never raise for a missing key.  Writes are
best-effort: they raise ``StorageError`` (or ``StorageQuotaExceeded``) and
leave it to the caller to decide what a failed write means.
"""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from vitrine.shared.errors import StorageError, StorageQuotaExceeded

logger = logging.getLogger(__name__)

CONTENT_KEY = "site_content"
CONTENT_BACKUP_KEY = "site_content_backup"
CART_KEY = "site_cart"
SESSION_KEY = "admin_session"

DEFAULT_QUOTA_BYTES = 5_000_000


class KeyValueStorage(ABC):
    """String-valued storage addressed by well-known keys."""

    durable: bool = True

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``.  Removing an absent key is not an error."""

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


def _check_quota(key: str, value: str, others: int, quota: int | None) -> None:
    required = others + len(value.encode("utf-8"))
    if quota is not None and required > quota:
        raise StorageQuotaExceeded(key, required, quota)


class MemoryStorage(KeyValueStorage):
    """In-process storage.  Lives as long as the object does."""

    def __init__(self, quota_bytes: int | None = None, durable: bool = False) -> None:
        self._items: dict[str, str] = {}
        self.quota_bytes = quota_bytes
        self.durable = durable

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        others = sum(len(v.encode("utf-8")) for k, v in self._items.items() if k != key)
        _check_quota(key, value, others, self.quota_bytes)
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)


class JsonFileStorage(KeyValueStorage):
    """Durable storage keeping one ``<key>.json`` file per key.

    Writes go to a temporary file in the same directory and are moved into
    place, so a crash mid-write never leaves a truncated record behind.
    """

    durable = True

    def __init__(self, directory: Path, quota_bytes: int | None = DEFAULT_QUOTA_BYTES) -> None:
        self.directory = Path(directory)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def _used_bytes(self, exclude: str) -> int:
        if not self.directory.exists():
            return 0
        excluded = self._path(exclude)
        return sum(p.stat().st_size for p in self.directory.glob("*.json") if p != excluded)

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        _check_quota(key, value, self._used_bytes(key), self.quota_bytes)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Could not write {path}: {exc}") from exc

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Could not remove {path}: {exc}") from exc
