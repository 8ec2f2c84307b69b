"""Key-value stores backing the persistent buffer."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Dict, Optional

from .errors import StorageReadError, StorageWriteError


class Storage:
    def get(self, key: str) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def remove(self, key: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class MemoryStorage(Storage):
    """Process-local store with an optional byte quota, like browser storage."""

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self._items: Dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._items.items() if k != key)
            if used + len(value.encode("utf-8")) > self._quota_bytes:
                raise StorageWriteError(f"Quota of {self._quota_bytes} bytes exceeded writing {key!r}")
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage(Storage):
    """Stores each key as ``<directory>/<key>.json`` so data survives restarts."""

    def __init__(self, directory: str) -> None:
        self._directory = Path(directory)
        self._lock = threading.Lock()
        self._directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        with self._lock:
            try:
                return path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return None
            except (OSError, UnicodeDecodeError) as exc:
                raise StorageReadError(f"Failed to read {path}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        with self._lock:
            try:
                tmp.write_text(value, encoding="utf-8")
                os.replace(tmp, path)
            except OSError as exc:
                raise StorageWriteError(f"Failed to write {path}: {exc}") from exc

    def remove(self, key: str) -> None:
        with self._lock:
            try:
                self._path(key).unlink(missing_ok=True)
            except OSError as exc:
                raise StorageWriteError(f"Failed to remove {self._path(key)}: {exc}") from exc


__all__ = ["FileStorage", "MemoryStorage", "Storage"]
