"""Persistent FIFO buffer of log records on top of a key-value store."""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from .errors import StorageError
from .storage import Storage

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PersistentQueue:
    """Stores the whole buffer as one JSON array under ``key``.

    Appends only ever happen at the tail, so a sender that remembers how many
    records it shipped can drop exactly that many from the head even if new
    records arrived in the meantime. The read-modify-write sequences are
    serialized with a lock because timer callbacks may run on other threads.
    """

    def __init__(
        self,
        storage: Storage,
        key: str,
        *,
        clock: Optional[Callable[[], str]] = None,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock or utc_timestamp
        self._lock = threading.RLock()

    def append(self, record: Mapping[str, Any]) -> bool:
        """Append ``record`` stamped with the current time; returns whether it was persisted."""
        entry = dict(record)
        entry["timestamp"] = self._clock()
        with self._lock:
            buffer = self.read()
            buffer.append(entry)
            return self._write(buffer)

    def read(self) -> List[Dict[str, Any]]:
        with self._lock:
            try:
                raw = self._storage.get(self._key)
            except StorageError as exc:
                logger.error("Failed to read buffer %s: %s", self._key, exc)
                return []
            if not raw:
                return []
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as exc:
                logger.error("Discarding corrupt buffer %s: %s", self._key, exc)
                return []
            if not isinstance(data, list):
                logger.error("Discarding buffer %s: expected a list, got %s", self._key, type(data).__name__)
                return []
            return data

    def clear(self) -> None:
        with self._lock:
            try:
                self._storage.remove(self._key)
            except StorageError as exc:
                logger.error("Failed to clear buffer %s: %s", self._key, exc)

    def drain_by_count(self, count: int) -> int:
        """Remove the first ``count`` records; returns how many remain."""
        with self._lock:
            remaining = self.read()[count:]
            if remaining:
                self._write(remaining)
            else:
                self.clear()
            return len(remaining)

    def __len__(self) -> int:
        return len(self.read())

    def _write(self, buffer: List[Dict[str, Any]]) -> bool:
        try:
            payload = json.dumps(buffer, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.error("Failed to serialize buffer %s: %s", self._key, exc)
            return False
        try:
            self._storage.set(self._key, payload)
        except StorageError as exc:
            logger.error("Failed to save buffer %s: %s", self._key, exc)
            return False
        return True


__all__ = ["PersistentQueue", "utc_timestamp"]
