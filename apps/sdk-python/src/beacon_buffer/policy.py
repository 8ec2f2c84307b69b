"""Size-triggered eager flush policy."""

from __future__ import annotations

from .buffer import PersistentQueue
from .config import Settings
from .envelope import build_envelope, encode_envelope


class AutoFlushPolicy:
    def __init__(self, settings: Settings, queue: PersistentQueue) -> None:
        self._settings = settings
        self._queue = queue

    def buffer_size(self) -> int:
        """Byte size of the envelope a send would produce right now."""
        buffer = self._queue.read()
        if not buffer:
            return 0
        envelope = build_envelope(self._settings.headers, self._settings.data_key, buffer)
        return len(encode_envelope(envelope))

    def should_flush(self, *, running: bool, sending: bool) -> bool:
        if not self._settings.enable_auto_send or not running or sending:
            return False
        return self.buffer_size() >= self._settings.max_buffer_size


__all__ = ["AutoFlushPolicy"]
