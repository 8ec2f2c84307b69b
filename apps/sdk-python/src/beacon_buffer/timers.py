"""Timer services used for periodic sends and the send watchdog."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class TimerHandle:
    def cancel(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class TimerService:
    def set_repeating(self, seconds: float, callback: Callable[[], object]) -> TimerHandle:  # pragma: no cover - interface
        raise NotImplementedError

    def set_once(self, seconds: float, callback: Callable[[], object]) -> TimerHandle:  # pragma: no cover - interface
        raise NotImplementedError

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancel()


def _guarded(callback: Callable[[], object]) -> Callable[[], None]:
    def run() -> None:
        try:
            callback()
        except Exception:
            logger.exception("Timer callback %r failed", callback)

    return run


class _RepeatingTimer(TimerHandle):
    def __init__(self, seconds: float, callback: Callable[[], object]) -> None:
        self._seconds = seconds
        self._callback = _guarded(callback)
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, name="beacon-interval", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self._seconds):
            self._callback()

    def cancel(self) -> None:
        self._stopped.set()


class _OnceTimer(TimerHandle):
    def __init__(self, seconds: float, callback: Callable[[], object]) -> None:
        self._timer = threading.Timer(seconds, _guarded(callback))
        self._timer.daemon = True
        self._timer.start()

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingTimerService(TimerService):
    """Runs callbacks on daemon threads."""

    def set_repeating(self, seconds: float, callback: Callable[[], object]) -> TimerHandle:
        return _RepeatingTimer(seconds, callback)

    def set_once(self, seconds: float, callback: Callable[[], object]) -> TimerHandle:
        return _OnceTimer(seconds, callback)


__all__ = ["ThreadingTimerService", "TimerHandle", "TimerService"]
