"""Lifecycle signals and the binder that turns them into sends."""

from __future__ import annotations

import atexit
import logging
from typing import Callable, Optional

from .timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)


class LifecycleSource:
    """Emits a single "about to disappear" signal."""

    def subscribe(self, callback: Callable[[], object]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def unsubscribe(self, callback: Callable[[], object]) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class ProcessExitSignal(LifecycleSource):
    """Fires at interpreter shutdown."""

    def subscribe(self, callback: Callable[[], object]) -> None:
        atexit.register(callback)

    def unsubscribe(self, callback: Callable[[], object]) -> None:
        atexit.unregister(callback)


class LifecycleBinder:
    """Drives ``send_now`` from a repeating timer and the lifecycle signal.

    Every trigger calls the same ``send_now`` a caller would, so the send
    lock applies to all of them.
    """

    def __init__(
        self,
        send_now: Callable[[], bool],
        interval: float,
        timers: TimerService,
        lifecycle: LifecycleSource,
    ) -> None:
        self._send_now = send_now
        self._interval = interval
        self._timers = timers
        self._lifecycle = lifecycle
        self._interval_handle: Optional[TimerHandle] = None
        self._running = False

    def start(self) -> None:
        if self._running:
            logger.warning("Beacon buffer already started; ignoring start()")
            return
        self._lifecycle.subscribe(self._send_now)
        if self._interval_handle is not None:
            self._timers.cancel(self._interval_handle)
        self._interval_handle = self._timers.set_repeating(self._interval, self._send_now)
        self._send_now()
        self._running = True

    def stop(self) -> None:
        if not self._running:
            logger.warning("Beacon buffer not started; ignoring stop()")
            return
        self._lifecycle.unsubscribe(self._send_now)
        if self._interval_handle is not None:
            self._timers.cancel(self._interval_handle)
            self._interval_handle = None
        self._running = False

    def is_running(self) -> bool:
        return self._running


__all__ = ["LifecycleBinder", "LifecycleSource", "ProcessExitSignal"]
