"""Public facade of the beacon buffer."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, List, Mapping, Optional

from .buffer import PersistentQueue
from .config import BufferConfig, Settings, resolve_settings
from .coordinator import SendCoordinator
from .lifecycle import LifecycleBinder, LifecycleSource, ProcessExitSignal
from .policy import AutoFlushPolicy
from .storage import FileStorage, MemoryStorage, Storage
from .timers import ThreadingTimerService, TimerService
from .transport import HttpTransport, Transport

logger = logging.getLogger(__name__)


class BeaconBuffer:
    def __init__(
        self,
        config: BufferConfig,
        *,
        storage: Optional[Storage] = None,
        transport: Optional[Transport] = None,
        timers: Optional[TimerService] = None,
        lifecycle: Optional[LifecycleSource] = None,
    ) -> None:
        self._settings = resolve_settings(config)
        if storage is None:
            storage = FileStorage(config.storage_path) if config.storage_path else MemoryStorage()
        self._owns_transport = transport is None
        self._transport = transport if transport is not None else HttpTransport()
        timers = timers if timers is not None else ThreadingTimerService()
        lifecycle = lifecycle if lifecycle is not None else ProcessExitSignal()

        self._queue = PersistentQueue(storage, self._settings.buffer_key)
        self._coordinator = SendCoordinator(self._settings, self._queue, self._transport, timers)
        self._policy = AutoFlushPolicy(self._settings, self._queue)
        self._binder = LifecycleBinder(self.send_now, self._settings.send_interval, timers, lifecycle)

        if self._settings.auto_start:
            self.start()

    def __enter__(self) -> "BeaconBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def add_log(self, record: Optional[Mapping[str, Any]]) -> None:
        if record is None:
            return
        if not self._queue.append(record):
            return
        if self._policy.should_flush(running=self._binder.is_running(), sending=self._coordinator.is_sending()):
            self.send_now()

    def get_buffer(self) -> List[Dict[str, Any]]:
        return self._queue.read()

    def clear_buffer(self) -> None:
        self._queue.clear()

    def send_now(self) -> bool:
        return self._coordinator.send_now()

    def start(self) -> None:
        self._binder.start()

    def stop(self) -> None:
        self._binder.stop()

    def is_started(self) -> bool:
        return self._binder.is_running()

    def is_sending(self) -> bool:
        return self._coordinator.is_sending()

    def get_config(self) -> Settings:
        return dataclasses.replace(self._settings, headers=dict(self._settings.headers))

    def close(self) -> None:
        if self._binder.is_running():
            self.stop()
        if self._owns_transport:
            self._transport.close()


__all__ = ["BeaconBuffer"]
