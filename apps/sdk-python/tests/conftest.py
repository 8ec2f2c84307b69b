from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import pytest

from beacon_buffer.buffer import PersistentQueue
from beacon_buffer.config import BufferConfig, resolve_settings
from beacon_buffer.coordinator import SendCoordinator
from beacon_buffer.lifecycle import LifecycleSource
from beacon_buffer.storage import MemoryStorage
from beacon_buffer.timers import TimerHandle, TimerService
from beacon_buffer.transport import Transport


class FakeTimer(TimerHandle):
    def __init__(self, due: float, interval: Optional[float], callback: Callable[[], object], seq: int) -> None:
        self.due = due
        self.interval = interval
        self.callback = callback
        self.seq = seq
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers(TimerService):
    """Virtual clock; callbacks only run inside ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: List[FakeTimer] = []

    def _add(self, seconds: float, interval: Optional[float], callback: Callable[[], object]) -> FakeTimer:
        timer = FakeTimer(self.now + seconds, interval, callback, len(self.timers))
        self.timers.append(timer)
        return timer

    def set_repeating(self, seconds: float, callback: Callable[[], object]) -> TimerHandle:
        return self._add(seconds, seconds, callback)

    def set_once(self, seconds: float, callback: Callable[[], object]) -> TimerHandle:
        return self._add(seconds, None, callback)

    def active(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.active() if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self.now = timer.due
            if timer.interval is None:
                timer.cancelled = True
            else:
                timer.due += timer.interval
            timer.callback()
        self.now = target


class FakeLifecycle(LifecycleSource):
    def __init__(self) -> None:
        self.hide_listeners: List[Callable[[], object]] = []
        self.show_listeners: List[Callable[[], object]] = []

    def subscribe(self, callback: Callable[[], object]) -> None:
        self.hide_listeners.append(callback)

    def unsubscribe(self, callback: Callable[[], object]) -> None:
        self.hide_listeners.remove(callback)

    def hide(self) -> None:
        for callback in list(self.hide_listeners):
            callback()

    def show(self) -> None:
        for callback in list(self.show_listeners):
            callback()


class RecordingTransport(Transport):
    def __init__(self, results: Optional[List[bool]] = None) -> None:
        self.results = list(results or [])
        self.calls: List[Dict[str, Any]] = []
        self.on_send: Optional[Callable[[], object]] = None
        self.closed = False

    def send_best_effort(self, url: str, payload: bytes, content_type: str) -> bool:
        self.calls.append({"url": url, "body": json.loads(payload), "content_type": content_type, "size": len(payload)})
        if self.on_send is not None:
            hook, self.on_send = self.on_send, None
            hook()
        return self.results.pop(0) if self.results else True

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def timers() -> FakeTimers:
    return FakeTimers()


@pytest.fixture()
def lifecycle() -> FakeLifecycle:
    return FakeLifecycle()


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def make_coordinator(storage: MemoryStorage, transport: RecordingTransport, timers: FakeTimers):
    def factory(**overrides: Any):
        settings = resolve_settings(BufferConfig(endpoint_url="https://collector.example.com/beacon", **overrides))
        queue = PersistentQueue(storage, settings.buffer_key)
        return SendCoordinator(settings, queue, transport, timers), queue

    return factory
