"""Send coordination: single in-flight send, watchdog, drain and retry."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .buffer import PersistentQueue
from .config import CONTENT_TYPE_JSON, Settings
from .envelope import build_envelope, encode_envelope
from .errors import SendTimeout, TransportRejected
from .timers import TimerHandle, TimerService
from .transport import Transport

logger = logging.getLogger(__name__)


class SendState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"


@dataclass(eq=False)
class _InFlight:
    snapshot: List[Dict[str, Any]]
    watchdog: Optional[TimerHandle] = field(default=None)


class SendCoordinator:
    """Ships the buffer to the collector, at most one attempt at a time.

    With the send lock enabled a call first claims the SENDING state together
    with a private in-flight token (the snapshot plus its watchdog). Only the
    holder of the current token may drain or release; the watchdog releases
    the lock without draining if the token is still current when it fires.
    Records appended after the snapshot stay in the buffer because draining
    removes ``len(snapshot)`` records from the head, not the records
    themselves.
    """

    def __init__(
        self,
        settings: Settings,
        queue: PersistentQueue,
        transport: Transport,
        timers: TimerService,
    ) -> None:
        self._settings = settings
        self._queue = queue
        self._transport = transport
        self._timers = timers
        self._state = SendState.IDLE
        self._in_flight: Optional[_InFlight] = None
        self._state_lock = threading.Lock()

    @property
    def state(self) -> SendState:
        return self._state

    @property
    def snapshot(self) -> Optional[List[Dict[str, Any]]]:
        in_flight = self._in_flight
        return list(in_flight.snapshot) if in_flight is not None else None

    def is_sending(self) -> bool:
        return self._state is SendState.SENDING

    def send_now(self) -> bool:
        attempts = 2 if self._settings.retry_on_failure else 1
        for attempt in range(1, attempts + 1):
            try:
                return self._attempt()
            except TransportRejected as exc:
                if attempt < attempts:
                    logger.warning("%s; retrying", exc)
                else:
                    logger.error("%s", exc)
        return False

    def _attempt(self) -> bool:
        in_flight: Optional[_InFlight] = None
        if self._settings.enable_send_lock:
            in_flight = self._acquire()
            if in_flight is None:
                return False
            snapshot = in_flight.snapshot
        else:
            snapshot = self._queue.read()
            if not snapshot:
                return False

        try:
            envelope = build_envelope(self._settings.headers, self._settings.data_key, snapshot)
            payload = encode_envelope(envelope)
            url = self._settings.endpoint_url
            try:
                accepted = self._transport.send_best_effort(url, payload, CONTENT_TYPE_JSON)
            except Exception as exc:
                logger.error("Transport raised while sending to %s: %s", url, exc)
                accepted = False
            if not accepted:
                raise TransportRejected(url, len(snapshot))

            if in_flight is not None and not self._holds(in_flight):
                logger.warning(
                    "Send accepted after the watchdog released the lock; %d record(s) kept for a later send",
                    len(snapshot),
                )
                return True
            remaining = self._queue.drain_by_count(len(snapshot))
            logger.debug("Sent %d record(s) to %s; %d remaining", len(snapshot), url, remaining)
            return True
        finally:
            if in_flight is not None:
                self._release(in_flight)

    def _acquire(self) -> Optional[_InFlight]:
        # The snapshot is taken under the state lock so no other send can
        # drain between the claim and the read.
        with self._state_lock:
            if self._state is SendState.SENDING:
                return None
            snapshot = self._queue.read()
            if not snapshot:
                return None
            in_flight = _InFlight(snapshot=snapshot)
            self._state = SendState.SENDING
            self._in_flight = in_flight
        in_flight.watchdog = self._timers.set_once(self._settings.send_timeout, lambda: self._expire(in_flight))
        return in_flight

    def _holds(self, in_flight: _InFlight) -> bool:
        with self._state_lock:
            return self._in_flight is in_flight

    def _release(self, in_flight: _InFlight) -> None:
        if in_flight.watchdog is not None:
            self._timers.cancel(in_flight.watchdog)
            in_flight.watchdog = None
        with self._state_lock:
            if self._in_flight is in_flight:
                self._in_flight = None
                self._state = SendState.IDLE

    def _expire(self, in_flight: _InFlight) -> None:
        with self._state_lock:
            if self._in_flight is not in_flight:
                return
            self._in_flight = None
            self._state = SendState.IDLE
        logger.error("%s", SendTimeout(self._settings.send_timeout, len(in_flight.snapshot)))


__all__ = ["SendCoordinator", "SendState"]
