"""Best-effort delivery primitives."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAYLOAD_BYTES = 64 * 1024


class Transport:
    def send_best_effort(self, url: str, payload: bytes, content_type: str) -> bool:  # pragma: no cover - interface
        """Hand ``payload`` off for asynchronous delivery.

        ``True`` only means the payload was accepted; arrival is never confirmed.
        """
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover - optional override
        return None


class HttpTransport(Transport):
    """Beacon-style sender: queue the POST on a worker thread and return at once."""

    def __init__(
        self,
        *,
        timeout: float = 5.0,
        max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES,
        user_agent: str = "beacon-buffer-python/0.1.0",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="beacon-transport")
        self._max_payload_bytes = max_payload_bytes
        self._user_agent = user_agent
        self._closed = False

    def send_best_effort(self, url: str, payload: bytes, content_type: str) -> bool:
        if self._closed:
            logger.warning("Transport is closed; refusing payload for %s", url)
            return False
        if len(payload) > self._max_payload_bytes:
            logger.warning(
                "Payload of %d bytes exceeds the %d byte limit; refusing", len(payload), self._max_payload_bytes
            )
            return False
        try:
            self._executor.submit(self._deliver, url, payload, content_type)
        except RuntimeError:
            # Interpreter shutdown stops the worker before atexit hooks run.
            self._deliver(url, payload, content_type)
        return True

    def _deliver(self, url: str, payload: bytes, content_type: str) -> None:
        headers = {"Content-Type": content_type, "User-Agent": self._user_agent}
        try:
            response = self._client.post(url, content=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Beacon delivery to %s failed: %s", url, exc)
            return
        logger.debug("Delivered %d bytes to %s status=%s", len(payload), url, response.status_code)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True)
        self._client.close()


__all__ = ["DEFAULT_MAX_PAYLOAD_BYTES", "HttpTransport", "Transport"]
