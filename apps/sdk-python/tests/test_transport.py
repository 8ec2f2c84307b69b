from __future__ import annotations

import logging
from typing import List

import httpx

from beacon_buffer.config import CONTENT_TYPE_JSON
from beacon_buffer.transport import HttpTransport


def test_accepted_payload_is_posted() -> None:
    received: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(request)
        return httpx.Response(204)

    transport = HttpTransport(transport=httpx.MockTransport(handler))
    assert transport.send_best_effort("https://c.example.com/beacon", b'{"logs":[]}', CONTENT_TYPE_JSON) is True
    transport.close()

    assert len(received) == 1
    request = received[0]
    assert request.method == "POST"
    assert request.content == b'{"logs":[]}'
    assert request.headers["Content-Type"] == CONTENT_TYPE_JSON
    assert request.headers["User-Agent"].startswith("beacon-buffer-python")


def test_oversized_payload_refused() -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(204)

    transport = HttpTransport(max_payload_bytes=10, transport=httpx.MockTransport(handler))
    assert transport.send_best_effort("https://c.example.com", b"x" * 11, CONTENT_TYPE_JSON) is False
    transport.close()
    assert calls["count"] == 0


def test_closed_transport_refuses() -> None:
    transport = HttpTransport(transport=httpx.MockTransport(lambda request: httpx.Response(204)))
    transport.close()
    transport.close()
    assert transport.send_best_effort("https://c.example.com", b"{}", CONTENT_TYPE_JSON) is False


def test_delivery_failure_is_logged_after_acceptance(caplog) -> None:
    transport = HttpTransport(transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")))
    with caplog.at_level(logging.ERROR):
        assert transport.send_best_effort("https://c.example.com", b"{}", CONTENT_TYPE_JSON) is True
        transport.close()
    assert "delivery" in caplog.text
