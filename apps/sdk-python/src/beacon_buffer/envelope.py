"""Wire envelope shared by real sends and the size check."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Sequence


def build_envelope(headers: Mapping[str, Any], data_key: str, records: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    envelope: Dict[str, Any] = dict(headers)
    envelope[data_key] = list(records)
    return envelope


def encode_envelope(envelope: Dict[str, Any]) -> bytes:
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


__all__ = ["build_envelope", "encode_envelope"]
