"""Configuration objects for the beacon buffer."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from .errors import ConfigError

DEFAULT_SEND_INTERVAL = 20.0
DEFAULT_SEND_TIMEOUT = 30.0
DEFAULT_BUFFER_KEY = "beaconBuffer"
DEFAULT_DATA_KEY = "logs"
DEFAULT_MAX_BUFFER_SIZE = 50 * 1024
CONTENT_TYPE_JSON = "application/json; charset=UTF-8"


@dataclass(frozen=True)
class Settings:
    endpoint_url: str
    send_interval: float = DEFAULT_SEND_INTERVAL
    headers: Dict[str, str] = field(default_factory=dict)
    buffer_key: str = DEFAULT_BUFFER_KEY
    data_key: str = DEFAULT_DATA_KEY
    auto_start: bool = False
    enable_send_lock: bool = True
    send_timeout: float = DEFAULT_SEND_TIMEOUT
    retry_on_failure: bool = False
    max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE
    enable_auto_send: bool = True


@dataclass(frozen=True)
class BufferConfig:
    """User-facing configuration; ``None`` means "use the default"."""

    endpoint_url: Optional[str] = None
    send_interval: Optional[float] = None
    headers: Optional[Dict[str, str]] = None
    buffer_key: Optional[str] = None
    data_key: Optional[str] = None
    auto_start: Optional[bool] = None
    enable_send_lock: Optional[bool] = None
    send_timeout: Optional[float] = None
    retry_on_failure: Optional[bool] = None
    max_buffer_size: Optional[int] = None
    enable_auto_send: Optional[bool] = None
    storage_path: Optional[str] = None

    @classmethod
    def from_env(cls, prefix: str = "BEACON_") -> "BufferConfig":
        env = os.environ

        def flag(name: str) -> Optional[bool]:
            raw = env.get(prefix + name)
            if raw is None or not raw.strip():
                return None
            return raw.strip().lower() in ("1", "true", "yes", "on")

        def number(name: str, cast=float):
            raw = env.get(prefix + name)
            if raw is None or not raw.strip():
                return None
            try:
                return cast(raw)
            except ValueError as exc:
                raise ConfigError(f"{prefix}{name} must be numeric, got {raw!r}") from exc

        headers: Optional[Dict[str, str]] = None
        raw_headers = env.get(prefix + "HEADERS")
        if raw_headers:
            headers = {}
            for pair in raw_headers.split(","):
                if not pair.strip():
                    continue
                key, sep, value = pair.partition("=")
                if not sep or not key.strip():
                    raise ConfigError(f"{prefix}HEADERS entries must look like key=value, got {pair!r}")
                headers[key.strip()] = value.strip()

        return cls(
            endpoint_url=env.get(prefix + "ENDPOINT_URL"),
            send_interval=number("SEND_INTERVAL"),
            headers=headers,
            buffer_key=env.get(prefix + "BUFFER_KEY") or None,
            data_key=env.get(prefix + "DATA_KEY") or None,
            auto_start=flag("AUTO_START"),
            enable_send_lock=flag("ENABLE_SEND_LOCK"),
            send_timeout=number("SEND_TIMEOUT"),
            retry_on_failure=flag("RETRY_ON_FAILURE"),
            max_buffer_size=number("MAX_BUFFER_SIZE", int),
            enable_auto_send=flag("ENABLE_AUTO_SEND"),
            storage_path=env.get(prefix + "STORAGE_PATH") or None,
        )


def resolve_settings(config: BufferConfig) -> Settings:
    """Validate ``config`` and fill in defaults.

    Falsy values fall back to the defaults (a zero interval or timeout is
    treated as unset); the two flags that default to on only turn off when
    explicitly ``False``.
    """
    if config is None or not config.endpoint_url:
        raise ConfigError("endpoint_url is required in configuration")
    return Settings(
        endpoint_url=config.endpoint_url,
        send_interval=config.send_interval or DEFAULT_SEND_INTERVAL,
        headers=dict(config.headers or {}),
        buffer_key=config.buffer_key or DEFAULT_BUFFER_KEY,
        data_key=config.data_key or DEFAULT_DATA_KEY,
        auto_start=bool(config.auto_start),
        enable_send_lock=config.enable_send_lock is not False,
        send_timeout=config.send_timeout or DEFAULT_SEND_TIMEOUT,
        retry_on_failure=bool(config.retry_on_failure),
        max_buffer_size=config.max_buffer_size or DEFAULT_MAX_BUFFER_SIZE,
        enable_auto_send=config.enable_auto_send is not False,
    )


__all__ = [
    "BufferConfig",
    "CONTENT_TYPE_JSON",
    "DEFAULT_BUFFER_KEY",
    "DEFAULT_DATA_KEY",
    "DEFAULT_MAX_BUFFER_SIZE",
    "DEFAULT_SEND_INTERVAL",
    "DEFAULT_SEND_TIMEOUT",
    "Settings",
    "resolve_settings",
]
