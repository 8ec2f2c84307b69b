"""Client-side telemetry buffer with best-effort beacon delivery."""

from .client import BeaconBuffer
from .config import BufferConfig, Settings
from .errors import ConfigError

__all__ = ["BeaconBuffer", "BufferConfig", "ConfigError", "Settings"]
