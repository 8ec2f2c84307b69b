"""Error taxonomy for the beacon buffer."""

from __future__ import annotations


class BeaconBufferError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(BeaconBufferError, ValueError):
    """Raised at construction time when the configuration is unusable."""


class StorageError(BeaconBufferError):
    """Raised by storage backends when the key-value store fails."""


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


class TransportRejected(BeaconBufferError):
    """The delivery primitive refused (or failed to accept) a payload."""

    def __init__(self, url: str, record_count: int) -> None:
        self.url = url
        self.record_count = record_count
        super().__init__(f"Transport rejected {record_count} record(s) for {url}")


class SendTimeout(BeaconBufferError):
    """A send held the lock longer than the configured timeout."""

    def __init__(self, timeout: float, record_count: int) -> None:
        self.timeout = timeout
        self.record_count = record_count
        super().__init__(f"Send timeout after {timeout}s with {record_count} record(s) in flight")


__all__ = [
    "BeaconBufferError",
    "ConfigError",
    "SendTimeout",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "TransportRejected",
]
