"""Services package."""

from kegelbuch.services.snapshot import SnapshotService, parse_snapshot
from kegelbuch.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    LedgerStorageInterface,
    ParseError,
    StorageError,
    StorageWriteError,
)

__all__ = [
    # Snapshot
    "SnapshotService",
    "parse_snapshot",
    # Storage
    "InMemoryStorage",
    "JsonFileStorage",
    "LedgerStorageInterface",
    "ParseError",
    "StorageError",
    "StorageWriteError",
]
