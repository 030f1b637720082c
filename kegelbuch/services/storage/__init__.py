"""
Storage Services Package

Provides the abstract storage interface and concrete implementations.
JSON files are the default backend; the in-memory backend serves tests
and throwaway sessions.
"""

from kegelbuch.services.storage.interface import (
    LedgerStorageInterface,
    ParseError,
    StorageError,
    StorageWriteError,
)
from kegelbuch.services.storage.json_file import JsonFileStorage
from kegelbuch.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "ParseError",
    "StorageError",
    "StorageWriteError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
