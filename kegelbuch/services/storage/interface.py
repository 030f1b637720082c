"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON files for another backend later
2. Use in-memory storage for testing
3. Keep the stores decoupled from where the bytes end up

The interface is intentionally simple. The ledger consists of three
independent blobs (configuration, evenings, saved players), and every
save is a full overwrite of one blob. There is no partial update and
no transaction across blobs.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from kegelbuch.models.ledger import Configuration, Evening


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Any storage implementation (JSON files, in-memory, ...)
    must implement these methods.

    Loads never raise: a missing or unreadable blob yields the default.
    Saves raise StorageWriteError; callers turn that into a result value.
    """

    @abstractmethod
    def load_configuration(self, default: Configuration) -> Configuration:
        """
        Load the persisted fee schedule.

        Args:
            default: Returned when nothing has been persisted yet

        Returns:
            The persisted configuration, or `default`
        """
        pass

    @abstractmethod
    def save_configuration(self, configuration: Configuration) -> None:
        """
        Persist the fee schedule (full overwrite).

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def load_evenings(self) -> list[Evening]:
        """Load all evening records; empty list if none persisted."""
        pass

    @abstractmethod
    def save_evenings(self, evenings: Sequence[Evening]) -> None:
        """
        Persist all evening records (full overwrite).

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def load_saved_players(self) -> list[str]:
        """Load the saved player names; empty list if none persisted."""
        pass

    @abstractmethod
    def save_saved_players(self, names: Sequence[str]) -> None:
        """
        Persist the saved player names (full overwrite).

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """
        Remove every persisted blob.

        Raises:
            StorageWriteError: If a blob could not be removed
        """
        pass

    @abstractmethod
    def has_configuration(self) -> bool:
        """Whether a configuration has ever been persisted (first-start check)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageWriteError(StorageError):
    """A persist failed (disk full, permission denied, ...)."""
    pass


class ParseError(StorageError):
    """A document is not valid serialized ledger data."""
    pass
