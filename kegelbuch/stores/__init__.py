"""
Stores Package

In-memory owners of the ledger state. Each store mutates its data,
then persists the full blob through the storage interface and audits
the change.
"""

from kegelbuch.stores.base import PersistingStore
from kegelbuch.stores.configuration import (
    ConfigurationStore,
    DuplicateIdError,
    InvalidLabelError,
)
from kegelbuch.stores.evenings import EveningRecordStore
from kegelbuch.stores.roster import SavedPlayerRoster

__all__ = [
    "ConfigurationStore",
    "DuplicateIdError",
    "EveningRecordStore",
    "InvalidLabelError",
    "PersistingStore",
    "SavedPlayerRoster",
]
