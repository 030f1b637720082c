"""
In-Memory Storage Implementation

Used by the tests and for throwaway sessions (nothing touches the disk).

Blobs are kept as JSON strings, not as model objects, so a saved
evening never aliases the object the store keeps editing. This makes
the in-memory backend behave like a real one: what you load is what
was last saved.
"""

import json
from typing import Optional, Sequence

from pydantic import TypeAdapter

from kegelbuch.models.ledger import Configuration, Evening
from kegelbuch.services.storage.interface import (
    LedgerStorageInterface,
    StorageWriteError,
)


_EVENINGS_ADAPTER = TypeAdapter(list[Evening])
_NAMES_ADAPTER = TypeAdapter(list[str])


class InMemoryStorage(LedgerStorageInterface):
    """
    Dictionary-backed ledger storage.

    Set `fail_writes = True` to simulate a storage that rejects every
    write (quota exceeded, read-only medium).
    """

    def __init__(self):
        self._blobs: dict[str, str] = {}
        self.fail_writes = False
        self.write_count = 0

    def _put(self, key: str, obj) -> None:
        if self.fail_writes:
            raise StorageWriteError(f"Storage rejected write of {key}")
        self._blobs[key] = json.dumps(obj, ensure_ascii=False)
        self.write_count += 1

    def _get(self, key: str) -> Optional[object]:
        raw = self._blobs.get(key)
        return json.loads(raw) if raw is not None else None

    def has_configuration(self) -> bool:
        return "configuration" in self._blobs

    def load_configuration(self, default: Configuration) -> Configuration:
        data = self._get("configuration")
        return Configuration.model_validate(data) if data is not None else default

    def save_configuration(self, configuration: Configuration) -> None:
        self._put("configuration", configuration.to_document())

    def load_evenings(self) -> list[Evening]:
        data = self._get("evenings")
        return _EVENINGS_ADAPTER.validate_python(data) if data is not None else []

    def save_evenings(self, evenings: Sequence[Evening]) -> None:
        self._put("evenings", [e.to_document() for e in evenings])

    def load_saved_players(self) -> list[str]:
        data = self._get("saved_players")
        return _NAMES_ADAPTER.validate_python(data) if data is not None else []

    def save_saved_players(self, names: Sequence[str]) -> None:
        self._put("saved_players", list(names))

    def clear_all(self) -> None:
        if self.fail_writes:
            raise StorageWriteError("Storage rejected clear")
        self._blobs.clear()
