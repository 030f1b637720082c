"""
JSON File Storage Implementation

DESIGN DECISION: Plain JSON files in a local data directory because:
1. The ledger is small (a few hundred evenings at most)
2. Users can open, copy and back up the files themselves
3. No database setup required

One file per store. Every save writes the whole blob to a temporary
file and atomically replaces the old one, so a crash mid-write leaves
the previous version intact. Transient OS errors are retried.
"""

import json
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import TypeAdapter, ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from kegelbuch.audit import get_logger
from kegelbuch.config import StorageSettings, get_settings
from kegelbuch.models.ledger import Configuration, Evening
from kegelbuch.services.storage.interface import (
    LedgerStorageInterface,
    StorageWriteError,
)


_EVENINGS_ADAPTER = TypeAdapter(list[Evening])
_NAMES_ADAPTER = TypeAdapter(list[str])


class JsonFileStorage(LedgerStorageInterface):
    """
    Local JSON file implementation of ledger storage.

    Files are created on first save; the data directory is created
    on demand.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        settings: Optional[StorageSettings] = None,
    ):
        self._settings = settings or get_settings().storage
        self._data_dir = Path(data_dir) if data_dir is not None else self._settings.data_dir
        self._logger = get_logger("kegelbuch.storage")

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def configuration_path(self) -> Path:
        return self._data_dir / self._settings.configuration_file

    @property
    def evenings_path(self) -> Path:
        return self._data_dir / self._settings.evenings_file

    @property
    def saved_players_path(self) -> Path:
        return self._data_dir / self._settings.saved_players_file

    # -------------------------------------------------------------------------
    # Low-level helpers
    # -------------------------------------------------------------------------

    def _read_json(self, path: Path) -> Optional[Any]:
        """Read a JSON file; None if missing or unreadable."""
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            self._logger.error("storage_read_failed", path=str(path), error=str(e))
            return None

    def _write_json(self, path: Path, obj: Any) -> None:
        """Write a JSON file atomically, retrying transient OS errors."""
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._settings.write_attempts),
                wait=wait_exponential(multiplier=0.05, max=0.5),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._data_dir.mkdir(parents=True, exist_ok=True)
                    tmp = path.with_suffix(path.suffix + ".tmp")
                    try:
                        with open(tmp, "w", encoding="utf-8") as f:
                            json.dump(obj, f, ensure_ascii=False, indent=2)
                        tmp.replace(path)
                    except BaseException:
                        tmp.unlink(missing_ok=True)
                        raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageWriteError(f"Could not write {path.name}: {e}") from e

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def has_configuration(self) -> bool:
        return self.configuration_path.exists()

    def load_configuration(self, default: Configuration) -> Configuration:
        data = self._read_json(self.configuration_path)
        if data is None:
            return default
        try:
            return Configuration.model_validate(data)
        except ValidationError as e:
            self._logger.error(
                "storage_invalid_configuration",
                path=str(self.configuration_path),
                error_count=e.error_count(),
            )
            return default

    def save_configuration(self, configuration: Configuration) -> None:
        self._write_json(self.configuration_path, configuration.to_document())

    # -------------------------------------------------------------------------
    # Evenings
    # -------------------------------------------------------------------------

    def load_evenings(self) -> list[Evening]:
        data = self._read_json(self.evenings_path)
        if data is None:
            return []
        try:
            return _EVENINGS_ADAPTER.validate_python(data)
        except ValidationError as e:
            self._logger.error(
                "storage_invalid_evenings",
                path=str(self.evenings_path),
                error_count=e.error_count(),
            )
            return []

    def save_evenings(self, evenings: Sequence[Evening]) -> None:
        self._write_json(self.evenings_path, [e.to_document() for e in evenings])

    # -------------------------------------------------------------------------
    # Saved players
    # -------------------------------------------------------------------------

    def load_saved_players(self) -> list[str]:
        data = self._read_json(self.saved_players_path)
        if data is None:
            return []
        try:
            return _NAMES_ADAPTER.validate_python(data)
        except ValidationError as e:
            self._logger.error(
                "storage_invalid_saved_players",
                path=str(self.saved_players_path),
                error_count=e.error_count(),
            )
            return []

    def save_saved_players(self, names: Sequence[str]) -> None:
        self._write_json(self.saved_players_path, list(names))

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def clear_all(self) -> None:
        for path in (self.configuration_path, self.evenings_path, self.saved_players_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise StorageWriteError(f"Could not remove {path.name}: {e}") from e
