"""
Main Orchestrator for Kegelbuch

This module ties together all the components and owns the
application state:
- the fee schedule (ConfigurationStore)
- the evening records (EveningRecordStore)
- the saved player names (SavedPlayerRoster)

DESIGN DECISION: There is no global state. The UI creates one
KegelbuchApp (see create_app) and passes it around. Every store
holds a reference to the same storage backend and audit logger.

The orchestrator enforces the boundaries:
- Totals are computed on demand, never stored
- Storage and import failures come back as OperationResult values
- In-memory state stays valid when a write fails
"""

from datetime import date
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

from kegelbuch.audit import AuditLogger, configure_logging, get_logger
from kegelbuch.config import Settings, get_settings
from kegelbuch.defaults import create_default_configuration, merge_with_defaults
from kegelbuch.models.audit import AuditEvent, AuditEventType
from kegelbuch.models.ledger import (
    Configuration,
    Evening,
    OperationResult,
    Snapshot,
)
from kegelbuch.services.snapshot import Document, SnapshotService
from kegelbuch.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    LedgerStorageInterface,
    StorageError,
)
from kegelbuch.settlement import (
    EveningSettlement,
    compute_total,
    settle_evening,
)
from kegelbuch.stores import (
    ConfigurationStore,
    DuplicateIdError,
    EveningRecordStore,
    InvalidLabelError,
    SavedPlayerRoster,
)
from kegelbuch.stores.evenings import EveningRef


class KegelbuchApp:
    """
    The application-state object.

    Flow for every user edit:
    1. UI calls a store method (or a convenience method here)
    2. The store mutates in memory, audits, persists the full blob
    3. UI re-renders; totals come from settle()
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        defaults: Optional[Configuration] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._defaults = defaults or create_default_configuration()
        self._logger = get_logger("kegelbuch.app")

        self.configuration_store = ConfigurationStore(
            storage,
            self._defaults.model_copy(deep=True),
            audit_logger=self._audit_logger,
        )
        self.evening_store = EveningRecordStore(storage, audit_logger=self._audit_logger)
        self.roster = SavedPlayerRoster(storage, audit_logger=self._audit_logger)
        self.snapshots = SnapshotService(storage, audit_logger=self._audit_logger)

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def configuration(self) -> Configuration:
        return self.configuration_store.configuration

    @property
    def evenings(self) -> list[Evening]:
        return self.evening_store.evenings

    @property
    def current_evening(self) -> Optional[Evening]:
        return self.evening_store.current

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    def load(self) -> OperationResult:
        """
        Load all stores from storage.

        On first start the shipped defaults are persisted. On later starts
        newly shipped penalties/game types are merged in (union by id,
        persisted entries win) and the merged schedule is written back
        if it gained anything.
        """
        first_start = not self._storage.has_configuration()
        loaded = self._storage.load_configuration(self._defaults.model_copy(deep=True))
        merged = merge_with_defaults(loaded, self._defaults)
        self.configuration_store.replace(merged)

        self.evening_store.replace(self._storage.load_evenings())
        self.roster.replace(self._storage.load_saved_players())

        persisted = True
        gained = (
            len(merged.penalties) != len(loaded.penalties)
            or len(merged.game_types) != len(loaded.game_types)
        )
        if first_start or gained:
            persisted = self.configuration_store.persist()

        self._audit_logger.log(AuditEvent(
            event_type=AuditEventType.DATA_LOADED,
            description="Ledger loaded",
            details={
                "first_start": first_start,
                "evenings": len(self.evening_store.evenings),
                "saved_players": len(self.roster.names),
                "penalties": len(merged.penalties),
            },
            is_user_action=False,
        ))
        return OperationResult(
            success=True,
            persisted=persisted,
            message="Loaded" if persisted else "Loaded, but the configuration could not be saved",
            error_code=None if persisted else "storage_write_error",
        )

    # -------------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------------

    def settle(self, evening: Optional[EveningRef] = None) -> Optional[EveningSettlement]:
        """Settlement of an evening (current one by default). None if there is none."""
        record = self.evening_store.get(evening) if evening is not None else self.current_evening
        if record is None:
            return None
        return settle_evening(record, self.configuration)

    def player_total(self, evening: EveningRef, player_id: UUID) -> Optional[float]:
        record = self.evening_store.get(evening)
        if record is None:
            return None
        player = record.get_player(player_id)
        if player is None:
            return None
        return compute_total(player, self.configuration, record.players)

    # -------------------------------------------------------------------------
    # UI conveniences (errors become results)
    # -------------------------------------------------------------------------

    def add_player(
        self,
        name: str,
        evening: Optional[EveningRef] = None,
        remember: bool = True,
    ) -> OperationResult:
        """
        Add a player to an evening (current one by default).

        Unlike EveningRecordStore.add_player this refuses a name that is
        already on the evening's roster. With `remember`, the name is
        also added to the saved players.
        """
        record = self.evening_store.get(evening) if evening is not None else self.current_evening
        if record is None:
            return OperationResult(
                success=False,
                message="No evening selected",
                error_code="not_found",
            )

        name = (name or "").strip()
        if name and record.has_player_named(name):
            return OperationResult(
                success=False,
                message=f"{name} is already on this evening",
                error_code="duplicate_name",
            )

        result = self.evening_store.add_player(record, name)
        if result.success and remember and name and name not in self.roster:
            roster_result = self.roster.add_name(name)
            if not roster_result.persisted:
                result = result.model_copy(update={
                    "persisted": False,
                    "message": roster_result.message,
                    "error_code": roster_result.error_code,
                })
        return result

    def add_penalty(
        self,
        label: str,
        description: str = "",
        unit_price=0.0,
        inverted: bool = False,
    ) -> OperationResult:
        """ConfigurationStore.add_penalty with DuplicateId / invalid label as results."""
        try:
            return self.configuration_store.add_penalty(label, description, unit_price, inverted)
        except DuplicateIdError as e:
            return OperationResult(
                success=False,
                message=str(e),
                error_code="duplicate_id",
                entity_id=e.derived_id,
            )
        except InvalidLabelError as e:
            return OperationResult(success=False, message=str(e), error_code="invalid_label")

    def add_game_type(self, label: str, description: str = "") -> OperationResult:
        try:
            return self.configuration_store.add_game_type(label, description)
        except DuplicateIdError as e:
            return OperationResult(
                success=False,
                message=str(e),
                error_code="duplicate_id",
                entity_id=e.derived_id,
            )
        except InvalidLabelError as e:
            return OperationResult(success=False, message=str(e), error_code="invalid_label")

    # -------------------------------------------------------------------------
    # Export / import
    # -------------------------------------------------------------------------

    def export_snapshot(self) -> Snapshot:
        """Snapshot of the in-memory state (what the user currently sees)."""
        return self.snapshots.export_snapshot(
            self.configuration,
            self.evening_store.evenings,
            self.roster.names,
        )

    def export_document(self) -> str:
        return SnapshotService.to_json(self.export_snapshot())

    def export_filename(self, day: Optional[date] = None) -> str:
        return SnapshotService.export_filename(day)

    def _apply_snapshot(self, snapshot: Snapshot) -> None:
        if snapshot.evenings is not None:
            self.evening_store.replace(snapshot.evenings)
        if snapshot.configuration is not None:
            self.configuration_store.replace(snapshot.configuration)
        if snapshot.saved_players is not None:
            self.roster.replace(snapshot.saved_players)

    def import_snapshot(self, document: Document) -> OperationResult:
        """
        Import an export document.

        Sections present overwrite storage and memory; the last imported
        evening becomes current. On a parse error nothing changes.
        """
        result, snapshot = self.snapshots.import_snapshot(document)
        if snapshot is not None:
            self._apply_snapshot(snapshot)
        return result

    async def import_snapshot_file(self, path: Union[str, Path]) -> OperationResult:
        result, snapshot = await self.snapshots.import_snapshot_file(path)
        if snapshot is not None:
            self._apply_snapshot(snapshot)
        return result

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def clear_all_data(self) -> OperationResult:
        """Delete every stored blob and start over with the shipped defaults."""
        try:
            self._storage.clear_all()
            persisted = True
            message = "All data deleted"
        except StorageError as e:
            self._audit_logger.log_save_failed("all", str(e))
            persisted = False
            message = f"Could not delete stored data: {e}"

        self.configuration_store.replace(self._defaults.model_copy(deep=True))
        self.evening_store.replace([])
        self.roster.replace([])
        self._audit_logger.log(AuditEvent(
            event_type=AuditEventType.DATA_CLEARED,
            description="All ledger data cleared",
        ))
        return OperationResult(
            success=True,
            persisted=persisted,
            message=message,
            error_code=None if persisted else "storage_write_error",
        )


def create_app(
    storage: Optional[LedgerStorageInterface] = None,
    settings: Optional[Settings] = None,
    use_storage: bool = True,
) -> KegelbuchApp:
    """
    Factory function to create and load the application.

    Args:
        storage: Explicit backend (tests). Defaults to JSON files in the
                 configured data directory.
        settings: Explicit settings. Defaults to get_settings().
        use_storage: False keeps everything in memory (nothing on disk).

    Returns:
        A loaded KegelbuchApp. If the storage cannot even be read
        (e.g. the data directory is not accessible), the error is audited
        and the app runs on in-memory storage instead.
    """
    settings = settings or get_settings()
    log_settings = settings.logging
    level = "DEBUG" if settings.app.debug_mode else log_settings.level
    configure_logging(level, log_settings.json_output)

    if storage is None:
        if use_storage:
            storage = JsonFileStorage(settings=settings.storage)
        else:
            storage = InMemoryStorage()

    audit_logger = AuditLogger()
    app = KegelbuchApp(storage, audit_logger=audit_logger)
    try:
        app.load()
    except OSError as e:
        if isinstance(storage, InMemoryStorage):
            raise
        audit_logger.log_error("storage_unavailable", str(e), {"fallback": "in_memory"})
        app = KegelbuchApp(InMemoryStorage(), audit_logger=audit_logger)
        app.load()
    return app
