"""
Saved Player Roster

A flat list of known player names, used to pre-fill the "add player"
field. It is independent of the evenings: no ids, matching by name only.
"""

from typing import Optional, Sequence

from kegelbuch.audit import AuditLogger
from kegelbuch.models.audit import AuditEvent, AuditEventType
from kegelbuch.models.ledger import OperationResult, dedupe_names
from kegelbuch.services.storage import LedgerStorageInterface
from kegelbuch.stores.base import PersistingStore


class SavedPlayerRoster(PersistingStore):
    """Ordered, duplicate-free (case-insensitive) list of player names."""

    store_name = "saved_players"

    def __init__(
        self,
        storage: LedgerStorageInterface,
        names: Optional[Sequence[str]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(storage, audit_logger)
        self._names = dedupe_names(names or [])

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def __contains__(self, name: str) -> bool:
        wanted = name.strip().casefold()
        return any(n.casefold() == wanted for n in self._names)

    def replace(self, names: Sequence[str]) -> None:
        """Swap in names read from storage or an import. No persist."""
        self._names = dedupe_names(names)

    def _save(self) -> None:
        self._storage.save_saved_players(self._names)

    def add_name(self, name: str) -> OperationResult:
        """Remember a name. Blank names and names already known are ignored."""
        cleaned = (name or "").strip()
        if not cleaned or cleaned in self:
            return OperationResult(
                success=False,
                message="Name is empty or already saved",
                error_code="ignored",
                entity_id=cleaned or None,
            )

        self._names.append(cleaned)
        return self._committed(
            AuditEvent(
                event_type=AuditEventType.SAVED_PLAYER_ADDED,
                entity_type="saved_player",
                entity_id=cleaned,
                description=f"Saved player added: {cleaned}",
            ),
            entity_id=cleaned,
        )

    def remove_name(self, name: str) -> OperationResult:
        wanted = (name or "").strip().casefold()
        remaining = [n for n in self._names if n.casefold() != wanted]
        if len(remaining) == len(self._names):
            return self._not_found("Saved player", name)

        self._names = remaining
        return self._committed(
            AuditEvent(
                event_type=AuditEventType.SAVED_PLAYER_REMOVED,
                entity_type="saved_player",
                entity_id=name.strip(),
                description=f"Saved player removed: {name.strip()}",
            ),
            entity_id=name.strip(),
        )
