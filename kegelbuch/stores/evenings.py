"""
Evening Record Store

Owns the collection of bowling evenings and tracks which one is
"current" (the most recently created, edited or selected evening).

Rules:
- Penalty counts are coerced, never rejected ("-3" -> 0, "abc" -> 0)
- Game results are stored verbatim (free text: scores, "W", "2nd", ...)
- Unknown evening or player ids are a no-op, reported as not_found
- Every successful mutation is followed by a full persist of ALL evenings
- Totals are not stored here; ask the settlement engine
"""

from datetime import date
from typing import Any, Optional, Sequence, Union
from uuid import UUID

from kegelbuch.audit import AuditLogger
from kegelbuch.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from kegelbuch.models.ledger import Evening, OperationResult, Player
from kegelbuch.services.storage import LedgerStorageInterface
from kegelbuch.stores.base import PersistingStore
from kegelbuch.validation import coerce_count


EveningRef = Union[Evening, UUID, str]
PlayerRef = Union[Player, UUID, str]


def _as_uuid(ref: Union[UUID, str]) -> Optional[UUID]:
    if isinstance(ref, UUID):
        return ref
    try:
        return UUID(str(ref))
    except ValueError:
        return None


class EveningRecordStore(PersistingStore):
    """In-memory owner of all Evening records."""

    store_name = "evenings"

    def __init__(
        self,
        storage: LedgerStorageInterface,
        evenings: Optional[Sequence[Evening]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(storage, audit_logger)
        self._evenings: list[Evening] = []
        self._current_id: Optional[UUID] = None
        self.replace(evenings or [])

    # -------------------------------------------------------------------------
    # Collection access
    # -------------------------------------------------------------------------

    @property
    def evenings(self) -> list[Evening]:
        """All evenings in creation order (a new list; the records are live)."""
        return list(self._evenings)

    @property
    def current(self) -> Optional[Evening]:
        if self._current_id is None:
            return None
        return self.get(self._current_id)

    def replace(self, evenings: Sequence[Evening]) -> None:
        """
        Swap in evenings read from storage or an import. No persist.

        The last evening becomes current.
        """
        self._evenings = list(evenings)
        self._current_id = self._evenings[-1].id if self._evenings else None

    def get(self, evening: EveningRef) -> Optional[Evening]:
        evening_id = evening.id if isinstance(evening, Evening) else _as_uuid(evening)
        if evening_id is None:
            return None
        return next((e for e in self._evenings if e.id == evening_id), None)

    def _save(self) -> None:
        self._storage.save_evenings(self._evenings)

    def _touch(self, evening: Evening) -> None:
        self._current_id = evening.id

    def _resolve(
        self,
        evening: EveningRef,
        player: Optional[PlayerRef] = None,
    ) -> tuple[Optional[Evening], Optional[Player], Optional[OperationResult]]:
        """Look up an evening (and optionally a player); third item is the not-found result."""
        record = self.get(evening)
        if record is None:
            ref = evening.id if isinstance(evening, Evening) else evening
            return None, None, self._not_found("Evening", ref)
        if player is None:
            return record, None, None

        player_id = player.id if isinstance(player, Player) else _as_uuid(player)
        found = record.get_player(player_id) if player_id is not None else None
        if found is None:
            ref = player.id if isinstance(player, Player) else player
            return record, None, self._not_found("Player", ref)
        return record, found, None

    # -------------------------------------------------------------------------
    # Evenings
    # -------------------------------------------------------------------------

    def create_evening(self, evening_date: Optional[date] = None) -> OperationResult:
        """Start a new, empty evening (today by default). It becomes current."""
        evening = Evening(date=evening_date or date.today())
        self._evenings.append(evening)
        self._touch(evening)
        return self._committed(
            AuditEventBuilder.evening_created(evening.id, evening.date.isoformat()),
            entity_id=str(evening.id),
        )

    def select_evening(self, evening: EveningRef) -> Optional[Evening]:
        """Make an evening current. Returns None if it does not exist."""
        record = self.get(evening)
        if record is not None:
            self._touch(record)
            self._audit(AuditEvent(
                event_type=AuditEventType.EVENING_SELECTED,
                entity_type="evening",
                entity_id=str(record.id),
                description=f"Evening selected: {record.date.isoformat()}",
            ))
        return record

    def set_date(self, evening: EveningRef, value: Union[date, str]) -> OperationResult:
        """Change the date. ISO strings are accepted; unreadable ones are ignored."""
        record, _, missing = self._resolve(evening)
        if missing:
            return missing

        if not isinstance(value, date):
            try:
                value = date.fromisoformat(str(value).strip())
            except ValueError:
                return OperationResult(
                    success=False,
                    message=f"Not a date: {value}",
                    error_code="invalid_value",
                    entity_id=str(record.id),
                )

        record.date = value
        self._touch(record)
        return self._committed(
            AuditEventBuilder.evening_updated(record.id, "date", value.isoformat()),
            entity_id=str(record.id),
        )

    def set_notes(self, evening: EveningRef, notes: str) -> OperationResult:
        record, _, missing = self._resolve(evening)
        if missing:
            return missing

        record.notes = notes or ""
        self._touch(record)
        return self._committed(
            AuditEventBuilder.evening_updated(record.id, "notes", len(record.notes)),
            entity_id=str(record.id),
        )

    def set_closed(self, evening: EveningRef, closed: bool) -> OperationResult:
        """Mark an evening finalized (display convention, not a lock)."""
        record, _, missing = self._resolve(evening)
        if missing:
            return missing

        record.closed = bool(closed)
        self._touch(record)
        return self._committed(
            AuditEventBuilder.evening_updated(record.id, "closed", record.closed),
            entity_id=str(record.id),
        )

    # -------------------------------------------------------------------------
    # Roster
    # -------------------------------------------------------------------------

    def add_player(self, evening: EveningRef, name: str = "") -> OperationResult:
        """
        Append a player (present, no counts, no results).

        Duplicate names are NOT rejected here; see Evening.has_player_named.
        """
        record, _, missing = self._resolve(evening)
        if missing:
            return missing

        player = Player(name=(name or "").strip())
        record.players.append(player)
        self._touch(record)
        return self._committed(
            AuditEventBuilder.player_added(record.id, player.id, player.name),
            entity_id=str(player.id),
        )

    def remove_player(self, evening: EveningRef, player: PlayerRef) -> OperationResult:
        record, found, missing = self._resolve(evening, player)
        if missing:
            return missing

        record.players = [p for p in record.players if p.id != found.id]
        self._touch(record)
        return self._committed(
            AuditEventBuilder.player_removed(record.id, found.id),
            entity_id=str(found.id),
        )

    def rename_player(self, evening: EveningRef, player: PlayerRef, name: str) -> OperationResult:
        record, found, missing = self._resolve(evening, player)
        if missing:
            return missing

        found.name = (name or "").strip()
        self._touch(record)
        return self._committed(
            AuditEvent(
                event_type=AuditEventType.PLAYER_UPDATED,
                entity_type="player",
                entity_id=str(found.id),
                description="Player renamed",
                details={"evening_id": str(record.id), "name": found.name},
            ),
            entity_id=str(found.id),
        )

    def set_present(self, evening: EveningRef, player: PlayerRef, present: bool) -> OperationResult:
        record, found, missing = self._resolve(evening, player)
        if missing:
            return missing

        found.present = bool(present)
        self._touch(record)
        return self._committed(
            AuditEvent(
                event_type=AuditEventType.PLAYER_UPDATED,
                entity_type="player",
                entity_id=str(found.id),
                description=f"Player attendance set: {found.present}",
                details={"evening_id": str(record.id), "present": found.present},
            ),
            entity_id=str(found.id),
        )

    def set_penalty_count(
        self,
        evening: EveningRef,
        player: PlayerRef,
        penalty_id: str,
        raw_value: Any,
    ) -> OperationResult:
        """
        Record how often a player incurred a penalty.

        `raw_value` is whatever the input field holds. Non-numeric or
        negative input is stored as 0. Never raises.
        """
        record, found, missing = self._resolve(evening, player)
        if missing:
            return missing

        count = coerce_count(raw_value)
        found.penalty_counts[penalty_id] = count
        self._touch(record)
        return self._committed(
            AuditEventBuilder.penalty_count_set(record.id, found.id, penalty_id, raw_value, count),
            entity_id=str(found.id),
        )

    def set_game_result(
        self,
        evening: EveningRef,
        player: PlayerRef,
        game_type_id: str,
        value: Any,
    ) -> OperationResult:
        """Store a game result exactly as entered."""
        record, found, missing = self._resolve(evening, player)
        if missing:
            return missing

        found.game_results[game_type_id] = "" if value is None else str(value)
        self._touch(record)
        return self._committed(
            AuditEvent(
                event_type=AuditEventType.GAME_RESULT_SET,
                entity_type="player",
                entity_id=str(found.id),
                description=f"Game result set: {game_type_id}",
                details={"evening_id": str(record.id), "game_type_id": game_type_id},
            ),
            entity_id=str(found.id),
        )
