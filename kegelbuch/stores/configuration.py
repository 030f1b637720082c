"""
Configuration Store

Owns the fee schedule: entry fee, penalty definitions, game types
and the currency symbol.

Rules:
- Prices are coerced, never rejected ("abc" -> 0, "-2" -> 0, "0,5" -> 0.5)
- Ids are derived from labels at creation time and never change afterwards
- A derived id that already exists raises DuplicateIdError BEFORE anything
  is changed
- Every successful mutation is followed by a full persist
"""

from typing import Any, Optional

from kegelbuch.audit import AuditLogger
from kegelbuch.defaults import create_default_configuration
from kegelbuch.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from kegelbuch.models.ledger import (
    Configuration,
    GameTypeDefinition,
    OperationResult,
    PenaltyDefinition,
)
from kegelbuch.services.storage import LedgerStorageInterface
from kegelbuch.stores.base import PersistingStore
from kegelbuch.validation import coerce_amount, slugify_label


class DuplicateIdError(Exception):
    """A new definition would reuse an existing id."""

    def __init__(self, kind: str, derived_id: str, label: str):
        self.kind = kind
        self.derived_id = derived_id
        self.label = label
        super().__init__(
            f"A {kind} with id '{derived_id}' already exists (label: '{label}')"
        )


class InvalidLabelError(ValueError):
    """A label produces an empty id (e.g. only punctuation)."""
    pass


class ConfigurationStore(PersistingStore):
    """
    In-memory owner of the Configuration.

    The Configuration object is edited in place; callers holding a
    reference always see the current fee schedule.
    """

    store_name = "configuration"

    def __init__(
        self,
        storage: LedgerStorageInterface,
        configuration: Optional[Configuration] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(storage, audit_logger)
        self._configuration = configuration or create_default_configuration()

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def replace(self, configuration: Configuration) -> None:
        """Swap in a configuration read from storage or an import. No persist."""
        self._configuration = configuration

    def _save(self) -> None:
        self._storage.save_configuration(self._configuration)

    def _derive_id(self, label: str) -> str:
        derived = slugify_label(label)
        if not derived:
            raise InvalidLabelError(f"Label '{label}' does not produce a usable id")
        return derived

    def _unretire(self, field: str, item_id: str) -> None:
        retired = getattr(self._configuration, field)
        if item_id in retired:
            setattr(self._configuration, field, [i for i in retired if i != item_id])

    def _retire(self, field: str, item_id: str) -> None:
        retired = getattr(self._configuration, field)
        if item_id not in retired:
            setattr(self._configuration, field, [*retired, item_id])

    # -------------------------------------------------------------------------
    # Scalar fields
    # -------------------------------------------------------------------------

    def set_entry_fee(self, value: Any) -> OperationResult:
        """Set the entry fee. Unreadable or negative input becomes 0."""
        fee = coerce_amount(value)
        self._configuration.entry_fee = fee
        return self._committed(
            AuditEventBuilder.configuration_updated("entry_fee", fee),
        )

    def set_currency_symbol(self, symbol: str) -> OperationResult:
        symbol = (symbol or "").strip()
        self._configuration.currency_symbol = symbol
        return self._committed(
            AuditEventBuilder.configuration_updated("currency_symbol", symbol),
        )

    # -------------------------------------------------------------------------
    # Penalties
    # -------------------------------------------------------------------------

    def set_penalty_price(self, penalty_id: str, value: Any) -> OperationResult:
        """Set the unit price of a penalty. No-op if the id is unknown."""
        penalty = self._configuration.get_penalty(penalty_id)
        if penalty is None:
            return self._not_found("Penalty", penalty_id)

        price = coerce_amount(value)
        penalty.unit_price = price
        return self._committed(
            AuditEventBuilder.configuration_updated("unit_price", price, target_id=penalty_id),
            entity_id=penalty_id,
        )

    def add_penalty(
        self,
        label: str,
        description: str = "",
        unit_price: Any = 0.0,
        inverted: bool = False,
    ) -> OperationResult:
        """
        Append a new penalty definition.

        Raises:
            InvalidLabelError: If the label yields an empty id
            DuplicateIdError: If the derived id is already taken
                              (configuration left unchanged)
        """
        label = label.strip()
        penalty_id = self._derive_id(label)
        if self._configuration.has_penalty(penalty_id):
            self._audit(AuditEventBuilder.duplicate_id_rejected("penalty", penalty_id, label))
            raise DuplicateIdError("penalty", penalty_id, label)

        penalty = PenaltyDefinition(
            id=penalty_id,
            label=label,
            description=description.strip(),
            unit_price=coerce_amount(unit_price),
            inverted=bool(inverted),
        )
        self._configuration.penalties.append(penalty)
        self._unretire("retired_penalty_ids", penalty_id)
        return self._committed(
            AuditEventBuilder.penalty_added(
                penalty_id, label, penalty.unit_price, penalty.inverted
            ),
            entity_id=penalty_id,
        )

    def update_penalty(
        self,
        penalty_id: str,
        label: Optional[str] = None,
        description: Optional[str] = None,
        inverted: Optional[bool] = None,
    ) -> OperationResult:
        """Change display fields of a penalty. The id stays the same."""
        penalty = self._configuration.get_penalty(penalty_id)
        if penalty is None:
            return self._not_found("Penalty", penalty_id)

        changes = {}
        if label is not None and label.strip():
            penalty.label = label.strip()
            changes["label"] = penalty.label
        if description is not None:
            penalty.description = description.strip()
            changes["description"] = penalty.description
        if inverted is not None:
            penalty.inverted = bool(inverted)
            changes["inverted"] = penalty.inverted

        return self._committed(
            AuditEventBuilder.configuration_updated("penalty", changes, target_id=penalty_id),
            entity_id=penalty_id,
        )

    def remove_penalty(self, penalty_id: str) -> OperationResult:
        """
        Remove a penalty definition. No-op if absent.

        Counts already entered for it stay on the players but no longer
        contribute to any total.
        """
        if not self._configuration.has_penalty(penalty_id):
            return self._not_found("Penalty", penalty_id)

        self._configuration.penalties = [
            p for p in self._configuration.penalties if p.id != penalty_id
        ]
        self._retire("retired_penalty_ids", penalty_id)
        return self._committed(
            AuditEvent(
                event_type=AuditEventType.PENALTY_REMOVED,
                entity_type="penalty",
                entity_id=penalty_id,
                description=f"Penalty removed: {penalty_id}",
            ),
            entity_id=penalty_id,
        )

    # -------------------------------------------------------------------------
    # Game types
    # -------------------------------------------------------------------------

    def add_game_type(self, label: str, description: str = "") -> OperationResult:
        """
        Append a new game type.

        Raises:
            InvalidLabelError: If the label yields an empty id
            DuplicateIdError: If the derived id is already taken
        """
        label = label.strip()
        game_type_id = self._derive_id(label)
        if self._configuration.has_game_type(game_type_id):
            self._audit(AuditEventBuilder.duplicate_id_rejected("game type", game_type_id, label))
            raise DuplicateIdError("game type", game_type_id, label)

        self._configuration.game_types.append(GameTypeDefinition(
            id=game_type_id,
            label=label,
            description=description.strip(),
        ))
        self._unretire("retired_game_type_ids", game_type_id)
        return self._committed(
            AuditEvent(
                event_type=AuditEventType.GAME_TYPE_ADDED,
                entity_type="game_type",
                entity_id=game_type_id,
                description=f"Game type added: {label}",
            ),
            entity_id=game_type_id,
        )

    def update_game_type(
        self,
        game_type_id: str,
        label: Optional[str] = None,
        description: Optional[str] = None,
    ) -> OperationResult:
        game_type = self._configuration.get_game_type(game_type_id)
        if game_type is None:
            return self._not_found("Game type", game_type_id)

        changes = {}
        if label is not None and label.strip():
            game_type.label = label.strip()
            changes["label"] = game_type.label
        if description is not None:
            game_type.description = description.strip()
            changes["description"] = game_type.description

        return self._committed(
            AuditEventBuilder.configuration_updated("game_type", changes, target_id=game_type_id),
            entity_id=game_type_id,
        )

    def remove_game_type(self, game_type_id: str) -> OperationResult:
        """Remove a game type. No-op if absent; entered results are kept."""
        if not self._configuration.has_game_type(game_type_id):
            return self._not_found("Game type", game_type_id)

        self._configuration.game_types = [
            g for g in self._configuration.game_types if g.id != game_type_id
        ]
        self._retire("retired_game_type_ids", game_type_id)
        return self._committed(
            AuditEvent(
                event_type=AuditEventType.GAME_TYPE_REMOVED,
                entity_type="game_type",
                entity_id=game_type_id,
                description=f"Game type removed: {game_type_id}",
            ),
            entity_id=game_type_id,
        )

    # -------------------------------------------------------------------------
    # Whole schedule
    # -------------------------------------------------------------------------

    def reset_to_defaults(self) -> OperationResult:
        """Throw away all edits and start from the shipped schedule."""
        self._configuration = create_default_configuration()
        return self._committed(
            AuditEventBuilder.configuration_updated("reset", "defaults"),
        )
