"""
Core Data Models for Kegelbuch

These models define the schemas for everything the ledger stores:
- the fee schedule (Configuration, PenaltyDefinition, GameTypeDefinition)
- the evening records (Evening, Player)
- the export document (Snapshot)

They are designed to:
1. Reject malformed data at load/import time
2. Be serializable with the camelCase field names of the stored documents
3. Carry no derived values - totals are computed by the settlement engine

DESIGN DECISION: Models are mutable. The stores edit them in place and
persist the whole collection afterwards; there is no partial update.
"""

from datetime import date, datetime
from typing import Annotated, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# Version tag written into every export document
SNAPSHOT_FORMAT_VERSION = "1.0"


def dedupe_names(names) -> list[str]:
    """Strip names, drop blanks and case-insensitive repeats (first spelling wins)."""
    seen = set()
    result = []
    for name in names:
        cleaned = name.strip()
        key = cleaned.casefold()
        if cleaned and key not in seen:
            seen.add(key)
            result.append(cleaned)
    return result


class LedgerModel(BaseModel):
    """
    Base for all persisted models.

    Python code uses snake_case attributes, stored JSON uses camelCase
    (entryFee, penaltyCounts, ...). Both spellings are accepted on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        """Convert to the JSON-compatible dict that is written to storage."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# FEE SCHEDULE
# =============================================================================

class PenaltyDefinition(LedgerModel):
    """
    A priced infraction category.

    Normal penalties are paid by the player who threw them.
    Inverted penalties (Kranz, Volle, ...) are paid by every OTHER
    player of the evening, once per occurrence.
    """

    id: str = Field(
        ...,
        min_length=1,
        pattern=r"^[a-z0-9_]+$",
        description="Stable identifier derived from the label"
    )
    label: str = Field(
        ...,
        description="Short display name (table column header)"
    )
    description: str = Field(
        default="",
        description="Explanation shown as tooltip"
    )
    unit_price: NonNegativeFloat = Field(
        default=0.0,
        description="Amount charged per occurrence"
    )
    inverted: bool = Field(
        default=False,
        description="If True, all other players pay for each occurrence"
    )


class GameTypeDefinition(LedgerModel):
    """A named scoring category (e.g. championship round, money game). No price."""

    id: str = Field(
        ...,
        min_length=1,
        pattern=r"^[a-z0-9_]+$",
    )
    label: str
    description: str = ""


class Configuration(LedgerModel):
    """
    The fee schedule.

    Insertion order of penalties and game types is display order.
    Ids are unique within each list.
    """

    entry_fee: NonNegativeFloat = Field(
        default=0.0,
        description="Charged once per player per evening"
    )
    penalties: list[PenaltyDefinition] = Field(default_factory=list)
    game_types: list[GameTypeDefinition] = Field(default_factory=list)
    currency_symbol: str = Field(
        default="€",
        description="Display only"
    )
    retired_penalty_ids: list[str] = Field(
        default_factory=list,
        description="Ids of penalties the user removed; shipped defaults "
                    "with these ids are not re-added on load"
    )
    retired_game_type_ids: list[str] = Field(
        default_factory=list,
        description="Same as retired_penalty_ids, for game types"
    )

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "Configuration":
        """Reject documents that define the same id twice."""
        for kind, items in (("penalty", self.penalties), ("game type", self.game_types)):
            seen = set()
            for item in items:
                if item.id in seen:
                    raise ValueError(f"Duplicate {kind} id: {item.id}")
                seen.add(item.id)
        return self

    def get_penalty(self, penalty_id: str) -> Optional[PenaltyDefinition]:
        return next((p for p in self.penalties if p.id == penalty_id), None)

    def has_penalty(self, penalty_id: str) -> bool:
        return self.get_penalty(penalty_id) is not None

    def get_game_type(self, game_type_id: str) -> Optional[GameTypeDefinition]:
        return next((g for g in self.game_types if g.id == game_type_id), None)

    def has_game_type(self, game_type_id: str) -> bool:
        return self.get_game_type(game_type_id) is not None


# =============================================================================
# EVENING RECORDS
# =============================================================================

class Player(LedgerModel):
    """
    A player on one evening's roster.

    Exists only inside its Evening. The same person on two evenings
    is two Player records; they are matched by name only.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique player ID (stable for the life of the record)"
    )
    name: str = ""
    present: bool = True
    penalty_counts: dict[str, NonNegativeInt] = Field(
        default_factory=dict,
        description="{penalty_id: count}; missing ids count as zero"
    )
    game_results: dict[str, str] = Field(
        default_factory=dict,
        description="{game_type_id: free-form result}"
    )

    def count_for(self, penalty_id: str) -> int:
        """Count for a penalty id, 0 if never entered."""
        return self.penalty_counts.get(penalty_id, 0)


class Evening(LedgerModel):
    """
    One recorded bowling session.

    `closed` marks the record as finalized. It is a display convention;
    closed evenings can still be edited.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique evening ID"
    )
    date: Annotated[date, Field(default_factory=date.today)]
    players: list[Player] = Field(default_factory=list)
    notes: str = ""
    closed: bool = False

    def get_player(self, player_id: UUID) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def has_player_named(self, name: str) -> bool:
        """Case-insensitive name check for callers that want to prevent duplicates."""
        wanted = name.strip().casefold()
        return any(p.name.strip().casefold() == wanted for p in self.players)


# =============================================================================
# EXPORT DOCUMENT
# =============================================================================

class Snapshot(LedgerModel):
    """
    The whole dataset as one document (backup / transfer).

    Every section is optional: on import, only the sections present
    in the document replace the stored data.
    """

    evenings: Optional[list[Evening]] = None
    configuration: Optional[Configuration] = None
    saved_players: Optional[list[str]] = None
    export_timestamp: Optional[datetime] = None
    format_version: str = SNAPSHOT_FORMAT_VERSION

    @field_validator("saved_players")
    @classmethod
    def normalize_saved_players(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return None if v is None else dedupe_names(v)

    def to_document(self) -> dict:
        """Sections that are None are left out of the document."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# OPERATION RESULTS
# =============================================================================

class OperationResult(BaseModel):
    """
    Outcome of a mutation, persist, import or export.

    Failures at the storage boundary are reported here instead of
    raised, so the caller decides whether to warn the user.
    `success` is about the operation itself, `persisted` about the
    write that followed it. A successful but unpersisted mutation is
    still applied in memory.
    """

    success: bool
    persisted: bool = False
    message: str = ""
    error_code: Optional[str] = None
    entity_id: Optional[str] = None
