"""
Settlement Engine

Computes what each player owes for an evening.

    total(player) = entry fee
                  + sum over normal penalties:   own count    x unit price
                  + sum over inverted penalties: others' count x unit price

"Others" means every player on the same evening except the one being
settled. A player's own inverted penalties (Kranz, Volle) cost them
nothing directly; everybody else pays for them.

DESIGN DECISION: Totals are pure functions of (roster, configuration).
They are recomputed on every call and never persisted, so a stored
total can never disagree with the counts it was derived from.

No rounding happens here. Formatting to two decimals is display work
(see format_amount).
"""

from typing import Sequence
from uuid import UUID

from pydantic import BaseModel, Field

from kegelbuch.models.ledger import (
    Configuration,
    Evening,
    PenaltyDefinition,
    Player,
)


class PlayerSettlement(BaseModel):
    """One row of the settlement table."""

    player_id: UUID
    name: str
    entry_fee: float
    penalty_charges: dict[str, float] = Field(
        default_factory=dict,
        description="{penalty_id: amount charged to this player}"
    )
    total: float


class EveningSettlement(BaseModel):
    """Settlement of a whole evening. Derived, never stored."""

    evening_id: UUID
    players: list[PlayerSettlement] = Field(default_factory=list)
    grand_total: float = 0.0
    currency_symbol: str = ""

    def for_player(self, player_id: UUID) -> PlayerSettlement:
        for row in self.players:
            if row.player_id == player_id:
                return row
        raise KeyError(str(player_id))


def _penalty_charge(
    penalty: PenaltyDefinition,
    player: Player,
    all_players: Sequence[Player],
) -> float:
    if not penalty.inverted:
        return player.count_for(penalty.id) * penalty.unit_price

    others_count = sum(
        other.count_for(penalty.id)
        for other in all_players
        if other.id != player.id
    )
    return others_count * penalty.unit_price


def compute_total(
    player: Player,
    configuration: Configuration,
    all_players: Sequence[Player],
) -> float:
    """
    Amount owed by one player.

    Args:
        player: The player to settle
        configuration: Fee schedule (entry fee + penalty definitions)
        all_players: The full roster of the evening, `player` included

    Returns:
        Entry fee plus all penalty charges, unrounded
    """
    total = configuration.entry_fee
    for penalty in configuration.penalties:
        total += _penalty_charge(penalty, player, all_players)
    return total


def compute_grand_total(
    all_players: Sequence[Player],
    configuration: Configuration,
) -> float:
    """
    Sum of every player's total; 0 for an empty roster.

    An inverted penalty therefore counts once per paying player:
    one Kranz on a 5-player evening adds 4 x unit price.
    """
    return sum(
        (compute_total(player, configuration, all_players) for player in all_players),
        0.0,
    )


def settle_evening(evening: Evening, configuration: Configuration) -> EveningSettlement:
    """Per-player breakdown plus grand total for display."""
    rows = []
    for player in evening.players:
        charges = {
            penalty.id: _penalty_charge(penalty, player, evening.players)
            for penalty in configuration.penalties
        }
        rows.append(PlayerSettlement(
            player_id=player.id,
            name=player.name,
            entry_fee=configuration.entry_fee,
            penalty_charges=charges,
            total=compute_total(player, configuration, evening.players),
        ))

    return EveningSettlement(
        evening_id=evening.id,
        players=rows,
        grand_total=sum((row.total for row in rows), 0.0),
        currency_symbol=configuration.currency_symbol,
    )


def format_amount(amount: float, currency_symbol: str = "") -> str:
    """Two decimals followed by the currency symbol, e.g. '7.00€'."""
    return f"{amount:.2f}{currency_symbol}"


def editable_amount(amount: float) -> str:
    """
    Text for an input field holding a stored amount.

    Two decimals when that is exact ('6.00'), otherwise the full value
    ('0.125'), so reading the field back never changes the amount.
    """
    short = f"{amount:.2f}"
    return short if float(short) == amount else repr(float(amount))
