"""Settlement engine package."""

from kegelbuch.settlement.engine import (
    EveningSettlement,
    PlayerSettlement,
    compute_grand_total,
    compute_total,
    editable_amount,
    format_amount,
    settle_evening,
)

__all__ = [
    "EveningSettlement",
    "PlayerSettlement",
    "compute_grand_total",
    "compute_total",
    "editable_amount",
    "format_amount",
    "settle_evening",
]
