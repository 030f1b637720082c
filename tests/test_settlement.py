"""Tests for the settlement engine."""

import pytest

from kegelbuch.models.ledger import Configuration, Evening, PenaltyDefinition, Player
from kegelbuch.validation import coerce_amount
from kegelbuch.settlement import (
    compute_grand_total,
    compute_total,
    editable_amount,
    format_amount,
    settle_evening,
)


@pytest.fixture
def roster():
    """A (kalle=2, kranz=1) and B (nothing)."""
    a = Player(name="A", penalty_counts={"kalle": 2, "kranz": 1})
    b = Player(name="B", penalty_counts={"kalle": 0, "kranz": 0})
    return [a, b]


class TestComputeTotal:
    """Tests for compute_total."""

    def test_kegel_evening_scenario(self, kegel_config, roster):
        """Test the reference evening: A owes 7.00, B owes 6.50, together 13.50."""
        a, b = roster
        assert compute_total(a, kegel_config, roster) == pytest.approx(7.0)
        assert compute_total(b, kegel_config, roster) == pytest.approx(6.5)
        assert compute_grand_total(roster, kegel_config) == pytest.approx(13.5)

    def test_entry_fee_only(self, kegel_config):
        """Test a player without penalties pays the entry fee."""
        player = Player(name="A")
        assert compute_total(player, kegel_config, [player]) == 6.0

    def test_missing_counts_are_zero(self, kegel_config):
        """Test that unknown penalty ids in the counts are not an error."""
        player = Player(name="A", penalty_counts={"unknown": 5})
        assert compute_total(player, kegel_config, [player]) == 6.0

    def test_normal_penalty_increment(self, kegel_config, roster):
        """Test +1 normal penalty raises only the own total by the unit price."""
        a, b = roster
        before_a = compute_total(a, kegel_config, roster)
        before_b = compute_total(b, kegel_config, roster)

        a.penalty_counts["kalle"] += 1

        assert compute_total(a, kegel_config, roster) == pytest.approx(before_a + 0.5)
        assert compute_total(b, kegel_config, roster) == pytest.approx(before_b)

    def test_inverted_penalty_increment(self, kegel_config):
        """Test +1 inverted penalty charges every other player, not the thrower."""
        players = [Player(name=n) for n in ("A", "B", "C")]
        before = [compute_total(p, kegel_config, players) for p in players]

        players[0].penalty_counts["kranz"] = 1

        after = [compute_total(p, kegel_config, players) for p in players]
        assert after[0] == pytest.approx(before[0])
        assert after[1] == pytest.approx(before[1] + 0.5)
        assert after[2] == pytest.approx(before[2] + 0.5)

    def test_thrower_excluded_from_others_sum(self, kegel_config):
        """Test own inverted counts never reach the own total."""
        a = Player(name="A", penalty_counts={"kranz": 3})
        b = Player(name="B", penalty_counts={"kranz": 1})
        players = [a, b]
        assert compute_total(a, kegel_config, players) == pytest.approx(6.0 + 1 * 0.5)
        assert compute_total(b, kegel_config, players) == pytest.approx(6.0 + 3 * 0.5)

    def test_single_player_inverted_only(self):
        """Test a lone player's inverted penalties cost nothing."""
        config = Configuration(
            entry_fee=6.0,
            penalties=[PenaltyDefinition(id="volle", label="Volle", unit_price=0.5, inverted=True)],
        )
        player = Player(name="A", penalty_counts={"volle": 4})
        assert compute_total(player, config, [player]) == 6.0

    def test_no_rounding(self):
        """Test that totals are not rounded."""
        config = Configuration(
            entry_fee=0.0,
            penalties=[PenaltyDefinition(id="x", label="X", unit_price=0.333)],
        )
        player = Player(name="A", penalty_counts={"x": 1})
        assert compute_total(player, config, [player]) == pytest.approx(0.333)


class TestComputeGrandTotal:
    """Tests for compute_grand_total."""

    def test_empty_roster(self, kegel_config):
        """Test zero players settle to zero."""
        assert compute_grand_total([], kegel_config) == 0

    def test_equals_sum_of_totals(self, kegel_config, roster):
        """Test the grand total is the sum of the per-player totals."""
        expected = sum(compute_total(p, kegel_config, roster) for p in roster)
        assert compute_grand_total(roster, kegel_config) == pytest.approx(expected)

    def test_inverted_counts_once_per_paying_player(self, kegel_config):
        """Test one Kranz among five players adds 4 x unit price."""
        players = [Player(name=str(i)) for i in range(5)]
        base = compute_grand_total(players, kegel_config)
        players[0].penalty_counts["kranz"] = 1
        assert compute_grand_total(players, kegel_config) == pytest.approx(base + 4 * 0.5)


class TestSettleEvening:
    """Tests for the per-player breakdown."""

    def test_breakdown(self, kegel_config, roster):
        """Test charges per penalty and totals per player."""
        evening = Evening(players=roster)
        settlement = settle_evening(evening, kegel_config)

        row_a = settlement.for_player(roster[0].id)
        assert row_a.entry_fee == 6.0
        assert row_a.penalty_charges == {"kalle": pytest.approx(1.0), "kranz": 0.0}
        assert row_a.total == pytest.approx(7.0)

        row_b = settlement.for_player(roster[1].id)
        assert row_b.penalty_charges["kranz"] == pytest.approx(0.5)
        assert settlement.grand_total == pytest.approx(13.5)

    def test_empty_evening(self, kegel_config):
        """Test an evening without players."""
        settlement = settle_evening(Evening(), kegel_config)
        assert settlement.players == []
        assert settlement.grand_total == 0.0

    def test_unknown_player(self, kegel_config):
        """Test for_player raises KeyError for unknown ids."""
        settlement = settle_evening(Evening(), kegel_config)
        with pytest.raises(KeyError):
            settlement.for_player(Player().id)


class TestFormatAmount:
    """Tests for display formatting."""

    def test_two_decimals_and_symbol(self):
        """Test the table's money format."""
        assert format_amount(7, "€") == "7.00€"
        assert format_amount(13.456) == "13.46"

    def test_editable_amount_two_decimals_when_exact(self):
        """Test round amounts are shown with two decimals."""
        assert editable_amount(6.0) == "6.00"
        assert editable_amount(0.5) == "0.50"

    def test_editable_amount_keeps_extra_decimals(self):
        """Test a 0.125 price survives being shown and read back."""
        shown = editable_amount(0.125)
        assert shown == "0.125"
        assert coerce_amount(shown) == 0.125
