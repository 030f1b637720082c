"""Tests for the configuration store, the evening store and the saved roster."""

import pytest
from datetime import date
from uuid import uuid4

from kegelbuch.models.audit import AuditEventType
from kegelbuch.models.ledger import Configuration
from kegelbuch.stores import (
    ConfigurationStore,
    DuplicateIdError,
    EveningRecordStore,
    InvalidLabelError,
    SavedPlayerRoster,
)


@pytest.fixture
def config_store(storage, audit_logger, kegel_config):
    return ConfigurationStore(storage, kegel_config, audit_logger)


@pytest.fixture
def evening_store(storage, audit_logger):
    return EveningRecordStore(storage, audit_logger=audit_logger)


@pytest.fixture
def evening(evening_store):
    evening_store.create_evening(date(2024, 3, 1))
    return evening_store.current


class TestConfigurationStore:
    """Tests for ConfigurationStore."""

    def test_set_entry_fee_coerces(self, config_store):
        """Test that unreadable fees become 0 and are persisted."""
        result = config_store.set_entry_fee("abc")
        assert result.success and result.persisted
        assert config_store.configuration.entry_fee == 0.0

        config_store.set_entry_fee("5,5")
        assert config_store.configuration.entry_fee == 5.5

    def test_set_entry_fee_persists(self, config_store, storage):
        """Test the stored configuration follows the edit."""
        config_store.set_entry_fee(7)
        stored = storage.load_configuration(Configuration())
        assert stored.entry_fee == 7.0

    def test_set_penalty_price(self, config_store):
        """Test prices are coerced like fees."""
        config_store.set_penalty_price("kalle", "-2")
        assert config_store.configuration.get_penalty("kalle").unit_price == 0.0
        config_store.set_penalty_price("kalle", "0.75")
        assert config_store.configuration.get_penalty("kalle").unit_price == 0.75

    def test_set_price_of_unknown_penalty_is_noop(self, config_store, storage):
        """Test an unknown id changes nothing and writes nothing."""
        before = config_store.configuration.model_copy(deep=True)
        result = config_store.set_penalty_price("pudel", 1.0)
        assert result.success is False
        assert result.error_code == "not_found"
        assert config_store.configuration == before
        assert storage.write_count == 0

    def test_add_penalty(self, config_store):
        """Test the id is derived from the label."""
        result = config_store.add_penalty("Spiel verloren", unit_price="0,2")
        assert result.success
        assert result.entity_id == "spiel_verloren"
        penalty = config_store.configuration.get_penalty("spiel_verloren")
        assert penalty.label == "Spiel verloren"
        assert penalty.unit_price == 0.2
        assert penalty.inverted is False

    def test_add_penalty_duplicate_id_leaves_configuration_unchanged(
        self, config_store, storage, audit_logger
    ):
        """Test a colliding label raises before anything changes."""
        before = config_store.configuration.model_copy(deep=True)
        with pytest.raises(DuplicateIdError) as exc_info:
            config_store.add_penalty(" KALLE ", unit_price=9)
        assert exc_info.value.derived_id == "kalle"
        assert config_store.configuration == before
        assert storage.write_count == 0
        assert audit_logger.recent_events[-1].event_type == AuditEventType.DUPLICATE_ID_REJECTED

    def test_add_penalty_empty_id(self, config_store):
        """Test labels without usable characters are rejected."""
        with pytest.raises(InvalidLabelError):
            config_store.add_penalty("???")

    def test_remove_penalty_retires_id(self, config_store):
        """Test removed ids are remembered and re-adding forgets them."""
        config_store.remove_penalty("kranz")
        assert not config_store.configuration.has_penalty("kranz")
        assert "kranz" in config_store.configuration.retired_penalty_ids

        config_store.add_penalty("Kranz", unit_price=0.5, inverted=True)
        assert config_store.configuration.has_penalty("kranz")
        assert "kranz" not in config_store.configuration.retired_penalty_ids

    def test_remove_unknown_penalty(self, config_store):
        """Test removing an absent id is reported, not raised."""
        result = config_store.remove_penalty("pudel")
        assert result.error_code == "not_found"

    def test_update_penalty_keeps_id(self, config_store):
        """Test relabeling does not change the id."""
        config_store.update_penalty("kalle", label="Kalle Ball", inverted=True)
        penalty = config_store.configuration.get_penalty("kalle")
        assert penalty.label == "Kalle Ball"
        assert penalty.inverted is True

    def test_game_types(self, config_store):
        """Test adding, duplicating and removing game types."""
        assert config_store.add_game_type("WM").entity_id == "wm"
        with pytest.raises(DuplicateIdError):
            config_store.add_game_type("wm")
        config_store.update_game_type("wm", description="Weltmeisterschaft")
        assert config_store.configuration.get_game_type("wm").description == "Weltmeisterschaft"
        config_store.remove_game_type("wm")
        assert not config_store.configuration.has_game_type("wm")
        assert "wm" in config_store.configuration.retired_game_type_ids

    def test_retired_ids_are_kept_per_kind(self, config_store):
        """Test a penalty and a game type with the same id retire independently."""
        config_store.add_game_type("WM")
        config_store.remove_game_type("wm")
        config_store.add_penalty("WM", unit_price=1.0)

        config = config_store.configuration
        assert config.retired_game_type_ids == ["wm"]
        assert "wm" not in config.retired_penalty_ids
        assert config.has_penalty("wm")
        assert not config.has_game_type("wm")

    def test_currency_symbol(self, config_store):
        """Test the currency symbol is trimmed."""
        config_store.set_currency_symbol(" CHF ")
        assert config_store.configuration.currency_symbol == "CHF"

    def test_reset_to_defaults(self, config_store):
        """Test resetting restores the shipped schedule."""
        config_store.set_entry_fee(99)
        config_store.reset_to_defaults()
        assert config_store.configuration.entry_fee == 6.0
        assert config_store.configuration.has_penalty("volle")

    def test_write_failure_keeps_change_in_memory(self, config_store, storage, audit_logger):
        """Test a rejected write is reported and the edit stays applied."""
        storage.fail_writes = True
        result = config_store.set_entry_fee(8)
        assert result.success is True
        assert result.persisted is False
        assert result.error_code == "storage_write_error"
        assert config_store.configuration.entry_fee == 8.0
        assert audit_logger.recent_events[-1].event_type == AuditEventType.SAVE_FAILED


class TestEveningRecordStore:
    """Tests for EveningRecordStore."""

    def test_create_evening_becomes_current(self, evening_store, storage):
        """Test a new evening is current and persisted."""
        result = evening_store.create_evening(date(2024, 3, 1))
        assert result.success and result.persisted
        assert evening_store.current.date == date(2024, 3, 1)
        assert len(storage.load_evenings()) == 1

    def test_create_evening_defaults_to_today(self, evening_store):
        """Test the default date."""
        evening_store.create_evening()
        assert evening_store.current.date == date.today()

    def test_no_current_evening_initially(self, evening_store):
        """Test an empty store has no current evening."""
        assert evening_store.current is None
        assert evening_store.evenings == []

    def test_edit_makes_evening_current(self, evening_store):
        """Test any edit moves the current pointer."""
        evening_store.create_evening(date(2024, 3, 1))
        first = evening_store.current
        evening_store.create_evening(date(2024, 3, 8))
        assert evening_store.current is not first

        evening_store.set_notes(first, "Bahn 2")
        assert evening_store.current is first

    def test_select_evening(self, evening_store):
        """Test selection by id string."""
        evening_store.create_evening(date(2024, 3, 1))
        first = evening_store.current
        evening_store.create_evening(date(2024, 3, 8))
        assert evening_store.select_evening(str(first.id)) is first
        assert evening_store.current is first
        assert evening_store.select_evening(uuid4()) is None

    def test_set_date(self, evening_store, evening):
        """Test ISO strings are accepted and garbage is reported."""
        evening_store.set_date(evening, "2024-04-05")
        assert evening.date == date(2024, 4, 5)

        result = evening_store.set_date(evening, "gestern")
        assert result.error_code == "invalid_value"
        assert evening.date == date(2024, 4, 5)

    def test_set_closed(self, evening_store, evening):
        """Test closing is a flag only."""
        evening_store.set_closed(evening, True)
        assert evening.closed is True
        assert evening_store.add_player(evening, "Hans").success

    def test_add_player(self, evening_store, evening):
        """Test a new player is present with empty counts."""
        result = evening_store.add_player(evening, " Hans ")
        player = evening.players[0]
        assert result.entity_id == str(player.id)
        assert player.name == "Hans"
        assert player.present is True
        assert player.penalty_counts == {}

    def test_add_player_to_unknown_evening(self, evening_store):
        """Test an unknown evening id is a reported no-op."""
        result = evening_store.add_player(uuid4(), "Hans")
        assert result.success is False
        assert result.error_code == "not_found"

    def test_set_penalty_count_coerces(self, evening_store, evening):
        """Test negative and non-numeric counts are stored as 0."""
        evening_store.add_player(evening, "Hans")
        player = evening.players[0]

        evening_store.set_penalty_count(evening, player, "kalle", "3")
        assert player.penalty_counts["kalle"] == 3

        result = evening_store.set_penalty_count(evening, player, "kalle", "-3")
        assert result.success
        assert player.penalty_counts["kalle"] == 0

        evening_store.set_penalty_count(evening, player, "kranz", "abc")
        assert player.penalty_counts["kranz"] == 0

    def test_set_penalty_count_unknown_player(self, evening_store, evening, storage):
        """Test an unknown player changes nothing."""
        writes = storage.write_count
        result = evening_store.set_penalty_count(evening, uuid4(), "kalle", 2)
        assert result.error_code == "not_found"
        assert storage.write_count == writes

    def test_set_game_result_verbatim(self, evening_store, evening):
        """Test game results are free text."""
        evening_store.add_player(evening, "Hans")
        player = evening.players[0]
        evening_store.set_game_result(evening, player.id, "wm", " 87 W ")
        assert player.game_results["wm"] == " 87 W "

    def test_rename_and_presence(self, evening_store, evening):
        """Test player field edits."""
        evening_store.add_player(evening, "Hans")
        player = evening.players[0]
        evening_store.rename_player(evening, player, "Hansi")
        evening_store.set_present(evening, player, False)
        assert player.name == "Hansi"
        assert player.present is False

    def test_remove_player(self, evening_store, evening, storage):
        """Test removal persists the whole collection."""
        evening_store.add_player(evening, "Hans")
        evening_store.add_player(evening, "Grete")
        evening_store.remove_player(evening, evening.players[0])
        assert [p.name for p in evening.players] == ["Grete"]
        assert [p.name for p in storage.load_evenings()[0].players] == ["Grete"]

    def test_replace_makes_last_evening_current(self, evening_store, storage):
        """Test loading a collection picks the newest evening."""
        evening_store.create_evening(date(2024, 3, 1))
        evening_store.create_evening(date(2024, 3, 8))
        loaded = EveningRecordStore(storage, storage.load_evenings())
        assert loaded.current.date == date(2024, 3, 8)

    def test_write_failure(self, evening_store, evening, storage):
        """Test a failed write keeps the edit in memory."""
        storage.fail_writes = True
        result = evening_store.set_notes(evening, "Bahn 3")
        assert result.persisted is False
        assert evening.notes == "Bahn 3"


class TestSavedPlayerRoster:
    """Tests for SavedPlayerRoster."""

    def test_add_name(self, storage):
        """Test names are trimmed and persisted."""
        roster = SavedPlayerRoster(storage)
        assert roster.add_name(" Hans ").success
        assert roster.names == ["Hans"]
        assert storage.load_saved_players() == ["Hans"]

    def test_duplicates_and_blanks_ignored(self, storage):
        """Test case-insensitive duplicates and blank names are ignored."""
        roster = SavedPlayerRoster(storage, ["Hans"])
        assert roster.add_name("hans").error_code == "ignored"
        assert roster.add_name("  ").error_code == "ignored"
        assert roster.names == ["Hans"]
        assert storage.write_count == 0

    def test_initial_names_deduplicated(self, storage):
        """Test the constructor cleans its input."""
        roster = SavedPlayerRoster(storage, ["Hans", "HANS", "", "Grete"])
        assert roster.names == ["Hans", "Grete"]
        assert "grete" in roster

    def test_remove_name(self, storage):
        """Test removal by name ignores case."""
        roster = SavedPlayerRoster(storage, ["Hans", "Grete"])
        roster.remove_name("GRETE")
        assert roster.names == ["Hans"]
        assert roster.remove_name("Otto").error_code == "not_found"


class TestLongInput:
    """Very long names and labels are stored and persisted like short ones."""

    def test_long_player_name(self, evening_store, evening, storage):
        """Test a 600-character player name."""
        result = evening_store.add_player(evening, "H" * 600)
        assert result.success and result.persisted
        assert storage.load_evenings()[0].players[0].name == "H" * 600

    def test_long_penalty_id_count(self, evening_store, evening, storage):
        """Test a count for a 600-character penalty id."""
        evening_store.add_player(evening, "Hans")
        player = evening.players[0]
        result = evening_store.set_penalty_count(evening, player, "k" * 600, "2")
        assert result.persisted
        assert storage.load_evenings()[0].players[0].penalty_counts["k" * 600] == 2

    def test_long_saved_name(self, storage):
        """Test a 600-character saved player name."""
        roster = SavedPlayerRoster(storage)
        result = roster.add_name("G" * 600)
        assert result.success and result.persisted
        assert storage.load_saved_players() == ["G" * 600]

    def test_long_labels(self, config_store, storage):
        """Test 600-character penalty and game type labels."""
        assert config_store.add_penalty("P" * 600, unit_price=1).persisted
        assert config_store.add_game_type("G" * 600).persisted
        stored = storage.load_configuration(Configuration())
        assert stored.has_penalty("p" * 600)
        assert stored.has_game_type("g" * 600)

    def test_long_duplicate_label_still_reports_duplicate(self, config_store):
        """Test the duplicate path with a long label raises DuplicateIdError only."""
        config_store.add_penalty("P" * 600)
        with pytest.raises(DuplicateIdError):
            config_store.add_penalty("P" * 600)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
