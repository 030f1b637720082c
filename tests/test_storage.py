"""Tests for the storage backends."""

import json
import pytest
from datetime import date

from kegelbuch.config import StorageSettings
from kegelbuch.models.ledger import Configuration, Evening, PenaltyDefinition, Player
from kegelbuch.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    StorageWriteError,
)


@pytest.fixture
def file_storage(tmp_path):
    return JsonFileStorage(data_dir=tmp_path / "data", settings=StorageSettings())


@pytest.fixture
def sample_evening():
    return Evening(
        date=date(2024, 3, 1),
        notes="Bahn 2",
        players=[Player(name="Hans", penalty_counts={"kalle": 2}, game_results={"wm": "87"})],
    )


class TestJsonFileStorage:
    """Tests for JsonFileStorage."""

    def test_missing_files_give_defaults(self, file_storage):
        """Test a fresh data directory."""
        default = Configuration(entry_fee=6.0)
        assert file_storage.load_configuration(default) is default
        assert file_storage.load_evenings() == []
        assert file_storage.load_saved_players() == []
        assert not file_storage.has_configuration()

    def test_configuration_roundtrip(self, file_storage, kegel_config):
        """Test save then load returns an equal configuration."""
        file_storage.save_configuration(kegel_config)
        assert file_storage.has_configuration()
        assert file_storage.load_configuration(Configuration()) == kegel_config

    def test_evenings_roundtrip(self, file_storage, sample_evening):
        """Test evenings survive the file round trip."""
        file_storage.save_evenings([sample_evening])
        assert file_storage.load_evenings() == [sample_evening]

    def test_files_use_camel_case(self, file_storage, sample_evening):
        """Test the on-disk document layout."""
        file_storage.save_evenings([sample_evening])
        raw = json.loads(file_storage.evenings_path.read_text(encoding="utf-8"))
        assert raw[0]["players"][0]["gameResults"] == {"wm": "87"}
        assert file_storage.evenings_path.name == "kegelbuch_kegelabende.json"

    def test_no_temporary_file_left(self, file_storage):
        """Test the atomic write cleans up after itself."""
        file_storage.save_saved_players(["Hans"])
        assert [p.name for p in file_storage.data_dir.iterdir()] == ["kegelbuch_spieler.json"]

    def test_failed_write_removes_temporary_file(self, file_storage, monkeypatch):
        """Test a serialization error leaves the old file and no .tmp behind."""
        file_storage.save_saved_players(["Hans"])

        def broken_dump(obj, fp, **kwargs):
            fp.write("[")
            raise TypeError("Object of type set is not JSON serializable")

        monkeypatch.setattr(json, "dump", broken_dump)
        with pytest.raises(StorageWriteError):
            file_storage.save_saved_players(["Grete"])
        monkeypatch.undo()

        assert [p.name for p in file_storage.data_dir.iterdir()] == ["kegelbuch_spieler.json"]
        assert file_storage.load_saved_players() == ["Hans"]

    def test_corrupt_file_gives_default(self, file_storage):
        """Test unreadable JSON is treated as missing."""
        file_storage.data_dir.mkdir(parents=True)
        file_storage.evenings_path.write_text("{not json", encoding="utf-8")
        assert file_storage.load_evenings() == []

    def test_invalid_configuration_gives_default(self, file_storage):
        """Test JSON that does not match the schema is treated as missing."""
        file_storage.data_dir.mkdir(parents=True)
        file_storage.configuration_path.write_text(
            json.dumps({"penalties": [{"id": "Not A Slug", "label": "x"}]}),
            encoding="utf-8",
        )
        default = Configuration()
        assert file_storage.load_configuration(default) is default

    def test_clear_all(self, file_storage, kegel_config):
        """Test clearing removes every file."""
        file_storage.save_configuration(kegel_config)
        file_storage.save_saved_players(["Hans"])
        file_storage.clear_all()
        assert not file_storage.has_configuration()
        assert file_storage.load_saved_players() == []
        file_storage.clear_all()

    def test_unwritable_location_raises(self, tmp_path):
        """Test write failures surface as StorageWriteError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        storage = JsonFileStorage(
            data_dir=blocker / "data",
            settings=StorageSettings(write_attempts=1),
        )
        with pytest.raises(StorageWriteError):
            storage.save_saved_players(["Hans"])


class TestInMemoryStorage:
    """Tests for InMemoryStorage."""

    def test_roundtrip_does_not_alias(self, sample_evening):
        """Test loading returns copies, not the saved objects."""
        storage = InMemoryStorage()
        storage.save_evenings([sample_evening])
        loaded = storage.load_evenings()
        assert loaded == [sample_evening]
        assert loaded[0] is not sample_evening

        sample_evening.notes = "changed"
        assert storage.load_evenings()[0].notes == "Bahn 2"

    def test_fail_writes(self):
        """Test the simulated write failure."""
        storage = InMemoryStorage()
        storage.fail_writes = True
        with pytest.raises(StorageWriteError):
            storage.save_configuration(Configuration(
                penalties=[PenaltyDefinition(id="kalle", label="Kalle")],
            ))
        assert not storage.has_configuration()
        assert storage.write_count == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
