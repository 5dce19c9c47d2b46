"""Tests for the state document store."""

import json

import pytest

from ndraft.config import Config
from ndraft.exceptions import MalformedImportError
from ndraft.models import AppState, Card, Settings, StyleOverrides, Theme, ViewMode
from ndraft.storage import StateStore


def sample_state():
    return AppState(
        cards=[
            Card(id="a", q="First", r="One", styles=StyleOverrides(color="red", locked=True)),
            Card(id="b", q="Second", r="Two"),
        ],
        theme=Theme(name="Gold", primary="#b8860b", locked=True),
        settings=Settings(view=ViewMode.GRID, auto_tts=True, proxy_url="http://proxy"),
        session_id="sess_42",
    )


class TestStateStorePersistence:
    """Tests for saving and loading."""

    def test_default_path_follows_data_dir(self, test_data_dir):
        """Test the default path lives in the configured data directory."""
        store = StateStore()

        assert store.path == Config.get_state_file()
        assert store.path.parent == test_data_dir

    def test_missing_file_gives_defaults(self, state_store):
        """Test loading without a document."""
        state = state_store.load()

        assert state.cards == []
        assert state.theme == Theme()
        assert state.session_id.startswith("sess_")

    def test_save_and_load(self, state_store):
        """Test a saved state loads back unchanged."""
        state_store.save(sample_state())
        loaded = state_store.load()

        assert loaded.to_document() == sample_state().to_document()
        assert not state_store.path.with_name(state_store.path.name + ".tmp").exists()

    def test_document_uses_camel_case(self, state_store):
        """Test the persisted keys."""
        state_store.save(sample_state())
        document = json.loads(state_store.path.read_text(encoding="utf-8"))

        assert set(document) == {"cards", "theme", "settings", "sessionId"}
        assert document["theme"]["cardBg"] == Theme().card_bg
        assert document["settings"]["autoTTS"] is True
        assert document["settings"]["view"] == "grid"
        assert document["cards"][0]["styles"] == {"color": "red", "locked": True}

    def test_corrupt_file_gives_defaults(self, state_store):
        """Test unreadable JSON falls back to defaults."""
        state_store.path.write_text("{not json", encoding="utf-8")

        state = state_store.load()

        assert state.cards == []
        assert state.theme == Theme()

    def test_non_object_document_gives_defaults(self, state_store):
        """Test a JSON array document falls back to defaults."""
        state_store.path.write_text("[1, 2]", encoding="utf-8")

        assert state_store.load().cards == []

    def test_bad_cards_skipped(self, state_store):
        """Test invalid and duplicate cards are dropped individually."""
        document = {
            "cards": [
                {"id": "ok", "q": "q", "r": "r", "styles": None},
                {"q": "no id"},
                "not a card",
                {"id": "ok", "q": "dup", "r": "dup"},
            ],
            "theme": {"name": "Ocean", "bg": None},
            "sessionId": "",
        }
        state_store.path.write_text(json.dumps(document), encoding="utf-8")

        state = state_store.load()

        assert [card.id for card in state.cards] == ["ok"]
        assert state.cards[0].styles == StyleOverrides()
        assert state.theme.name == "Ocean"
        assert state.theme.bg == Theme().bg
        assert state.session_id.startswith("sess_")

    def test_delete(self, state_store):
        """Test deleting the document."""
        state_store.save(sample_state())
        state_store.delete()

        assert state_store.exists() is False


class TestStateStoreImport:
    """Tests for export and import parsing."""

    def test_export_parses_back(self, state_store):
        """Test an exported document imports to the same state."""
        text = state_store.export_document(sample_state())
        imported = state_store.parse_document(text, AppState())

        assert imported.to_document() == sample_state().to_document()

    def test_invalid_json_raises(self, state_store):
        """Test invalid JSON is rejected."""
        with pytest.raises(MalformedImportError) as exc_info:
            state_store.parse_document("{oops", AppState())

        assert exc_info.value.message.startswith("Invalid JSON file")

    def test_non_object_raises(self, state_store):
        """Test a JSON value that is not an object is rejected."""
        with pytest.raises(MalformedImportError):
            state_store.parse_document('"text"', AppState())

    def test_absent_sections_keep_current(self, state_store):
        """Test missing theme, settings and session keep the current values."""
        current = sample_state()
        state = state_store.parse_document('{"cards": [{"id": "x", "q": "q", "r": "r"}]}', current)

        assert [card.id for card in state.cards] == ["x"]
        assert state.theme == current.theme
        assert state.settings == current.settings
        assert state.session_id == "sess_42"
