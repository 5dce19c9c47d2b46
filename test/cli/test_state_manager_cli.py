"""Tests for the state manager CLI commands."""

import argparse
import json

import pytest

from ndraft.models import AppState, Card
from ndraft.storage import StateStore
from scripts import state_manager


@pytest.fixture
def state_file(test_data_dir):
    path = test_data_dir / "cli_state.json"
    StateStore(str(path)).save(AppState(cards=[Card(id="c1", q="Question", r="Answer")]))
    return path


def make_args(state_file, **kwargs):
    return argparse.Namespace(state_file=str(state_file), **kwargs)


class TestStateManagerCli:
    """Tests for show, export, import and reset."""

    def test_show(self, state_file):
        """Test summarizing an existing document."""
        assert state_manager.show_state(make_args(state_file, verbose=True)) == 0

    def test_export(self, state_file, tmp_path):
        """Test exporting to a chosen file."""
        output = tmp_path / "backup.json"

        assert state_manager.export_state(make_args(state_file, output=str(output))) == 0
        assert json.loads(output.read_text(encoding="utf-8"))["cards"][0]["id"] == "c1"

    def test_import(self, state_file, tmp_path):
        """Test importing replaces the cards."""
        source = tmp_path / "import.json"
        source.write_text(json.dumps({"cards": [{"id": "n1", "q": "New", "r": "Card"}]}), encoding="utf-8")

        assert state_manager.import_state(make_args(state_file, input=str(source))) == 0
        assert [card.id for card in StateStore(str(state_file)).load().cards] == ["n1"]

    def test_import_malformed(self, state_file, tmp_path):
        """Test a malformed import fails and keeps the document."""
        source = tmp_path / "broken.json"
        source.write_text("[not json", encoding="utf-8")

        assert state_manager.import_state(make_args(state_file, input=str(source))) == 1
        assert [card.id for card in StateStore(str(state_file)).load().cards] == ["c1"]

    def test_import_missing_file(self, state_file, tmp_path):
        """Test a missing import file fails."""
        args = make_args(state_file, input=str(tmp_path / "absent.json"))

        assert state_manager.import_state(args) == 1

    def test_reset(self, state_file):
        """Test resetting without confirmation."""
        assert state_manager.reset_state(make_args(state_file, yes=True)) == 0
        assert not state_file.exists()
        assert state_manager.reset_state(make_args(state_file, yes=True)) == 0
