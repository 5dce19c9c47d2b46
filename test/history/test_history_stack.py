"""Tests for the bounded undo history."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from ndraft.cards import CardStore
from ndraft.exceptions import EmptyHistoryError
from ndraft.history import HistoryStack
from ndraft.models import ThemeUpdate


@pytest.fixture
def store(logger):
    return CardStore(logger=logger)


@pytest.fixture
def history(store, logger):
    return HistoryStack(store, logger=logger)


class TestHistoryStack:
    """Tests for HistoryStack."""

    def test_capacity_evicts_oldest(self, store, history):
        """Test eleven snapshots keep the newest ten."""
        for index in range(11):
            history.snapshot(f"step {index}")

        assert len(history) == 10
        assert history.labels()[0] == "step 1"
        assert history.labels()[-1] == "step 10"

    def test_undo_restores_snapshot(self, store, history):
        """Test undo brings back the cards of the newest snapshot."""
        card_id = store.create_card("q", "original")
        history.snapshot("Manual Edit")
        store.update_card(card_id, r="edited")
        store.create_card("extra")

        label = history.undo()

        assert label == "Manual Edit"
        assert store.card_ids() == [card_id]
        assert store.get_card(card_id).r == "original"
        assert len(history) == 0

    def test_empty_undo_raises_and_changes_nothing(self, store, history):
        """Test undo on an empty history leaves the store untouched."""
        store.create_card("q", "r")
        before = store.snapshot_state()

        with pytest.raises(EmptyHistoryError):
            history.undo()

        assert store.snapshot_state() == before

    def test_snapshot_is_deep_copy(self, store, history):
        """Test later edits never leak into a snapshot."""
        card_id = store.create_card("q", "before")
        entry = history.snapshot("Snap")
        store.update_card(card_id, r="after")

        assert entry.cards[0].r == "before"
        assert history.peek().cards[0].r == "before"

    def test_locked_theme_not_restored(self, store, history):
        """Test undo keeps a locked live theme."""
        history.snapshot("Before theme")
        store.apply_theme_update(ThemeUpdate(name="Gold"))
        store.set_theme_locked(True)

        history.undo()

        assert store.theme.name == "Gold"
        assert store.theme.locked is True

    def test_unlocked_theme_restored(self, store, history):
        """Test undo restores the theme when unlocked."""
        original = store.theme.name
        history.snapshot("Before theme")
        store.apply_theme_update(ThemeUpdate(name="Gold"))

        history.undo()

        assert store.theme.name == original

    def test_clear(self, history):
        """Test clearing the history."""
        history.snapshot("a")
        history.clear()

        assert len(history) == 0
        assert history.peek() is None

    def test_invalid_capacity(self, store):
        """Test capacity must be positive."""
        with pytest.raises(ValueError):
            HistoryStack(store, capacity=0)


class TestHistoryStackThreads:
    """Tests for HistoryStack driven from several OS threads."""

    def test_concurrent_snapshots_and_undos(self, store, history):
        """Test concurrent snapshots, undos and card edits respect the capacity."""
        lengths = []

        def exercise(index):
            card_id = store.create_card(f"card {index}", "r")
            history.snapshot(f"step {index}")
            if index % 3 == 0:
                try:
                    history.undo()
                except EmptyHistoryError:
                    pass
            lengths.append(len(history))
            return card_id

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(exercise, range(300)))

        labels = history.labels()
        assert max(lengths) <= history.capacity
        assert len(history) <= history.capacity
        assert len(labels) == len(set(labels))
        assert all(label.startswith("step ") for label in labels)
