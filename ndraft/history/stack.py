"""Bounded undo history."""

import threading
import time
from collections import deque
from typing import Deque, List, Optional

from ndraft.cards.store import CardStore
from ndraft.config_docs import DEFAULT_HISTORY_CAPACITY
from ndraft.exceptions import EmptyHistoryError
from ndraft.logger import Logger, session_logger
from ndraft.models import HistoryEntry


class HistoryStack:
    """
    Snapshots of the card board taken before each mutation:
    - at most ``capacity`` entries, the oldest evicted first
    - entries are deep copies, later edits never reach them
    - thread-safe, with its own lock
    """

    def __init__(
        self,
        store: CardStore,
        capacity: int = DEFAULT_HISTORY_CAPACITY,
        logger: Optional[Logger] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.store = store
        self.capacity = capacity
        self.logger = logger or session_logger
        self._lock = threading.Lock()
        self._entries: Deque[HistoryEntry] = deque(maxlen=capacity)

    def snapshot(self, label: str) -> HistoryEntry:
        state = self.store.snapshot_state()
        entry = HistoryEntry(
            cards=tuple(state.cards),
            theme=state.theme,
            timestamp=time.time(),
            label=label,
        )
        with self._lock:
            if len(self._entries) == self.capacity:
                self.logger.debug("History full, evicting oldest", evicted=self._entries[0].label)
            self._entries.append(entry)
        self.logger.info("Saved", label=label, depth=len(self))
        return entry

    def undo(self) -> str:
        """Restore the newest snapshot and return its label.

        The theme is only restored while the live theme is unlocked.

        Raises:
            EmptyHistoryError: nothing to undo; the store is left untouched
        """
        with self._lock:
            if not self._entries:
                raise EmptyHistoryError()
            entry = self._entries.pop()

        theme = None if self.store.theme.locked else entry.theme
        self.store.restore(entry.cards, theme)
        self.logger.info("Undid", label=entry.label, theme_restored=theme is not None)
        return entry.label

    def peek(self) -> Optional[HistoryEntry]:
        with self._lock:
            return self._entries[-1] if self._entries else None

    def labels(self) -> List[str]:
        """Oldest first."""
        with self._lock:
            return [entry.label for entry in self._entries]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
