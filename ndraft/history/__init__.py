"""Undo history."""
from ndraft.history.stack import HistoryStack

__all__ = ["HistoryStack"]
