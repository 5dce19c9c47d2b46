"""Persistence for the application state document."""
from ndraft.storage.state_store import StateStore

__all__ = ["StateStore"]
