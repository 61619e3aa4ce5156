"""Undo/redo history: entries, stacks and change notifications."""

from .entry import HistoryEntry
from .history import History, HistoryChangedEvent, HistoryResult

__all__ = [
    "History",
    "HistoryChangedEvent",
    "HistoryEntry",
    "HistoryResult",
]
