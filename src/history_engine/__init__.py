"""Undo/redo history engine for collaboratively edited scenes."""

from .emitter import Emitter
from .history import History, HistoryChangedEvent, HistoryEntry

__all__ = [
    "Emitter",
    "History",
    "HistoryChangedEvent",
    "HistoryEntry",
    "adapters",
    "changes",
    "history",
    "runtime",
    "scene",
]

__version__ = "0.1.0"
