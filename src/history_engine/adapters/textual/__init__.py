"""Textual adapter; the demo app lives in ``history_engine.adapters.textual.app``."""

from .controller import TextualHistoryAdapter, TextualUIHooks

__all__ = ["TextualHistoryAdapter", "TextualUIHooks"]
