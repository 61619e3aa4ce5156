"""Immutable, reversible unit of history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from history_engine.changes import (
    AppState,
    AppStateChange,
    ElementsChange,
    ElementsMap,
    ModifierOptions,
    SnapshotLike,
)


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Content change paired with an app-state change.

    Entries are value objects: ``inverse`` and ``apply_latest_changes`` build
    new entries and never touch the receiver.
    """

    app_state_change: AppStateChange
    elements_change: ElementsChange

    @classmethod
    def create(
        cls, app_state_change: AppStateChange, elements_change: ElementsChange
    ) -> "HistoryEntry":
        return cls(app_state_change, elements_change)

    def inverse(self) -> "HistoryEntry":
        return HistoryEntry(
            self.app_state_change.inverse(),
            self.elements_change.inverse(),
        )

    def apply_to(
        self,
        elements: ElementsMap,
        app_state: AppState,
        snapshot: SnapshotLike,
    ) -> Tuple[ElementsMap, AppState, bool]:
        """Apply content first, then app state against the updated elements.

        The returned flag is true when either side produced a visible change.
        """

        next_elements, elements_visible = self.elements_change.apply_to(
            elements, snapshot.elements
        )
        next_app_state, app_state_visible = self.app_state_change.apply_to(
            app_state, next_elements
        )
        return next_elements, next_app_state, elements_visible or app_state_visible

    def apply_latest_changes(
        self, elements: ElementsMap, modifier_options: ModifierOptions
    ) -> "HistoryEntry":
        """Rebase the content change onto the live ``elements``."""

        updated = self.elements_change.apply_latest_changes(elements, modifier_options)
        return HistoryEntry.create(self.app_state_change, updated)

    def is_empty(self) -> bool:
        return self.app_state_change.is_empty() and self.elements_change.is_empty()

    def is_elements_change_empty(self) -> bool:
        return self.elements_change.is_empty()


__all__ = ["HistoryEntry"]
