"""App-state change (selection and other non-content state)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from .base import AppState, ElementsMap
from .delta import REMOVED, Delta, merge_partial

SELECTION_KEY = "selected_element_ids"


@dataclass(frozen=True, slots=True)
class SceneAppStateChange:
    delta: Delta = field(default_factory=Delta)

    @classmethod
    def empty(cls) -> "SceneAppStateChange":
        return cls()

    @classmethod
    def calculate(cls, prev: AppState, next: AppState) -> "SceneAppStateChange":
        return cls(Delta.calculate(prev, next))

    def inverse(self) -> "SceneAppStateChange":
        return SceneAppStateChange(self.delta.inverse())

    def is_empty(self) -> bool:
        return self.delta.is_empty()

    def apply_to(
        self, app_state: AppState, elements: ElementsMap
    ) -> Tuple[Dict[str, Any], bool]:
        """Merge ``inserted`` into ``app_state``.

        Selection is resolved against ``elements`` (the post-content-change
        elements), so ids of missing or deleted elements are dropped.
        """

        next_state = merge_partial(app_state, self.delta.inserted)
        if self.delta.inserted.get(SELECTION_KEY, REMOVED) is not REMOVED:
            selected = next_state.get(SELECTION_KEY) or {}
            next_state[SELECTION_KEY] = {
                element_id: True
                for element_id in selected
                if element_id in elements
                and not elements[element_id].get("is_deleted", False)
            }
        return next_state, next_state != dict(app_state)


__all__ = ["SELECTION_KEY", "SceneAppStateChange"]
