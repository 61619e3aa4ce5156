"""Reversible change algebra: capability protocols and a dict-based reference."""

from .app_state import SELECTION_KEY, SceneAppStateChange
from .base import (
    AppState,
    AppStateChange,
    Element,
    ElementsChange,
    ElementsMap,
    ModifierOptions,
    SnapshotLike,
)
from .delta import REMOVED, Delta, merge_partial
from .elements import SceneElementsChange

__all__ = [
    "AppState",
    "AppStateChange",
    "Delta",
    "Element",
    "ElementsChange",
    "ElementsMap",
    "ModifierOptions",
    "REMOVED",
    "SELECTION_KEY",
    "SceneAppStateChange",
    "SceneElementsChange",
    "SnapshotLike",
    "merge_partial",
]
