"""Capability protocols consumed by the history engine."""

from __future__ import annotations

from typing import Any, Literal, Mapping, Protocol, Tuple, TypeVar

Element = Mapping[str, Any]
ElementsMap = Mapping[str, Element]
AppState = Mapping[str, Any]

ModifierOptions = Literal["inserted", "deleted"]

_E = TypeVar("_E", bound="ElementsChange")
_A = TypeVar("_A", bound="AppStateChange")


class ElementsChange(Protocol):
    """Reversible change to document content, keyed by element id."""

    def inverse(self: _E) -> _E:
        ...

    def is_empty(self) -> bool:
        ...

    def apply_to(
        self, elements: ElementsMap, snapshot_elements: ElementsMap
    ) -> Tuple[ElementsMap, bool]:
        """Return the updated elements and whether the result is visibly different."""
        ...

    def apply_latest_changes(
        self: _E, elements: ElementsMap, modifier_options: ModifierOptions
    ) -> _E:
        """Refresh the ``modifier_options`` side against the live ``elements``."""
        ...


class AppStateChange(Protocol):
    """Reversible change to non-content state (selection, view, ...)."""

    def inverse(self: _A) -> _A:
        ...

    def is_empty(self) -> bool:
        ...

    def apply_to(
        self, app_state: AppState, elements: ElementsMap
    ) -> Tuple[AppState, bool]:
        ...


class SnapshotLike(Protocol):
    """Read-only merge base; only ``elements`` is consulted."""

    @property
    def elements(self) -> ElementsMap:
        ...


__all__ = [
    "AppState",
    "AppStateChange",
    "Element",
    "ElementsChange",
    "ElementsMap",
    "ModifierOptions",
    "SnapshotLike",
]
