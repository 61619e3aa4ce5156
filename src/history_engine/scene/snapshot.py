"""Read-only merge base handed to the history engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from history_engine.changes import AppState, Element, ElementsMap


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Last known-good scene state.

    Element payloads are shared with the live scene, which is safe because
    the scene replaces element dicts instead of mutating them.
    """

    elements: Mapping[str, Element] = field(default_factory=dict)
    app_state: AppState = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", MappingProxyType(dict(self.elements)))
        object.__setattr__(self, "app_state", MappingProxyType(dict(self.app_state)))

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls()

    @classmethod
    def capture(cls, elements: ElementsMap, app_state: AppState) -> "Snapshot":
        return cls(elements=elements, app_state=app_state)


__all__ = ["Snapshot"]
