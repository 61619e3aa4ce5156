"""Element-level change over dict-based scene elements."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Tuple

from .base import Element, ElementsMap, ModifierOptions
from .delta import REMOVED, Delta, Modifier, merge_partial

# bookkeeping keys that never take part in a diff
_IGNORED_KEYS = ("id", "version")


def _is_deleted(element: Element) -> bool:
    return bool(element.get("is_deleted", False))


@dataclass(frozen=True, slots=True)
class SceneElementsChange:
    """Per-element deltas keyed by element id.

    Removal is a soft delete: removing an element flips ``is_deleted`` and the
    element keeps its id, so every delta stays addressable after the fact.
    """

    deltas: Mapping[str, Delta] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "deltas", MappingProxyType(dict(self.deltas)))

    def __iter__(self) -> Iterator[Tuple[str, Delta]]:
        return iter(self.deltas.items())

    def __len__(self) -> int:
        return len(self.deltas)

    @classmethod
    def empty(cls) -> "SceneElementsChange":
        return cls()

    @classmethod
    def calculate(
        cls, prev_elements: ElementsMap, next_elements: ElementsMap
    ) -> "SceneElementsChange":
        deltas: Dict[str, Delta] = {}
        for element_id, next_element in next_elements.items():
            prev_element = prev_elements.get(element_id)
            if prev_element is None:
                if _is_deleted(next_element):
                    continue
                inserted = {
                    key: value
                    for key, value in next_element.items()
                    if key not in _IGNORED_KEYS
                }
                inserted["is_deleted"] = False
                deltas[element_id] = Delta({"is_deleted": True}, inserted)
                continue

            delta = Delta.calculate(prev_element, next_element, ignore=_IGNORED_KEYS)
            if not delta.is_empty():
                deltas[element_id] = delta
        return cls(deltas)

    def inverse(self) -> "SceneElementsChange":
        return SceneElementsChange(
            {element_id: delta.inverse() for element_id, delta in self.deltas.items()}
        )

    def is_empty(self) -> bool:
        return all(delta.is_empty() for delta in self.deltas.values())

    def apply_to(
        self, elements: ElementsMap, snapshot_elements: ElementsMap
    ) -> Tuple[Dict[str, Element], bool]:
        next_elements: Dict[str, Element] = dict(elements)
        visible = False

        for element_id, delta in self.deltas.items():
            base = elements.get(element_id)
            if base is None:
                base = snapshot_elements.get(element_id)
            if base is None:
                continue
            if not delta.is_inserted_different(base):
                continue

            updated = merge_partial(base, delta.inserted)
            updated["id"] = element_id
            updated["version"] = int(base.get("version", 0)) + 1
            next_elements[element_id] = updated
            if not (_is_deleted(base) and _is_deleted(updated)):
                visible = True

        return next_elements, visible

    def apply_latest_changes(
        self, elements: ElementsMap, modifier_options: ModifierOptions
    ) -> "SceneElementsChange":
        deltas: Dict[str, Delta] = {}
        for element_id, delta in self.deltas.items():
            latest = elements.get(element_id)
            if latest is None:
                deltas[element_id] = delta
                continue
            deltas[element_id] = Delta.create(
                delta.deleted,
                delta.inserted,
                _latest_values(latest),
                modifier_options,
            )
        return SceneElementsChange(deltas)


def _latest_values(latest: Element) -> Modifier:
    def modifier(partial: Mapping[str, Any]) -> Mapping[str, Any]:
        return {key: latest.get(key, REMOVED) for key in partial}

    return modifier


__all__ = ["SceneElementsChange"]
