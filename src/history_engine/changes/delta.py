"""Two-sided partial value delta shared by element and app-state changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Literal, Mapping, Optional

Partial = Mapping[str, Any]
Modifier = Callable[[Partial], Partial]
DeltaSide = Literal["deleted", "inserted", "both"]

_SIDES = ("deleted", "inserted", "both")


class _Removed:
    """Marks a key that is absent on one side of a delta."""

    _instance: Optional["_Removed"] = None

    def __new__(cls) -> "_Removed":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "REMOVED"

    def __reduce__(self) -> str:
        return "REMOVED"


REMOVED = _Removed()


def merge_partial(target: Partial, partial: Partial) -> Dict[str, Any]:
    """Return ``target`` updated with ``partial``; ``REMOVED`` keys are dropped."""

    merged: Dict[str, Any] = dict(target)
    for key, value in partial.items():
        if value is REMOVED:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


@dataclass(frozen=True, slots=True)
class Delta:
    """Values before (``deleted``) and after (``inserted``) a change.

    Only keys that actually changed are carried. A key missing on one side
    holds ``REMOVED`` there. Both sides are frozen into read-only mappings.
    """

    deleted: Partial = field(default_factory=dict)
    inserted: Partial = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "deleted", MappingProxyType(dict(self.deleted)))
        object.__setattr__(self, "inserted", MappingProxyType(dict(self.inserted)))

    @classmethod
    def create(
        cls,
        deleted: Partial,
        inserted: Partial,
        modifier: Optional[Modifier] = None,
        modifier_options: DeltaSide = "both",
    ) -> "Delta":
        if modifier_options not in _SIDES:
            raise ValueError(
                f"Unknown modifier option '{modifier_options}', expected one of {_SIDES}"
            )
        if modifier is None:
            return cls(deleted, inserted)

        if modifier_options in ("deleted", "both"):
            deleted = modifier(deleted)
        if modifier_options in ("inserted", "both"):
            inserted = modifier(inserted)
        return cls(deleted, inserted)

    @classmethod
    def calculate(
        cls,
        prev: Partial,
        next: Partial,
        *,
        ignore: Iterable[str] = (),
    ) -> "Delta":
        skipped = set(ignore)
        deleted: dict[str, Any] = {}
        inserted: dict[str, Any] = {}
        for key in dict.fromkeys([*prev.keys(), *next.keys()]):
            if key in skipped:
                continue
            in_prev = key in prev
            in_next = key in next
            if in_prev and in_next and prev[key] == next[key]:
                continue
            deleted[key] = prev[key] if in_prev else REMOVED
            inserted[key] = next[key] if in_next else REMOVED
        return cls(deleted, inserted)

    @classmethod
    def empty(cls) -> "Delta":
        return cls()

    def inverse(self) -> "Delta":
        return Delta(self.inserted, self.deleted)

    def is_empty(self) -> bool:
        return not self.deleted and not self.inserted

    def is_inserted_different(self, target: Partial) -> bool:
        """Whether merging ``inserted`` into ``target`` would change it."""

        for key, value in self.inserted.items():
            if value is REMOVED:
                if key in target:
                    return True
            elif key not in target or target[key] != value:
                return True
        return False


__all__ = ["Delta", "DeltaSide", "Modifier", "Partial", "REMOVED", "merge_partial"]
