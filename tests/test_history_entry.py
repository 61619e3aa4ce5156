from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

import pytest

from history_engine.changes import Delta, SceneAppStateChange, SceneElementsChange
from history_engine.history import HistoryEntry
from history_engine.scene import Snapshot


@dataclass
class RecordingElementsChange:
    """Fake content change that records how it was called."""

    visible: bool = True
    empty: bool = False
    calls: List[Tuple[str, Any]] = field(default_factory=list)

    def inverse(self) -> "RecordingElementsChange":
        return RecordingElementsChange(self.visible, self.empty, self.calls)

    def is_empty(self) -> bool:
        return self.empty

    def apply_to(
        self, elements: Mapping[str, Any], snapshot_elements: Mapping[str, Any]
    ) -> Tuple[Dict[str, Any], bool]:
        self.calls.append(("apply_to", snapshot_elements))
        return {**elements, "touched": {"id": "touched"}}, self.visible

    def apply_latest_changes(
        self, elements: Mapping[str, Any], modifier_options: str
    ) -> "RecordingElementsChange":
        self.calls.append(("apply_latest_changes", modifier_options))
        return RecordingElementsChange(self.visible, self.empty, self.calls)


@dataclass
class RecordingAppStateChange:
    visible: bool = True
    empty: bool = False
    seen_elements: List[Mapping[str, Any]] = field(default_factory=list)

    def inverse(self) -> "RecordingAppStateChange":
        return RecordingAppStateChange(self.visible, self.empty, self.seen_elements)

    def is_empty(self) -> bool:
        return self.empty

    def apply_to(
        self, app_state: Mapping[str, Any], elements: Mapping[str, Any]
    ) -> Tuple[Dict[str, Any], bool]:
        self.seen_elements.append(elements)
        return dict(app_state), self.visible


def make_entry() -> HistoryEntry:
    elements_change = SceneElementsChange(
        {
            "a": Delta({"x": 0}, {"x": 10}),
            "b": Delta({"is_deleted": True}, {"is_deleted": False}),
        }
    )
    app_state_change = SceneAppStateChange(
        Delta({"selected_element_ids": {}}, {"selected_element_ids": {"a": True}})
    )
    return HistoryEntry.create(app_state_change, elements_change)


def test_app_state_applies_against_updated_elements() -> None:
    elements_change = RecordingElementsChange()
    app_state_change = RecordingAppStateChange()
    entry = HistoryEntry.create(app_state_change, elements_change)
    snapshot = Snapshot.capture({"base": {"id": "base"}}, {})

    next_elements, _, _ = entry.apply_to({}, {}, snapshot)

    assert elements_change.calls == [("apply_to", snapshot.elements)]
    assert app_state_change.seen_elements == [next_elements]
    assert "touched" in next_elements


@pytest.mark.parametrize(
    "elements_visible, app_state_visible, expected",
    [
        (False, False, False),
        (True, False, True),
        (False, True, True),
        (True, True, True),
    ],
)
def test_visible_change_is_either_side(
    elements_visible: bool, app_state_visible: bool, expected: bool
) -> None:
    entry = HistoryEntry.create(
        RecordingAppStateChange(visible=app_state_visible),
        RecordingElementsChange(visible=elements_visible),
    )

    _, _, visible = entry.apply_to({}, {}, Snapshot.empty())

    assert visible is expected


def test_apply_latest_changes_rebases_only_content() -> None:
    elements_change = RecordingElementsChange()
    app_state_change = RecordingAppStateChange()
    entry = HistoryEntry.create(app_state_change, elements_change)

    rebased = entry.apply_latest_changes({}, "inserted")

    assert rebased is not entry
    assert rebased.app_state_change is app_state_change
    assert rebased.elements_change is not elements_change
    assert elements_change.calls == [("apply_latest_changes", "inserted")]


def test_emptiness_checks() -> None:
    both_empty = HistoryEntry.create(
        RecordingAppStateChange(empty=True), RecordingElementsChange(empty=True)
    )
    app_state_only = HistoryEntry.create(
        RecordingAppStateChange(empty=False), RecordingElementsChange(empty=True)
    )

    assert both_empty.is_empty()
    assert not app_state_only.is_empty()
    assert app_state_only.is_elements_change_empty()


def test_inverse_twice_is_original() -> None:
    entry = make_entry()

    assert entry.inverse() != entry
    assert entry.inverse().inverse() == entry


def test_inverse_swaps_both_sides() -> None:
    inverted = make_entry().inverse()

    assert inverted.elements_change.deltas["a"] == Delta({"x": 10}, {"x": 0})
    assert dict(inverted.app_state_change.delta.inserted) == {"selected_element_ids": {}}


def test_entry_is_immutable() -> None:
    entry = make_entry()

    with pytest.raises(AttributeError):
        entry.elements_change = SceneElementsChange.empty()  # type: ignore[misc]
