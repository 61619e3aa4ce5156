from __future__ import annotations

from typing import List

import pytest

from history_engine.history import HistoryChangedEvent
from history_engine.scene import Scene, SceneError, SceneView


def make_scene() -> Scene:
    scene = Scene(name="test")
    scene.add_element({"id": "a", "x": 0})
    scene.add_element({"id": "b", "x": 0})
    return scene


def test_edits_are_recorded_and_undone() -> None:
    scene = make_scene()
    scene.update_element("a", x=10)

    assert scene.undo() is True
    assert scene.elements["a"]["x"] == 0

    assert scene.redo() is True
    assert scene.elements["a"]["x"] == 10
    assert scene.history.is_redo_stack_empty


def test_undo_redo_on_fresh_scene() -> None:
    scene = Scene()

    assert scene.undo() is False
    assert scene.redo() is False


def test_transaction_groups_edits_into_one_entry() -> None:
    scene = make_scene()
    undo_size = len(scene.history.undo_stack)

    with scene.transaction("move_both"):
        scene.update_element("a", x=5)
        scene.update_element("b", x=5)

    assert len(scene.history.undo_stack) == undo_size + 1
    scene.undo()
    assert scene.elements["a"]["x"] == 0
    assert scene.elements["b"]["x"] == 0


def test_failed_transaction_rolls_back_and_records_nothing() -> None:
    scene = make_scene()
    undo_size = len(scene.history.undo_stack)

    with pytest.raises(SceneError):
        with scene.transaction("broken"):
            scene.update_element("a", x=99)
            scene.update_element("missing", x=1)

    assert scene.elements["a"]["x"] == 0
    assert len(scene.history.undo_stack) == undo_size


def test_nested_transaction_is_rejected() -> None:
    scene = make_scene()

    with pytest.raises(SceneError):
        with scene.transaction("outer"):
            with scene.transaction("inner"):
                pass


def test_unknown_and_duplicate_ids_raise() -> None:
    scene = make_scene()

    with pytest.raises(SceneError) as excinfo:
        scene.update_element("nope", x=1)
    assert excinfo.value.element_id == "nope"

    with pytest.raises(SceneError):
        scene.add_element({"id": "a"})

    with pytest.raises(SceneError):
        scene.add_element({"x": 1})


def test_selection_does_not_clear_redo() -> None:
    scene = make_scene()
    scene.update_element("a", x=10)
    scene.undo()
    assert not scene.history.is_redo_stack_empty

    scene.select("b")
    assert not scene.history.is_redo_stack_empty

    scene.update_element("b", x=3)
    assert scene.history.is_redo_stack_empty


def test_delete_drops_element_from_selection_and_undo_restores_both() -> None:
    scene = make_scene()
    scene.select("a")

    scene.delete_element("a")
    assert scene.selected_ids == ()
    assert "a" not in scene.visible_elements()

    scene.undo()
    assert "a" in scene.visible_elements()
    assert scene.selected_ids == ("a",)


def test_undo_skips_entries_for_remotely_deleted_elements() -> None:
    scene = make_scene()
    scene.update_element("b", x=5)
    remote = {**scene.elements["b"], "is_deleted": True, "version": 99}
    scene.apply_remote({"b": remote})
    undo_size = len(scene.history.undo_stack)

    assert scene.undo() is True

    # both entries touching "b" were skipped, the add of "a" was undone
    assert scene.elements["a"]["is_deleted"] is True
    assert scene.history.is_undo_stack_empty
    assert len(scene.history.redo_stack) == undo_size


def test_remote_edits_are_not_recorded() -> None:
    scene = make_scene()
    undo_size = len(scene.history.undo_stack)

    scene.apply_remote({"c": {"id": "c", "x": 1, "version": 1, "is_deleted": False}})

    assert len(scene.history.undo_stack) == undo_size
    assert "c" in scene.snapshot.elements


def test_load_replaces_scene_and_clears_history() -> None:
    scene = make_scene()

    scene.load({"z": {"id": "z", "version": 1, "is_deleted": False}})

    assert list(scene.elements) == ["z"]
    assert scene.history.is_undo_stack_empty
    assert scene.selected_ids == ()


def test_scene_and_history_notifications() -> None:
    scene = Scene()
    views: List[SceneView] = []
    events: List[HistoryChangedEvent] = []
    scene.on_change.on(views.append)
    scene.history.on_history_changed.on(events.append)

    scene.add_element({"id": "a"})
    scene.undo()

    assert [view.label for view in views] == ["add_element", "undo"]
    assert views[-1].revision == scene.revision
    assert events == [HistoryChangedEvent(False, True), HistoryChangedEvent(True, False)]


def test_removed_app_state_key_survives_undo_and_redo() -> None:
    scene = Scene(app_state={"zoom": 2})

    with scene.transaction("reset_zoom"):
        del scene.app_state["zoom"]

    assert scene.undo() is True
    assert scene.app_state["zoom"] == 2
    assert scene.redo() is True
    assert "zoom" not in scene.app_state


def test_removed_element_key_survives_undo_and_redo() -> None:
    scene = Scene()
    scene.add_element({"id": "a", "label": "hi"})

    with scene.transaction("clear_label"):
        current = scene.elements["a"]
        scene.elements["a"] = {
            key: value for key, value in current.items() if key != "label"
        }

    assert scene.undo() is True
    assert scene.elements["a"]["label"] == "hi"
    assert scene.redo() is True
    assert "label" not in scene.elements["a"]


def test_undo_and_redo_are_rejected_inside_a_transaction() -> None:
    scene = make_scene()
    scene.update_element("a", x=10)
    undo_stack = scene.history.undo_stack

    for replay in (scene.undo, scene.redo):
        with pytest.raises(SceneError):
            with scene.transaction("edit"):
                scene.update_element("b", x=7)
                replay()

    assert scene.history.undo_stack == undo_stack
    assert scene.history.is_redo_stack_empty
    assert scene.elements["a"]["x"] == 10
    assert scene.elements["b"]["x"] == 0
