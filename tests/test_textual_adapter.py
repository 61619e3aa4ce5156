from __future__ import annotations

from typing import List, Tuple

from history_engine.adapters.textual import TextualHistoryAdapter, TextualUIHooks
from history_engine.history import HistoryChangedEvent
from history_engine.scene import Scene, SceneView


def make_adapter(
    scene: Scene,
) -> Tuple[TextualHistoryAdapter, List[SceneView], List[HistoryChangedEvent], List[str]]:
    views: List[SceneView] = []
    events: List[HistoryChangedEvent] = []
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_scene=views.append,
        update_history=events.append,
        update_status=statuses.append,
    )
    return TextualHistoryAdapter(scene, hooks), views, events, statuses


def test_adapter_pushes_initial_state() -> None:
    adapter, views, events, _ = make_adapter(Scene(name="ui"))

    assert views[0].label == "initial"
    assert events == [HistoryChangedEvent(True, True)]
    adapter.close()


def test_adapter_tracks_button_state_through_undo_and_redo() -> None:
    scene = Scene()
    adapter, _, events, statuses = make_adapter(scene)

    scene.add_element({"id": "a"})
    assert events[-1] == HistoryChangedEvent(False, True)

    assert adapter.handle_textual_key("ctrl+z") is True
    assert events[-1] == HistoryChangedEvent(True, False)
    assert statuses[-1] == "undo"

    assert adapter.handle_textual_key("ctrl+y") is True
    assert events[-1] == HistoryChangedEvent(False, True)
    assert statuses[-1] == "redo"


def test_adapter_reports_empty_and_ignores_other_keys() -> None:
    adapter, _, _, statuses = make_adapter(Scene())

    assert adapter.handle_textual_key("x") is False
    adapter.handle_textual_key("ctrl+shift+z")

    assert statuses == ["redo:empty"]


def test_adapter_reports_noop_when_every_entry_was_skipped() -> None:
    scene = Scene()
    scene.add_element({"id": "a"})
    scene.apply_remote({"a": {**scene.elements["a"], "is_deleted": True}})
    adapter, _, _, statuses = make_adapter(scene)

    assert adapter.undo() is False
    assert statuses == ["undo:noop"]


def test_adapter_close_unsubscribes() -> None:
    scene = Scene()
    adapter, views, events, _ = make_adapter(scene)
    adapter.close()

    scene.add_element({"id": "a"})

    assert len(views) == 1
    assert len(events) == 1


def test_adapter_log_lines_include_stack_sizes() -> None:
    scene = Scene(name="logged")
    lines: List[str] = []
    adapter = TextualHistoryAdapter(
        scene, TextualUIHooks(update_scene=lambda view: None, log=lines.append)
    )

    scene.add_element({"id": "a"})
    adapter.undo()

    assert any(line.startswith("history ->") and "undo=0" in line for line in lines)
    assert any("scene='logged'" in line for line in lines)
