"""Executable Textual app demoing undo/redo over a small shared scene."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use history_engine.adapters.textual.app"
    ) from exc

from history_engine.history import HistoryChangedEvent
from history_engine.runtime import telemetry
from history_engine.scene import Scene, SceneError, SceneView

from .controller import TextualHistoryAdapter, TextualUIHooks


def create_demo_scene(count: int = 3) -> Scene:
    """Build a scene seeded with ``count`` rectangles and an empty history."""

    scene = Scene(name="demo")
    scene.load(
        {
            f"rect-{index}": {
                "id": f"rect-{index}",
                "type": "rectangle",
                "x": index * 10,
                "y": 0,
                "version": 1,
                "is_deleted": False,
            }
            for index in range(count)
        }
    )
    return scene


@dataclass
class UIState:
    scene_text: str = ""
    history_text: str = ""
    status_text: str = ""


class HistoryEngineApp(App[None]):
    """Minimal Textual UI showing the scene, history state and status."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#scene-view {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
		overflow: auto;
	}

	#history-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("a", "add", "Add"),
        ("m", "move", "Move selected"),
        ("d", "delete", "Delete selected"),
        ("s", "select_next", "Select"),
        ("r", "remote_delete", "Remote delete"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, *, seed: int = 3) -> None:
        super().__init__()
        self._state = UIState()
        self._seed = seed
        self.scene: Scene | None = None
        self.adapter: TextualHistoryAdapter | None = None
        self._scene_widget: Static | None = None
        self._history_widget: Static | None = None
        self._status_widget: Static | None = None
        self._next_id = seed

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="scene-area"):
            self._scene_widget = Static("", id="scene-view")
            yield self._scene_widget
        self._history_widget = Static("", id="history-line")
        self._status_widget = Static("", id="status-line")
        yield self._history_widget
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        self.scene = create_demo_scene(self._seed)
        hooks = TextualUIHooks(
            update_scene=self._update_scene,
            update_history=self._update_history,
            update_status=self._update_status,
            log=self.log,
        )
        self.adapter = TextualHistoryAdapter(self.scene, hooks)

    def on_unmount(self) -> None:
        if self.adapter:
            self.adapter.close()
            self.adapter = None

    def on_key(self, event: events.Key) -> None:
        if self.adapter and self.adapter.handle_textual_key(event.key):
            event.stop()

    def action_add(self) -> None:
        if not self.scene:
            return
        element_id = f"rect-{self._next_id}"
        self._next_id += 1
        self.scene.add_element(
            {"id": element_id, "type": "rectangle", "x": 0, "y": self._next_id}
        )
        self._update_status(f"added {element_id}")

    def action_move(self) -> None:
        def move(scene: Scene, element_id: str) -> None:
            x = int(scene.elements[element_id].get("x", 0))
            scene.update_element(element_id, x=x + 5)

        self._with_selection("move", move)

    def action_delete(self) -> None:
        self._with_selection(
            "delete", lambda scene, element_id: scene.delete_element(element_id)
        )

    def action_select_next(self) -> None:
        if not self.scene:
            return
        visible = sorted(self.scene.visible_elements())
        if not visible:
            self._update_status("nothing to select")
            return
        current = self.scene.selected_ids
        index = visible.index(current[0]) + 1 if current and current[0] in visible else 0
        self.scene.select(visible[index % len(visible)])

    def action_remote_delete(self) -> None:
        """Simulate a collaborator deleting the newest visible element."""

        if not self.scene:
            return
        visible = self.scene.visible_elements()
        if not visible:
            self._update_status("nothing to delete remotely")
            return
        element_id = max(visible, key=lambda key: visible[key].get("version", 0))
        element = visible[element_id]
        self.scene.apply_remote(
            {
                element_id: {
                    **element,
                    "is_deleted": True,
                    "version": int(element.get("version", 0)) + 1,
                }
            }
        )
        self._update_status(f"remote deleted {element_id}")

    def _with_selection(self, label: str, edit) -> None:
        if not self.scene:
            return
        selected = self.scene.selected_ids
        if not selected:
            self._update_status(f"{label}: nothing selected")
            return
        try:
            with self.scene.transaction(label):
                for element_id in selected:
                    edit(self.scene, element_id)
        except SceneError as exc:
            self._update_status(f"{label}: {exc}")

    def _update_scene(self, view: SceneView) -> None:
        lines = []
        selected = view.app_state.get("selected_element_ids") or {}
        for element_id, element in sorted(view.elements.items()):
            if element.get("is_deleted", False):
                continue
            marker = "*" if element_id in selected else " "
            lines.append(
                f"{marker} {element_id:<10} x={element.get('x')} y={element.get('y')}"
                f" v{element.get('version')}"
            )
        self._state.scene_text = "\n".join(lines) or "(empty scene)"
        if self._scene_widget:
            self._scene_widget.update(self._state.scene_text)

    def _update_history(self, event: HistoryChangedEvent) -> None:
        undo = "undo" if not event.is_undo_stack_empty else "----"
        redo = "redo" if not event.is_redo_stack_empty else "----"
        self._state.history_text = f"[ctrl+z] {undo}  [ctrl+y] {redo}"
        if self._history_widget:
            self._history_widget.update(self._state.history_text)

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)


def _env_int(key: str, fallback: int) -> int:
    value = os.environ.get(key)
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the history engine Textual demo.")
    parser.add_argument(
        "--seed",
        type=int,
        default=_env_int("HISTORY_ENGINE_DEMO_SEED", 3),
        help="Number of rectangles in the initial scene (default: 3)",
    )
    parser.add_argument(
        "--log-preset",
        choices=("development", "production", "performance"),
        default=None,
        help="telelog preset for engine telemetry (default: HISTORY_ENGINE_PRESET)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    HistoryEngineApp(seed=max(args.seed, 0)).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
