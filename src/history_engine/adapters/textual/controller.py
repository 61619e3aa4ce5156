"""Textual-facing adapter wiring scene and history events into UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

from history_engine.emitter import Unsubscribe
from history_engine.history import HistoryChangedEvent
from history_engine.scene import Scene, SceneView

UNDO_KEYS = frozenset({"ctrl+z"})
REDO_KEYS = frozenset({"ctrl+y", "ctrl+shift+z"})


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_scene: Callable[[SceneView], None]
    # receives stack emptiness so hosts can enable/disable undo + redo
    update_history: Callable[[HistoryChangedEvent], None] = _noop
    update_status: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


class TextualHistoryAdapter:
    """Bridges a ``Scene`` and its ``History`` to a Textual-friendly surface."""

    def __init__(self, scene: Scene, hooks: TextualUIHooks) -> None:
        self.scene = scene
        self.hooks = hooks
        self._unsubscribers: List[Unsubscribe] = [
            scene.on_change.on(self._handle_scene_change),
            scene.history.on_history_changed.on(self._handle_history_change),
        ]
        self.hooks.update_scene(scene.view("initial"))
        self.hooks.update_history(
            HistoryChangedEvent(
                scene.history.is_undo_stack_empty,
                scene.history.is_redo_stack_empty,
            )
        )

    def handle_textual_key(self, key: str) -> bool:
        """Run undo/redo for the matching shortcut; other keys are ignored."""

        normalized = key.lower()
        self._log_state("key ->", key=normalized)
        if normalized in UNDO_KEYS:
            self.undo()
            return True
        if normalized in REDO_KEYS:
            self.redo()
            return True
        return False

    def undo(self) -> bool:
        return self._replay("undo", self.scene.undo)

    def redo(self) -> bool:
        return self._replay("redo", self.scene.redo)

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _replay(self, label: str, replay: Callable[[], bool]) -> bool:
        history = self.scene.history
        was_empty = (
            history.is_undo_stack_empty
            if label == "undo"
            else history.is_redo_stack_empty
        )
        changed = replay()
        if was_empty:
            status = f"{label}:empty"
        elif changed:
            status = label
        else:
            status = f"{label}:noop"
        self.hooks.update_status(status)
        self._log_state("result <-", action=label, status=status)
        return changed

    def _handle_scene_change(self, view: SceneView) -> None:
        self._log_state("scene ->", label=view.label, revision=view.revision)
        self.hooks.update_scene(view)

    def _handle_history_change(self, event: HistoryChangedEvent) -> None:
        self._log_state(
            "history ->",
            can_undo=not event.is_undo_stack_empty,
            can_redo=not event.is_redo_stack_empty,
        )
        self.hooks.update_history(event)

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        history = self.scene.history
        return {
            "scene": self.scene.name,
            "revision": self.scene.revision,
            "undo": len(history.undo_stack),
            "redo": len(history.redo_stack),
        }


__all__ = ["TextualHistoryAdapter", "TextualUIHooks"]
