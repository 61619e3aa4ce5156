"""Scene façade combining live elements, app state, snapshot and history."""

from __future__ import annotations

from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from typing import Any, ContextManager, Dict, Mapping, Optional

from history_engine.changes import (
    SELECTION_KEY,
    Element,
    SceneAppStateChange,
    SceneElementsChange,
)
from history_engine.emitter import Emitter
from history_engine.history import History
from history_engine.runtime import telemetry

from .snapshot import Snapshot


class SceneError(RuntimeError):
    """Raised for edits that reference unknown or conflicting element ids."""

    def __init__(self, message: str, *, element_id: str | None = None) -> None:
        super().__init__(message)
        self.element_id = element_id


@dataclass(slots=True)
class SceneView:
    revision: int
    elements: Mapping[str, Element]
    app_state: Mapping[str, Any]
    label: str


class Scene:
    def __init__(
        self,
        elements: Optional[Mapping[str, Element]] = None,
        app_state: Optional[Mapping[str, Any]] = None,
        *,
        history: Optional[History] = None,
        name: str = "scene",
    ) -> None:
        self.name = name
        self.elements: Dict[str, Element] = dict(elements or {})
        self.app_state: Dict[str, Any] = _with_selection(app_state)
        self.history = history or History()
        self.snapshot = Snapshot.capture(self.elements, self.app_state)
        self.on_change: Emitter[SceneView] = Emitter()
        self.revision = 0
        self._transaction: Optional[Transaction] = None

    @property
    def selected_ids(self) -> tuple[str, ...]:
        return tuple(self.app_state.get(SELECTION_KEY) or {})

    def visible_elements(self) -> Dict[str, Element]:
        return {
            element_id: element
            for element_id, element in self.elements.items()
            if not element.get("is_deleted", False)
        }

    def view(self, label: str = "view") -> SceneView:
        return SceneView(
            revision=self.revision,
            elements=dict(self.elements),
            app_state=dict(self.app_state),
            label=label,
        )

    def transaction(self, label: str) -> "Transaction":
        return Transaction(self, label)

    def add_element(self, element: Mapping[str, Any]) -> Element:
        element_id = element.get("id")
        if not element_id:
            raise SceneError("Element requires an id")
        if element_id in self.elements:
            raise SceneError(
                f"Element '{element_id}' already exists", element_id=element_id
            )

        added = {**element, "id": element_id, "version": 1, "is_deleted": False}
        with self._edit("add_element"):
            self.elements[element_id] = added
        return added

    def update_element(self, element_id: str, **props: Any) -> Element:
        current = self._require(element_id)
        props.pop("id", None)
        props.pop("version", None)
        updated = {**current, **props, "version": int(current.get("version", 0)) + 1}
        with self._edit("update_element"):
            self.elements[element_id] = updated
        return updated

    def delete_element(self, element_id: str) -> Element:
        current = self._require(element_id)
        deleted = {
            **current,
            "is_deleted": True,
            "version": int(current.get("version", 0)) + 1,
        }
        with self._edit("delete_element"):
            self.elements[element_id] = deleted
            if element_id in self.selected_ids:
                self.app_state[SELECTION_KEY] = {
                    selected: True
                    for selected in self.selected_ids
                    if selected != element_id
                }
        return deleted

    def select(self, *element_ids: str) -> None:
        for element_id in element_ids:
            self._require(element_id)
        with self._edit("select"):
            self.app_state[SELECTION_KEY] = dict.fromkeys(element_ids, True)

    def apply_remote(self, elements: Mapping[str, Element]) -> None:
        """Merge elements edited elsewhere; nothing is recorded in history."""

        with telemetry.span(
            "scene::apply_remote",
            component="scene",
            metadata={"scene": self.name, "count": len(elements)},
        ):
            for element_id, element in elements.items():
                self.elements[element_id] = {**element, "id": element_id}
            self._commit("apply_remote")

    def undo(self) -> bool:
        return self._replay("undo")

    def redo(self) -> bool:
        return self._replay("redo")

    def load(
        self,
        elements: Mapping[str, Element],
        app_state: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Replace the whole scene; history from the previous scene is dropped."""

        self.elements = dict(elements)
        self.app_state = _with_selection(app_state)
        self.history.clear()
        self._commit("load")

    def _replay(self, label: str) -> bool:
        if self._transaction is not None:
            raise SceneError(f"Cannot {label} while a transaction is open")
        replay = self.history.undo if label == "undo" else self.history.redo
        with telemetry.span(
            f"scene::{label}", component="scene", metadata={"scene": self.name}
        ) as handle:
            result = replay(self.elements, self.app_state, self.snapshot)
            if result is None:
                handle.add_metadata("result", "empty")
                return False

            next_elements, next_app_state = result
            changed = (
                dict(next_elements) != self.elements
                or dict(next_app_state) != self.app_state
            )
            self.elements = dict(next_elements)
            self.app_state = dict(next_app_state)
            self._commit(label)
            handle.add_metadata("changed", changed)
            return changed

    def _edit(self, label: str) -> ContextManager[object]:
        if self._transaction is not None:
            return nullcontext()
        return Transaction(self, label)

    def _require(self, element_id: str) -> Element:
        element = self.elements.get(element_id)
        if element is None or element.get("is_deleted", False):
            raise SceneError(f"Unknown element '{element_id}'", element_id=element_id)
        return element

    def _commit(self, label: str) -> None:
        self.snapshot = Snapshot.capture(self.elements, self.app_state)
        self.revision += 1
        self.on_change.trigger(self.view(label))


class Transaction(AbstractContextManager["Transaction"]):
    """Groups scene edits into a single history entry.

    On a clean exit the difference between the state at ``__enter__`` and the
    current state is recorded. If the block raises, the scene is rolled back
    and nothing is recorded.
    """

    def __init__(self, scene: Scene, label: str) -> None:
        self.scene = scene
        self.label = label
        self._span_cm: Optional[ContextManager[telemetry.SpanHandle]] = None
        self._elements_before: Dict[str, Element] = {}
        self._app_state_before: Dict[str, Any] = {}

    def __enter__(self) -> "Transaction":
        if self.scene._transaction is not None:
            raise SceneError("A transaction is already open on this scene")
        self._elements_before = dict(self.scene.elements)
        self._app_state_before = dict(self.scene.app_state)
        self._span_cm = telemetry.span(
            name=f"scene::{self.label}",
            component="scene",
            metadata={"scene": self.scene.name},
        )
        self._span_cm.__enter__()
        self.scene._transaction = self
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.scene._transaction = None
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._span_cm is not None:
                self._span_cm.__exit__(exc_type, exc, tb)
        return False

    def commit(self) -> None:
        elements_change = SceneElementsChange.calculate(
            self._elements_before, self.scene.elements
        )
        app_state_change = SceneAppStateChange.calculate(
            self._app_state_before, self.scene.app_state
        )
        self.scene.history.record(elements_change, app_state_change)
        self.scene._commit(self.label)

    def rollback(self) -> None:
        self.scene.elements = self._elements_before
        self.scene.app_state = self._app_state_before


def _with_selection(app_state: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    state = dict(app_state or {})
    state.setdefault(SELECTION_KEY, {})
    return state


__all__ = ["Scene", "SceneError", "SceneView", "Transaction"]
