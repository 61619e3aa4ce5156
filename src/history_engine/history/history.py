"""Linear undo/redo history with rebase-on-replay."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from history_engine.changes import (
    AppState,
    AppStateChange,
    ElementsChange,
    ElementsMap,
    SnapshotLike,
)
from history_engine.emitter import Emitter
from history_engine.runtime.telemetry import record_event, span

from .entry import HistoryEntry

HistoryResult = Tuple[ElementsMap, AppState]
HistoryAction = Callable[[ElementsMap], Optional[HistoryEntry]]


@dataclass(frozen=True, slots=True)
class HistoryChangedEvent:
    """Stack emptiness at the moment of emission."""

    is_undo_stack_empty: bool = True
    is_redo_stack_empty: bool = True


class History:
    """Owns the undo and redo stacks and replays entries across them.

    Entries are rebased against the live elements whenever they move between
    stacks, so history survives edits made by other actors in the meantime.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self.on_history_changed: Emitter[HistoryChangedEvent] = Emitter()
        self._undo_stack: List[HistoryEntry] = []
        self._redo_stack: List[HistoryEntry] = []
        self._logger_name = logger_name

    @property
    def undo_stack(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._undo_stack)

    @property
    def redo_stack(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._redo_stack)

    @property
    def is_undo_stack_empty(self) -> bool:
        return not self._undo_stack

    @property
    def is_redo_stack_empty(self) -> bool:
        return not self._redo_stack

    def clear(self) -> None:
        self._undo_stack.clear()
        self._redo_stack.clear()

    def record(
        self, elements_change: ElementsChange, app_state_change: AppStateChange
    ) -> None:
        """Record a local change; empty changes are dropped without notice."""

        entry = HistoryEntry.create(app_state_change, elements_change)
        if entry.is_empty():
            return

        with span(
            "history::record",
            logger_name=self._logger_name,
            component="history",
        ) as handle:
            self._undo_stack.append(entry)

            # app-state-only entries (e.g. a click that deselects) keep the
            # redo stack alive
            if not entry.is_elements_change_empty():
                handle.add_metadata("dropped_redo", len(self._redo_stack))
                self._redo_stack.clear()

            handle.add_metadata("undo_size", len(self._undo_stack))
            self._notify()

    def undo(
        self, elements: ElementsMap, app_state: AppState, snapshot: SnapshotLike
    ) -> Optional[HistoryResult]:
        return self._perform("undo", self._undo_once, elements, app_state, snapshot)

    def redo(
        self, elements: ElementsMap, app_state: AppState, snapshot: SnapshotLike
    ) -> Optional[HistoryResult]:
        return self._perform("redo", self._redo_once, elements, app_state, snapshot)

    def _perform(
        self,
        label: str,
        action: HistoryAction,
        elements: ElementsMap,
        app_state: AppState,
        snapshot: SnapshotLike,
    ) -> Optional[HistoryResult]:
        with span(
            f"history::{label}",
            logger_name=self._logger_name,
            component="history",
        ) as handle:
            try:
                entry = action(elements)
                if entry is None:
                    handle.add_metadata("result", "empty")
                    return None

                next_elements, next_app_state = elements, app_state
                skipped = 0
                # keep popping while entries turn out to be no-ops on the live scene
                while entry is not None:
                    next_elements, next_app_state, visible = entry.apply_to(
                        next_elements, next_app_state, snapshot
                    )
                    if visible:
                        break

                    skipped += 1
                    record_event(
                        f"history.{label}.skip",
                        level="debug",
                        data={"skipped": skipped},
                        logger_name=self._logger_name,
                    )
                    entry = action(elements)

                handle.add_metadata("skipped", skipped)
                return next_elements, next_app_state
            finally:
                self._notify()

    def _undo_once(self, elements: ElementsMap) -> Optional[HistoryEntry]:
        if not self._undo_stack:
            return None

        undo_entry = self._undo_stack.pop()
        # what the undo removes is re-inserted by a later redo
        self._redo_stack.append(undo_entry.apply_latest_changes(elements, "inserted"))
        return undo_entry.inverse()

    def _redo_once(self, elements: ElementsMap) -> Optional[HistoryEntry]:
        if not self._redo_stack:
            return None

        redo_entry = self._redo_stack.pop()
        self._undo_stack.append(redo_entry.apply_latest_changes(elements, "deleted"))
        return redo_entry

    def _notify(self) -> None:
        self.on_history_changed.trigger(
            HistoryChangedEvent(self.is_undo_stack_empty, self.is_redo_stack_empty)
        )


__all__ = ["History", "HistoryChangedEvent", "HistoryResult"]
