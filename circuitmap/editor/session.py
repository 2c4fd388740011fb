"""Editing session: the one object a host UI talks to.

Wires the graph store, history, viewport and pointer interaction together.
Every edit goes through here; store failures are caught at this boundary,
remembered in ``last_error`` and logged, and leave the diagram unchanged.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union

from circuitmap.config import CircuitMapConfig
from circuitmap.diagram.layout import WireRoute, route_wires
from circuitmap.editor.history import HistoryManager, Scheduler, TimerQueue
from circuitmap.editor.interaction import InteractionController
from circuitmap.editor.viewport import Viewport
from circuitmap.errors import DiagramError, MalformedDocument, UnknownId
from circuitmap.types import Edge, Point, TerminalKind
from circuitmap.wiring import document, store
from circuitmap.wiring.catalog import DefinitionCatalog
from circuitmap.wiring.models import Component, ComponentDefinition, Connection, DiagramSnapshot, Terminal

logger = logging.getLogger(__name__)

DefinitionRef = Union[ComponentDefinition, str]


class EditorSession:
    """Owns one diagram, its undo history and its view state."""

    def __init__(
        self,
        config: Optional[CircuitMapConfig] = None,
        catalog: Optional[DefinitionCatalog] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.config = config or CircuitMapConfig()
        self.catalog = catalog or DefinitionCatalog()
        self.history = HistoryManager(
            max_size=self.config.history_limit,
            coalesce_window=self.config.history_coalesce_ms / 1000,
            scheduler=scheduler,
        )
        self.viewport = Viewport(
            zoom_min=self.config.zoom_min,
            zoom_max=self.config.zoom_max,
            zoom_step=self.config.zoom_step,
            wheel_step=self.config.wheel_zoom_step,
        )
        self.interaction = InteractionController(self)
        self.name = document.DEFAULT_NAME
        self.settings: dict[str, Any] = self.config.project_settings()
        self.last_error: Optional[DiagramError] = None
        self.selected_component_id: Optional[str] = None
        self.selected_connection_id: Optional[str] = None

    # -- State --

    @property
    def snapshot(self) -> DiagramSnapshot:
        return self.history.present

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def routes(self) -> list[WireRoute]:
        return route_wires(self.snapshot)

    def tick(self) -> int:
        """Fire due history timers when using the polled scheduler."""
        scheduler = self.history.scheduler
        if isinstance(scheduler, TimerQueue):
            return scheduler.run_due()
        return 0

    # -- Plumbing --

    def _reject(self, action: str, error: DiagramError) -> None:
        self.last_error = error
        level = logging.DEBUG if isinstance(error, UnknownId) else logging.INFO
        logger.log(level, "%s rejected: %s", action, error)

    def _attempt(self, action: str, op: Callable[..., Any], *args: Any) -> Any:
        """Run a store operation against the present snapshot; None if it failed."""
        try:
            result = op(self.snapshot, *args)
        except DiagramError as e:
            self._reject(action, e)
            return None
        self.last_error = None
        return result

    def _commit(self, snapshot: DiagramSnapshot, coalesce: bool = False) -> None:
        if snapshot == self.snapshot:
            return
        if coalesce:
            self.history.record_coalesced(snapshot)
        else:
            self.history.record_immediate(snapshot)

    def _definition(self, ref: DefinitionRef) -> Optional[ComponentDefinition]:
        if isinstance(ref, ComponentDefinition):
            return ref
        found = self.catalog.find(ref)
        if found is None:
            self._reject("lookup", UnknownId("definition", ref))
        return found

    def _prune_selection(self) -> None:
        snap = self.snapshot
        if self.selected_component_id and snap.component(self.selected_component_id) is None:
            self.selected_component_id = None
        if self.selected_connection_id and snap.connection(self.selected_connection_id) is None:
            self.selected_connection_id = None

    # -- Selection --

    def select_component(self, component_id: Optional[str]) -> None:
        self.selected_component_id = component_id
        self.selected_connection_id = None

    def select_connection(self, connection_id: Optional[str]) -> None:
        self.selected_connection_id = connection_id
        self.selected_component_id = None

    def clear_selection(self) -> None:
        self.selected_component_id = None
        self.selected_connection_id = None

    # -- Components --

    def place(self, definition: DefinitionRef, position: Point) -> Optional[Component]:
        found = self._definition(definition)
        if found is None:
            return None
        result = self._attempt("place", store.place, found, position)
        if result is None:
            return None
        snapshot, component = result
        self._commit(snapshot)
        self.select_component(component.id)
        return component

    def move(self, component_id: str, position: Point, coalesce: bool = False) -> bool:
        """Move a component. Drags pass ``coalesce=True`` so a gesture is one undo step."""
        snapshot = self._attempt("move", store.move, component_id, position)
        if snapshot is None:
            return False
        self._commit(snapshot, coalesce=coalesce)
        return True

    def duplicate(self, component_id: str) -> Optional[Component]:
        result = self._attempt("duplicate", store.duplicate, component_id, self.config.duplicate_offset)
        if result is None:
            return None
        snapshot, copy = result
        self._commit(snapshot)
        self.select_component(copy.id)
        return copy

    def delete(self, component_id: str) -> bool:
        result = self._attempt("delete", store.delete, component_id)
        if result is None:
            return False
        self._commit(result[0])
        self._prune_selection()
        return True

    def delete_selected(self) -> bool:
        """Delete whichever component or connection is selected."""
        if self.selected_component_id:
            return self.delete(self.selected_component_id)
        if self.selected_connection_id:
            return self.disconnect(self.selected_connection_id)
        return False

    def swap(self, component_id: str, definition: DefinitionRef) -> bool:
        found = self._definition(definition)
        if found is None:
            return False
        result = self._attempt("swap", store.swap, component_id, found)
        if result is None:
            return False
        self._commit(result[0])
        self._prune_selection()
        return True

    # -- Terminals --

    def add_terminal(self, component_id: str, kind: TerminalKind | str) -> Optional[Terminal]:
        result = self._attempt("add_terminal", store.add_terminal, component_id, kind)
        if result is None:
            return None
        snapshot, terminal = result
        self._commit(snapshot)
        return terminal

    def remove_terminal(self, component_id: str, terminal_id: str) -> bool:
        result = self._attempt("remove_terminal", store.remove_terminal, component_id, terminal_id)
        if result is None:
            return False
        self._commit(result[0])
        self._prune_selection()
        return True

    def reposition_terminal(self, component_id: str, terminal_id: str, edge: Edge, offset: float) -> bool:
        snapshot = self._attempt("reposition_terminal", store.reposition_terminal,
                                 component_id, terminal_id, edge, offset)
        if snapshot is None:
            return False
        self._commit(snapshot)
        return True

    def change_terminal_kind(self, component_id: str, terminal_id: str, kind: TerminalKind | str) -> bool:
        snapshot = self._attempt("change_terminal_kind", store.change_terminal_kind,
                                 component_id, terminal_id, kind)
        if snapshot is None:
            return False
        self._commit(snapshot)
        return True

    def relabel_terminal(self, component_id: str, terminal_id: str, label: str) -> bool:
        snapshot = self._attempt("relabel_terminal", store.relabel_terminal, component_id, terminal_id, label)
        if snapshot is None:
            return False
        self._commit(snapshot)
        return True

    # -- Connections --

    def connect(self, from_terminal_id: str, to_terminal_id: str,
                cable_size: Optional[str] = None) -> Optional[Connection]:
        label = self.config.default_cable_label if cable_size is None else cable_size
        result = self._attempt("connect", store.connect, from_terminal_id, to_terminal_id, label)
        if result is None:
            return None
        snapshot, conn = result
        self._commit(snapshot)
        return conn

    def disconnect(self, connection_id: str) -> bool:
        snapshot = self._attempt("disconnect", store.disconnect, connection_id)
        if snapshot is None:
            return False
        self._commit(snapshot)
        self._prune_selection()
        return True

    def relabel_cable(self, connection_id: str, label: str) -> bool:
        snapshot = self._attempt("relabel_cable", store.relabel_cable, connection_id, label)
        if snapshot is None:
            return False
        self._commit(snapshot)
        return True

    # -- History --

    def undo(self) -> bool:
        done = self.history.undo()
        if done:
            self._prune_selection()
        return done

    def redo(self) -> bool:
        done = self.history.redo()
        if done:
            self._prune_selection()
        return done

    def clear(self) -> None:
        """Empty the diagram and start a fresh history from the empty state."""
        self.history.record_immediate(DiagramSnapshot())
        self.history.reset()
        self.interaction.cancel()
        self.clear_selection()
        logger.info("Diagram cleared")

    # -- Documents --

    def export_document(self) -> dict[str, Any]:
        self.history.flush()
        return document.dump_document(self.snapshot, name=self.name, settings=self.settings)

    def load_document(self, data: Any) -> document.LoadedDocument:
        """Replace the diagram with a document; history does not reach across a load.

        Raises MalformedDocument and keeps the current diagram if validation fails.
        """
        try:
            loaded = document.load_document(data)
        except MalformedDocument as e:
            self.last_error = e
            raise
        self.interaction.cancel()
        self.history.replace(loaded.snapshot)
        self.name = loaded.name
        self.settings = {**self.config.project_settings(), **loaded.settings}
        self.last_error = None
        self.clear_selection()
        logger.info("Loaded document %r: %d components, %d connections",
                    loaded.name, len(loaded.snapshot.components), len(loaded.snapshot.connections))
        return loaded

    def save(self, path: str | Path) -> Path:
        self.history.flush()
        return document.save_document(self.snapshot, path, name=self.name, settings=self.settings)

    def open(self, path: str | Path) -> document.LoadedDocument:
        try:
            data = document.read_document_data(path)
        except MalformedDocument as e:
            self.last_error = e
            raise
        return self.load_document(data)
