"""Pointer interaction state machine for the canvas.

States: Idle, Panning, DraggingComponent, Connecting. At most one gesture
is active; a gesture never starts while another is in progress. Cancelling
only returns to Idle and never leaves a partial edit behind.

Transitions:
- Idle -> Panning: middle button, or Shift + primary, on empty canvas
- Idle -> DraggingComponent: primary press on a component body
- Idle -> Connecting: primary press on a terminal
- Connecting -> Idle: press on another terminal (connect attempted),
  the same terminal again, empty canvas, or Escape
- any -> Idle: button release ends pan/drag; pointer leaving the canvas
  ends everything
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Optional, Union

from circuitmap.diagram.geometry import HitTarget, active_route_path, hit_test, terminal_absolute_position
from circuitmap.types import Edge, MouseButton, Point

if TYPE_CHECKING:
    from circuitmap.editor.session import EditorSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Panning:
    last_screen: Point


@dataclass(frozen=True)
class DraggingComponent:
    component_id: str
    grab_offset: Point
    moved: bool = False


@dataclass(frozen=True)
class Connecting:
    source_terminal_id: str


InteractionState = Union[Idle, Panning, DraggingComponent, Connecting]

IDLE = Idle()


def _snap(value: float, grid: float) -> float:
    """Snap a coordinate to the grid."""
    return round(value / grid) * grid


class InteractionController:
    """Turns pointer and key events into viewport changes and session edits."""

    def __init__(self, session: EditorSession) -> None:
        self._session = session
        self.state: InteractionState = IDLE
        self.cursor: Point = (0.0, 0.0)  # last pointer position, diagram space

    # -- Queries --

    @property
    def is_idle(self) -> bool:
        return isinstance(self.state, Idle)

    def cursor_style(self) -> str:
        if isinstance(self.state, (Panning, DraggingComponent)):
            return "grabbing"
        if isinstance(self.state, Connecting):
            return "crosshair"
        return "default"

    def preview_path(self) -> Optional[list[Point]]:
        """Rubber-band wire from the source terminal to the pointer while connecting."""
        if not isinstance(self.state, Connecting):
            return None
        snapshot = self._session.snapshot
        comp = snapshot.owner_of(self.state.source_terminal_id)
        if comp is None:
            return None
        term = comp.terminal(self.state.source_terminal_id)
        start = terminal_absolute_position(term, comp.x, comp.y)
        return active_route_path(start, term.edge or Edge.BOTTOM, self.cursor)

    # -- Helpers --

    def _hit(self, pos: Point) -> HitTarget:
        return hit_test(self._session.snapshot, pos, self._session.config.terminal_hit_radius)

    def _to_idle(self, reason: str) -> None:
        if not self.is_idle:
            logger.debug("%s -> Idle (%s)", type(self.state).__name__, reason)
        self.state = IDLE

    def _drag_target(self, pos: Point, grab: Point) -> Point:
        x, y = pos[0] - grab[0], pos[1] - grab[1]
        config = self._session.config
        if config.snap_to_grid and config.grid_size > 0:
            x, y = _snap(x, config.grid_size), _snap(y, config.grid_size)
        return (x, y)

    def cancel(self) -> None:
        """Abandon the current gesture without editing the diagram."""
        if isinstance(self.state, DraggingComponent):
            self._session.history.flush()
        self._to_idle("cancel")

    # -- Pointer events (screen coordinates) --

    def pointer_down(self, screen: Point, button: MouseButton = MouseButton.PRIMARY, shift: bool = False) -> None:
        pos = self._session.viewport.screen_to_diagram(screen)
        self.cursor = pos
        target = self._hit(pos)

        if isinstance(self.state, Connecting):
            if button is not MouseButton.PRIMARY:
                return
            if target.kind == "terminal":
                self._finish_connection(target.terminal_id)
            elif target.is_canvas:
                self._to_idle("background click")
            return

        if not self.is_idle:
            return

        pan_gesture = button is MouseButton.MIDDLE or (button is MouseButton.PRIMARY and shift)
        if pan_gesture:
            if target.is_canvas:
                self.state = Panning(last_screen=screen)
            return

        if button is not MouseButton.PRIMARY:
            return

        if target.kind == "terminal":
            self.state = Connecting(source_terminal_id=target.terminal_id)
        elif target.kind == "component":
            comp = self._session.snapshot.component(target.component_id)
            self._session.select_component(comp.id)
            self.state = DraggingComponent(component_id=comp.id, grab_offset=(pos[0] - comp.x, pos[1] - comp.y))
        else:
            self._session.clear_selection()

    def pointer_move(self, screen: Point) -> None:
        pos = self._session.viewport.screen_to_diagram(screen)
        self.cursor = pos
        state = self.state

        if isinstance(state, Panning):
            self._session.viewport.pan_by(screen[0] - state.last_screen[0], screen[1] - state.last_screen[1])
            self.state = Panning(last_screen=screen)
        elif isinstance(state, DraggingComponent):
            target = self._drag_target(pos, state.grab_offset)
            if self._session.move(state.component_id, target, coalesce=True):
                self.state = replace(state, moved=True)
            else:
                # Component vanished mid-drag (deleted elsewhere).
                self._to_idle("drag target gone")

    def pointer_up(self, screen: Point) -> None:
        pos = self._session.viewport.screen_to_diagram(screen)
        self.cursor = pos
        state = self.state

        if isinstance(state, Panning):
            self._to_idle("pan released")
        elif isinstance(state, DraggingComponent):
            if state.moved:
                self._session.move(state.component_id, self._drag_target(pos, state.grab_offset), coalesce=True)
                self._session.history.flush()
            self._to_idle("drag released")
        elif isinstance(state, Connecting):
            # Press-drag-release variant: releasing over another terminal completes it.
            target = self._hit(pos)
            if target.kind == "terminal" and target.terminal_id != state.source_terminal_id:
                self._finish_connection(target.terminal_id)

    def pointer_leave(self) -> None:
        """Leaving the canvas acts as a release for every gesture."""
        self.cancel()

    def key(self, name: str) -> None:
        if name == "Escape" and isinstance(self.state, Connecting):
            self._to_idle("escape")

    def wheel(self, delta_y: float, modifier: bool) -> float:
        """Wheel zoom is independent of the gesture state."""
        return self._session.viewport.wheel(delta_y, modifier)

    # -- Transitions --

    def _finish_connection(self, terminal_id: str) -> None:
        source = self.state.source_terminal_id
        if terminal_id == source:
            self._to_idle("same terminal")
            return
        self._session.connect(source, terminal_id)
        self._to_idle("connection attempted")
