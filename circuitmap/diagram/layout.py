"""Terminal layout on component edges and wire routing across a diagram.

New terminals line up evenly along the bottom edge; terminals the user
moved to another edge stay where they were put.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from circuitmap.diagram.geometry import optimal_edge, route_path, terminal_absolute_position
from circuitmap.diagram.style import (
    CONNECT_FALLBACK_OFFSET,
    KIND_LABELS,
    REPOSITION_OFFSET_MAX,
    REPOSITION_OFFSET_MIN,
)
from circuitmap.errors import CannotRemoveLastTerminal, UnknownId
from circuitmap.types import Edge, Point, TerminalKind
from circuitmap.wiring.models import (
    Component,
    DiagramSnapshot,
    LegacyPosition,
    Placed,
    Terminal,
    new_id,
)

logger = logging.getLogger(__name__)


def spaced_offsets(count: int) -> list[float]:
    """Evenly spaced offsets for ``count`` terminals, never at 0 or 100."""
    spacing = 100 / (count + 1)
    return [spacing * (i + 1) for i in range(count)]


def parse_kind(kind: TerminalKind | str) -> TerminalKind:
    """Accept a TerminalKind or its string value."""
    try:
        return TerminalKind(kind)
    except ValueError:
        raise UnknownId("terminal kind", str(kind)) from None


def default_label(kind: TerminalKind | str) -> str:
    return KIND_LABELS.get(parse_kind(kind).value, "")


def with_position(terminal: Terminal, component_x: float, component_y: float) -> Terminal:
    """Refresh the terminal's cached absolute position."""
    x, y = terminal_absolute_position(terminal, component_x, component_y)
    return terminal.model_copy(update={"x": x, "y": y})


def refresh_positions(component: Component) -> Component:
    """Recompute every terminal's cached position from the component center."""
    terminals = tuple(with_position(t, component.x, component.y) for t in component.terminals)
    return component.model_copy(update={"terminals": terminals})


def _on_bottom_row(terminal: Terminal) -> bool:
    """Bottom-edge terminals and unplaced (legacy) ones share the default row."""
    placement = terminal.placement
    return isinstance(placement, LegacyPosition) or placement.edge is Edge.BOTTOM


def _respace(component: Component, row_ids: list[str]) -> Component:
    """Place exactly the terminals in ``row_ids`` evenly along the bottom edge."""
    offsets = dict(zip(row_ids, spaced_offsets(len(row_ids))))
    terminals = []
    for term in component.terminals:
        if term.id in offsets:
            term = term.model_copy(update={"placement": Placed(edge=Edge.BOTTOM, offset=offsets[term.id])})
        terminals.append(with_position(term, component.x, component.y))
    return component.model_copy(update={"terminals": tuple(terminals)})


def initialize_placements(component: Component) -> Component:
    """Give every unplaced terminal a bottom-edge placement.

    Only the unplaced terminals are spaced, keyed by their order among
    themselves; already-placed terminals are left alone.
    """
    unplaced = [t.id for t in component.terminals if isinstance(t.placement, LegacyPosition)]
    if not unplaced:
        return refresh_positions(component)
    return _respace(component, unplaced)


def add_terminal(
    component: Component,
    kind: TerminalKind | str,
    label: str | None = None,
) -> tuple[Component, Terminal]:
    """Append a terminal on the bottom edge and re-space the bottom row.

    Terminals on the other edges keep their placement.
    """
    kind = parse_kind(kind)
    new_term = Terminal(
        id=new_id("term"),
        kind=kind,
        component_id=component.id,
        placement=Placed(edge=Edge.BOTTOM, offset=50.0),
        label=default_label(kind) if label is None else label,
    )
    row = [t.id for t in component.terminals if _on_bottom_row(t)] + [new_term.id]
    grown = component.model_copy(update={"terminals": component.terminals + (new_term,)})
    updated = _respace(grown, row)
    logger.debug("Added %s terminal %s to %s (bottom row: %d)", kind.value, new_term.id, component.id, len(row))
    return updated, updated.terminal(new_term.id)


def remove_terminal(component: Component, terminal_id: str) -> Component:
    """Drop one terminal; the remaining bottom row is not re-spaced."""
    if component.terminal(terminal_id) is None:
        raise UnknownId("terminal", terminal_id)
    if len(component.terminals) <= 1:
        raise CannotRemoveLastTerminal(f"{component.id} has only terminal {terminal_id}")
    terminals = tuple(t for t in component.terminals if t.id != terminal_id)
    return component.model_copy(update={"terminals": terminals})


def clamp_offset(offset: float) -> float:
    return max(REPOSITION_OFFSET_MIN, min(REPOSITION_OFFSET_MAX, offset))


def reposition_terminal(component: Component, terminal_id: str, edge: Edge, offset: float) -> Component:
    """Pin a terminal to ``edge`` at ``offset`` (clamped off the corners)."""
    placement = Placed(edge=edge, offset=clamp_offset(offset))
    return _update_terminal(component, terminal_id, placement=placement)


def _update_terminal(component: Component, terminal_id: str, **changes) -> Component:
    if component.terminal(terminal_id) is None:
        raise UnknownId("terminal", terminal_id)
    terminals = []
    for term in component.terminals:
        if term.id == terminal_id:
            term = with_position(term.model_copy(update=changes), component.x, component.y)
        terminals.append(term)
    return component.model_copy(update={"terminals": tuple(terminals)})


def _face(terminal: Terminal, own: Component, other: Component) -> Terminal:
    edge = optimal_edge(own.x, own.y, other.x, other.y)
    placement = terminal.placement
    offset = placement.offset if isinstance(placement, Placed) else CONNECT_FALLBACK_OFFSET
    faced = terminal.model_copy(update={"placement": Placed(edge=edge, offset=offset)})
    return with_position(faced, own.x, own.y)


def auto_orient_on_connect(
    from_component: Component,
    from_terminal: Terminal,
    to_component: Component,
    to_terminal: Terminal,
) -> tuple[Terminal, Terminal]:
    """Turn both endpoints toward the other component, keeping their offsets."""
    return (
        _face(from_terminal, from_component, to_component),
        _face(to_terminal, to_component, from_component),
    )


def replace_terminal(component: Component, terminal: Terminal) -> Component:
    terminals = tuple(terminal if t.id == terminal.id else t for t in component.terminals)
    return component.model_copy(update={"terminals": terminals})


# ---------------------------------------------------------------------------
# Wire routing for a whole diagram
# ---------------------------------------------------------------------------


@dataclass
class WireRoute:
    """Waypoints of one connection, ready for drawing."""

    connection_id: str
    points: list[Point]
    cable_size: str = ""


def route_wires(snapshot: DiagramSnapshot) -> list[WireRoute]:
    """Route every connection orthogonally between its two terminals.

    Connections whose endpoints no longer resolve are skipped.
    """
    routes: list[WireRoute] = []

    for conn in snapshot.connections:
        src_comp = snapshot.owner_of(conn.from_terminal_id)
        dst_comp = snapshot.owner_of(conn.to_terminal_id)
        if src_comp is None or dst_comp is None:
            logger.warning(
                "Wire %s: terminal not found (from=%s, to=%s)",
                conn.id, conn.from_terminal_id, conn.to_terminal_id,
            )
            continue

        src = src_comp.terminal(conn.from_terminal_id)
        dst = dst_comp.terminal(conn.to_terminal_id)
        points = route_path(
            terminal_absolute_position(src, src_comp.x, src_comp.y),
            src.edge or Edge.BOTTOM,
            terminal_absolute_position(dst, dst_comp.x, dst_comp.y),
            dst.edge or Edge.BOTTOM,
        )
        routes.append(WireRoute(connection_id=conn.id, points=points, cable_size=conn.cable_size))

    return routes
