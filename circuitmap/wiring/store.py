"""Diagram graph store: edit operations over immutable snapshots.

Every function takes a DiagramSnapshot and returns a new one; the input is
never modified. Referential integrity rules:
- a connection joins terminals on two different components
- removing a component or terminal removes every connection touching it

Unknown ids raise UnknownId; callers that want silent no-ops catch
DiagramError at their boundary (see editor.session).
"""

from __future__ import annotations

import logging
from typing import Iterable

from circuitmap.diagram import layout
from circuitmap.diagram.style import COMPONENT_HEIGHT, DEFAULT_CABLE_LABEL, DUPLICATE_OFFSET
from circuitmap.errors import InvalidConnection, InvalidDefinition, UnknownId
from circuitmap.types import Edge, Point, TerminalKind
from circuitmap.wiring.models import (
    Component,
    ComponentDefinition,
    Connection,
    DiagramSnapshot,
    LegacyPosition,
    Terminal,
    new_id,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _require_component(snapshot: DiagramSnapshot, component_id: str) -> Component:
    comp = snapshot.component(component_id)
    if comp is None:
        raise UnknownId("component", component_id)
    return comp


def _require_owner(snapshot: DiagramSnapshot, terminal_id: str) -> Component:
    comp = snapshot.owner_of(terminal_id)
    if comp is None:
        raise UnknownId("terminal", terminal_id)
    return comp


def _replace_components(snapshot: DiagramSnapshot, *updated: Component) -> DiagramSnapshot:
    by_id = {c.id: c for c in updated}
    components = tuple(by_id.get(c.id, c) for c in snapshot.components)
    return snapshot.model_copy(update={"components": components})


def _split_connections(
    connections: Iterable[Connection],
    terminal_ids: set[str],
) -> tuple[tuple[Connection, ...], list[Connection]]:
    """Partition into (kept, removed) by whether a connection touches ``terminal_ids``."""
    kept: list[Connection] = []
    removed: list[Connection] = []
    for conn in connections:
        (removed if conn.touches(terminal_ids) else kept).append(conn)
    return tuple(kept), removed


def build_component(
    definition: ComponentDefinition,
    position: Point,
    component_id: str | None = None,
) -> Component:
    """Create a component and its terminals from a definition.

    Terminals start unplaced at the bottom center and are then spread
    along the bottom edge.
    """
    if not definition.terminal_specs:
        raise InvalidDefinition(f"Definition {definition.id} has no terminals")
    cx, cy = position
    comp_id = component_id or new_id("comp")
    terminals = tuple(
        Terminal(
            id=new_id("term"),
            kind=spec.kind,
            component_id=comp_id,
            placement=LegacyPosition(x=cx, y=cy + COMPONENT_HEIGHT / 2),
            label=spec.label or "",
        )
        for spec in definition.terminal_specs
    )
    component = Component(
        id=comp_id,
        type=definition.type,
        label=definition.label,
        x=cx,
        y=cy,
        definition=definition,
        terminals=terminals,
    )
    return layout.initialize_placements(component)


# ---------------------------------------------------------------------------
# Component operations
# ---------------------------------------------------------------------------


def place(
    snapshot: DiagramSnapshot,
    definition: ComponentDefinition,
    position: Point,
) -> tuple[DiagramSnapshot, Component]:
    """Drop a new component built from ``definition`` at ``position``."""
    component = build_component(definition, position)
    logger.debug("Placed %s (%s) at %s with %d terminals",
              component.id, definition.type, position, len(component.terminals))
    return snapshot.model_copy(update={"components": snapshot.components + (component,)}), component


def move(snapshot: DiagramSnapshot, component_id: str, position: Point) -> DiagramSnapshot:
    """Move a component's center and carry its terminals along.

    Placed terminals are recomputed from their placement; legacy terminals
    shift by the same delta. Moving to the current position changes nothing.
    """
    comp = _require_component(snapshot, component_id)
    x, y = position
    dx, dy = x - comp.x, y - comp.y

    terminals = []
    for term in comp.terminals:
        if isinstance(term.placement, LegacyPosition):
            shifted = LegacyPosition(x=term.placement.x + dx, y=term.placement.y + dy)
            term = term.model_copy(update={"placement": shifted})
        terminals.append(term)

    moved = comp.model_copy(update={"x": x, "y": y, "terminals": tuple(terminals)})
    return _replace_components(snapshot, layout.refresh_positions(moved))


def duplicate(
    snapshot: DiagramSnapshot,
    component_id: str,
    offset: float = DUPLICATE_OFFSET,
) -> tuple[DiagramSnapshot, Component]:
    """Copy a component with fresh ids, offset on both axes, without connections."""
    source = _require_component(snapshot, component_id)
    comp_id = new_id("comp")

    terminals = []
    for term in source.terminals:
        placement = term.placement
        if isinstance(placement, LegacyPosition):
            placement = LegacyPosition(x=placement.x + offset, y=placement.y + offset)
        terminals.append(term.model_copy(update={
            "id": new_id("term"),
            "component_id": comp_id,
            "placement": placement,
        }))

    copy = source.model_copy(update={
        "id": comp_id,
        "x": source.x + offset,
        "y": source.y + offset,
        "terminals": tuple(terminals),
    })
    copy = layout.initialize_placements(copy)
    logger.debug("Duplicated %s as %s", component_id, comp_id)
    return snapshot.model_copy(update={"components": snapshot.components + (copy,)}), copy


def delete(snapshot: DiagramSnapshot, component_id: str) -> tuple[DiagramSnapshot, list[Connection]]:
    """Remove a component and every connection touching its terminals.

    Returns the new snapshot and the connections that were removed.
    """
    comp = _require_component(snapshot, component_id)
    kept, removed = _split_connections(snapshot.connections, comp.terminal_ids())
    components = tuple(c for c in snapshot.components if c.id != component_id)
    logger.debug("Deleted %s (cascaded %d connections)", component_id, len(removed))
    return snapshot.model_copy(update={"components": components, "connections": kept}), removed


def swap(
    snapshot: DiagramSnapshot,
    component_id: str,
    definition: ComponentDefinition,
) -> tuple[DiagramSnapshot, list[Connection]]:
    """Replace a component's definition and entire terminal set in place.

    Id and position survive; all wiring of the old terminals is dropped.
    """
    old = _require_component(snapshot, component_id)
    kept, removed = _split_connections(snapshot.connections, old.terminal_ids())

    fresh = build_component(definition, (old.x, old.y), component_id=old.id)
    fresh = fresh.model_copy(update={"notes": old.notes})

    swapped = _replace_components(snapshot, fresh)
    logger.debug("Swapped %s: %s -> %s (dropped %d connections)",
              component_id, old.type, definition.type, len(removed))
    return swapped.model_copy(update={"connections": kept}), removed


# ---------------------------------------------------------------------------
# Terminal operations
# ---------------------------------------------------------------------------


def add_terminal(
    snapshot: DiagramSnapshot,
    component_id: str,
    kind: TerminalKind | str,
) -> tuple[DiagramSnapshot, Terminal]:
    comp = _require_component(snapshot, component_id)
    updated, terminal = layout.add_terminal(comp, kind)
    return _replace_components(snapshot, updated), terminal


def remove_terminal(
    snapshot: DiagramSnapshot,
    component_id: str,
    terminal_id: str,
) -> tuple[DiagramSnapshot, list[Connection]]:
    """Remove one terminal (never the last) together with its connections."""
    comp = _require_component(snapshot, component_id)
    updated = layout.remove_terminal(comp, terminal_id)
    kept, removed = _split_connections(snapshot.connections, {terminal_id})
    result = _replace_components(snapshot, updated)
    return result.model_copy(update={"connections": kept}), removed


def reposition_terminal(
    snapshot: DiagramSnapshot,
    component_id: str,
    terminal_id: str,
    edge: Edge,
    offset: float,
) -> DiagramSnapshot:
    comp = _require_component(snapshot, component_id)
    return _replace_components(snapshot, layout.reposition_terminal(comp, terminal_id, edge, offset))


def change_terminal_kind(
    snapshot: DiagramSnapshot,
    component_id: str,
    terminal_id: str,
    kind: TerminalKind | str,
) -> DiagramSnapshot:
    """Change a terminal's kind; positive/negative also relabel it +/-."""
    kind = layout.parse_kind(kind)
    comp = _require_component(snapshot, component_id)
    term = comp.terminal(terminal_id)
    if term is None:
        raise UnknownId("terminal", terminal_id)
    label = layout.default_label(kind) or term.label
    updated = layout.replace_terminal(comp, term.model_copy(update={"kind": kind, "label": label}))
    return _replace_components(snapshot, updated)


def relabel_terminal(
    snapshot: DiagramSnapshot,
    component_id: str,
    terminal_id: str,
    label: str,
) -> DiagramSnapshot:
    comp = _require_component(snapshot, component_id)
    term = comp.terminal(terminal_id)
    if term is None:
        raise UnknownId("terminal", terminal_id)
    updated = layout.replace_terminal(comp, term.model_copy(update={"label": label}))
    return _replace_components(snapshot, updated)


# ---------------------------------------------------------------------------
# Connection operations
# ---------------------------------------------------------------------------


def connect(
    snapshot: DiagramSnapshot,
    from_terminal_id: str,
    to_terminal_id: str,
    cable_size: str = DEFAULT_CABLE_LABEL,
) -> tuple[DiagramSnapshot, Connection]:
    """Wire two terminals on different components.

    Both endpoints are turned to face each other first. Parallel
    connections between the same pair are allowed.
    """
    if from_terminal_id == to_terminal_id:
        raise InvalidConnection(f"Cannot connect terminal {from_terminal_id} to itself")

    from_comp = _require_owner(snapshot, from_terminal_id)
    to_comp = _require_owner(snapshot, to_terminal_id)
    if from_comp.id == to_comp.id:
        raise InvalidConnection(
            f"Terminals {from_terminal_id} and {to_terminal_id} are both on {from_comp.id}"
        )

    from_term, to_term = layout.auto_orient_on_connect(
        from_comp, from_comp.terminal(from_terminal_id),
        to_comp, to_comp.terminal(to_terminal_id),
    )
    oriented = _replace_components(
        snapshot,
        layout.replace_terminal(from_comp, from_term),
        layout.replace_terminal(to_comp, to_term),
    )

    conn = Connection(
        id=new_id("conn"),
        from_terminal_id=from_terminal_id,
        to_terminal_id=to_terminal_id,
        cable_size=cable_size,
    )
    logger.debug("Connected %s (%s) -> %s (%s) as %s",
              from_terminal_id, from_term.edge.value, to_terminal_id, to_term.edge.value, conn.id)
    return oriented.model_copy(update={"connections": oriented.connections + (conn,)}), conn


def disconnect(snapshot: DiagramSnapshot, connection_id: str) -> DiagramSnapshot:
    if snapshot.connection(connection_id) is None:
        raise UnknownId("connection", connection_id)
    connections = tuple(c for c in snapshot.connections if c.id != connection_id)
    return snapshot.model_copy(update={"connections": connections})


def relabel_cable(snapshot: DiagramSnapshot, connection_id: str, label: str) -> DiagramSnapshot:
    """Set a connection's cable label; any string, empty included."""
    if snapshot.connection(connection_id) is None:
        raise UnknownId("connection", connection_id)
    connections = tuple(
        c.model_copy(update={"cable_size": label}) if c.id == connection_id else c
        for c in snapshot.connections
    )
    return snapshot.model_copy(update={"connections": connections})