"""Geometry kernel: terminal positions, edge selection and orthogonal wire paths.

Pure functions with no state. Every component shares one footprint
(COMPONENT_WIDTH x COMPONENT_HEIGHT) centered on its (x, y).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from circuitmap.diagram.style import COMPONENT_HEIGHT, COMPONENT_WIDTH, STUB_LENGTH
from circuitmap.types import Edge, Point
from circuitmap.wiring.models import Component, DiagramSnapshot, LegacyPosition, Placed, Terminal

_EDGE_DIRECTIONS: dict[Edge, Point] = {
    Edge.TOP: (0.0, -1.0),
    Edge.BOTTOM: (0.0, 1.0),
    Edge.LEFT: (-1.0, 0.0),
    Edge.RIGHT: (1.0, 0.0),
}


def edge_direction(edge: Edge) -> Point:
    """Outward unit normal of a component edge."""
    return _EDGE_DIRECTIONS[edge]


def placed_position(
    placement: Placed,
    component_x: float,
    component_y: float,
    width: float = COMPONENT_WIDTH,
    height: float = COMPONENT_HEIGHT,
) -> Point:
    """Interpolate ``placement.offset`` percent along the named edge."""
    half_w = width / 2
    half_h = height / 2
    frac = placement.offset / 100

    if placement.edge is Edge.TOP:
        return (component_x - half_w + width * frac, component_y - half_h)
    if placement.edge is Edge.BOTTOM:
        return (component_x - half_w + width * frac, component_y + half_h)
    if placement.edge is Edge.LEFT:
        return (component_x - half_w, component_y - half_h + height * frac)
    return (component_x + half_w, component_y - half_h + height * frac)


def terminal_absolute_position(
    terminal: Terminal,
    component_x: float,
    component_y: float,
    width: float = COMPONENT_WIDTH,
    height: float = COMPONENT_HEIGHT,
) -> Point:
    """Absolute diagram position of a terminal on a component centered at (x, y).

    Legacy terminals keep their stored coordinates.
    """
    placement = terminal.placement
    if isinstance(placement, Placed):
        return placed_position(placement, component_x, component_y, width, height)
    if isinstance(placement, LegacyPosition):
        return (placement.x, placement.y)
    raise TypeError(f"Unsupported placement: {placement!r}")


def optimal_edge(self_x: float, self_y: float, other_x: float, other_y: float) -> Edge:
    """Edge of the component at (self_x, self_y) that faces (other_x, other_y).

    The dominant axis wins; equal |dx| and |dy| resolve vertically.
    """
    dx = other_x - self_x
    dy = other_y - self_y

    if abs(dx) > abs(dy):
        return Edge.RIGHT if dx > 0 else Edge.LEFT
    return Edge.BOTTOM if dy > 0 else Edge.TOP


def _stub(pos: Point, edge: Edge, length: float) -> Point:
    nx, ny = edge_direction(edge)
    return (pos[0] + nx * length, pos[1] + ny * length)


def route_path(
    from_pos: Point,
    from_edge: Edge,
    to_pos: Point,
    to_edge: Edge,
    stub_length: float = STUB_LENGTH,
) -> list[Point]:
    """Orthogonal waypoints from one terminal to another.

    Each end leaves its terminal along the edge normal for ``stub_length``
    before turning:
    - both on top/bottom edges: vertical stubs joined by a horizontal run
      at the vertical midpoint
    - both on left/right edges: horizontal stubs joined by a vertical run
      at the horizontal midpoint
    - mixed: one corner, taken from the stub of the top/bottom end
    """
    stub1 = _stub(from_pos, from_edge, stub_length)
    stub2 = _stub(to_pos, to_edge, stub_length)
    mid_x = (stub1[0] + stub2[0]) / 2
    mid_y = (stub1[1] + stub2[1]) / 2

    points: list[Point] = [from_pos, stub1]

    if from_edge.is_horizontal and to_edge.is_horizontal:
        points.append((stub1[0], mid_y))
        points.append((stub2[0], mid_y))
    elif not from_edge.is_horizontal and not to_edge.is_horizontal:
        points.append((mid_x, stub1[1]))
        points.append((mid_x, stub2[1]))
    elif from_edge.is_horizontal:
        points.append((stub1[0], stub2[1]))
    else:
        points.append((stub2[0], stub1[1]))

    points.extend([stub2, to_pos])
    return points


def active_route_path(
    from_pos: Point,
    from_edge: Edge,
    cursor: Point,
    stub_length: float = STUB_LENGTH,
) -> list[Point]:
    """Preview path from a terminal to the pointer: stub, one corner, cursor."""
    stub = _stub(from_pos, from_edge, stub_length)
    if from_edge.is_horizontal:
        corner = (stub[0], cursor[1])
    else:
        corner = (cursor[0], stub[1])
    return [from_pos, stub, corner, cursor]


def svg_path(points: list[Point]) -> str:
    """Render waypoints as an SVG path ``d`` attribute."""
    if not points:
        return ""
    head, *rest = points
    parts = [f"M {head[0]:g} {head[1]:g}"]
    parts.extend(f"L {x:g} {y:g}" for x, y in rest)
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Hit testing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HitTarget:
    """What lies under a diagram-space point."""

    kind: str  # "terminal", "component" or "canvas"
    component_id: Optional[str] = None
    terminal_id: Optional[str] = None

    @property
    def is_canvas(self) -> bool:
        return self.kind == "canvas"


CANVAS = HitTarget(kind="canvas")


def component_contains(
    component: Component,
    pos: Point,
    width: float = COMPONENT_WIDTH,
    height: float = COMPONENT_HEIGHT,
) -> bool:
    return abs(pos[0] - component.x) <= width / 2 and abs(pos[1] - component.y) <= height / 2


def hit_test(snapshot: DiagramSnapshot, pos: Point, radius: float) -> HitTarget:
    """Terminal within ``radius`` of ``pos``, else the component body, else canvas.

    Components later in the snapshot are drawn on top, so they are tested first.
    """
    for comp in reversed(snapshot.components):
        for term in comp.terminals:
            tx, ty = terminal_absolute_position(term, comp.x, comp.y)
            if math.hypot(pos[0] - tx, pos[1] - ty) <= radius:
                return HitTarget(kind="terminal", component_id=comp.id, terminal_id=term.id)

    for comp in reversed(snapshot.components):
        if component_contains(comp, pos):
            return HitTarget(kind="component", component_id=comp.id)

    return CANVAS
