"""Test edge geometry, routing and hit testing."""

import pytest

from circuitmap.diagram.geometry import (
    CANVAS,
    active_route_path,
    hit_test,
    optimal_edge,
    placed_position,
    route_path,
    svg_path,
    terminal_absolute_position,
)
from circuitmap.types import Edge, TerminalKind
from circuitmap.wiring import store
from circuitmap.wiring.models import (
    ComponentDefinition,
    DiagramSnapshot,
    LegacyPosition,
    Placed,
    Terminal,
    TerminalSpec,
)


def _definition(*kinds: TerminalKind) -> ComponentDefinition:
    return ComponentDefinition(
        id="battery", type="battery", label="Battery",
        terminal_specs=tuple(TerminalSpec(kind=k) for k in kinds),
    )


def _orthogonal(points) -> bool:
    return all(a[0] == b[0] or a[1] == b[1] for a, b in zip(points, points[1:]))


def test_placed_position_on_each_edge():
    # 180x100 body centered at (100, 100): x spans 10..190, y spans 50..150
    assert placed_position(Placed(edge=Edge.BOTTOM, offset=50), 100, 100) == (100, 150)
    assert placed_position(Placed(edge=Edge.TOP, offset=0), 100, 100) == (10, 50)
    assert placed_position(Placed(edge=Edge.LEFT, offset=25), 100, 100) == (10, 75)
    assert placed_position(Placed(edge=Edge.RIGHT, offset=100), 100, 100) == (190, 150)


def test_legacy_terminal_keeps_stored_coordinates():
    term = Terminal(id="t1", kind=TerminalKind.POSITIVE, component_id="c1",
                    placement=LegacyPosition(x=5, y=7))
    assert terminal_absolute_position(term, 100, 100) == (5, 7)


def test_optimal_edge_dominant_axis():
    assert optimal_edge(0, 0, 300, 0) == Edge.RIGHT
    assert optimal_edge(300, 0, 0, 0) == Edge.LEFT
    assert optimal_edge(0, 0, 0, 10) == Edge.BOTTOM
    assert optimal_edge(0, 0, 20, -50) == Edge.TOP


def test_optimal_edge_tie_resolves_vertically():
    assert optimal_edge(0, 0, 10, 10) == Edge.BOTTOM
    assert optimal_edge(0, 0, -10, -10) == Edge.TOP


def test_optimal_edge_symmetry():
    for a, b in [((0, 0), (300, 40)), ((10, 10), (-200, 5)), ((0, 0), (5, 90))]:
        forward = optimal_edge(*a, *b)
        backward = optimal_edge(*b, *a)
        opposite = {Edge.LEFT: Edge.RIGHT, Edge.RIGHT: Edge.LEFT, Edge.TOP: Edge.BOTTOM, Edge.BOTTOM: Edge.TOP}
        assert backward == opposite[forward]


def test_route_between_side_edges_uses_mid_x():
    points = route_path((90, 0), Edge.RIGHT, (210, 40), Edge.LEFT)
    assert points == [(90, 0), (115, 0), (150, 0), (150, 40), (185, 40), (210, 40)]


def test_route_between_top_bottom_edges_uses_mid_y():
    points = route_path((0, 50), Edge.BOTTOM, (100, 250), Edge.TOP)
    assert points == [(0, 50), (0, 75), (0, 150), (100, 150), (100, 225), (100, 250)]


def test_route_mixed_edges_has_single_corner():
    points = route_path((0, 50), Edge.BOTTOM, (200, 0), Edge.LEFT)
    assert points == [(0, 50), (0, 75), (0, 0), (175, 0), (200, 0)]
    assert _orthogonal(points)

    points = route_path((200, 0), Edge.LEFT, (0, 50), Edge.BOTTOM)
    assert points == [(200, 0), (175, 0), (0, 0), (0, 75), (0, 50)]
    assert _orthogonal(points)


def test_route_stub_length_is_configurable():
    points = route_path((0, 0), Edge.RIGHT, (100, 0), Edge.LEFT, stub_length=10)
    assert points[1] == (10, 0)
    assert points[-2] == (90, 0)


def test_active_route_path_previews_to_cursor():
    assert active_route_path((0, 50), Edge.BOTTOM, (100, 200)) == [(0, 50), (0, 75), (0, 200), (100, 200)]
    assert active_route_path((90, 0), Edge.RIGHT, (200, 80)) == [(90, 0), (115, 0), (200, 0), (200, 80)]


def test_svg_path():
    assert svg_path([(0, 0), (10, 5.5), (10.0, 20)]) == "M 0 0 L 10 5.5 L 10 20"
    assert svg_path([]) == ""


def test_hit_test_prefers_terminals():
    snap, comp = store.place(DiagramSnapshot(), _definition(TerminalKind.POSITIVE, TerminalKind.NEGATIVE), (100, 100))
    first = comp.terminals[0]

    hit = hit_test(snap, (first.x + 2, first.y - 2), radius=8)
    assert hit.kind == "terminal"
    assert hit.terminal_id == first.id
    assert hit.component_id == comp.id

    assert hit_test(snap, (100, 100), radius=8).kind == "component"
    assert hit_test(snap, (500, 500), radius=8) == CANVAS
    assert hit_test(snap, (500, 500), radius=8).is_canvas


def test_hit_test_topmost_component_wins():
    snap, below = store.place(DiagramSnapshot(), _definition(TerminalKind.POSITIVE), (100, 100))
    snap, above = store.place(snap, _definition(TerminalKind.POSITIVE), (150, 100))
    assert hit_test(snap, (130, 100), radius=8).component_id == above.id
    assert hit_test(snap, (20, 100), radius=8).component_id == below.id


@pytest.mark.parametrize("offset", [0, 100])
def test_placed_offsets_reach_corners(offset):
    x, y = placed_position(Placed(edge=Edge.TOP, offset=offset), 0, 0)
    assert y == -50
    assert abs(x) == 90
