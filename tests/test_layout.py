"""Test terminal layout on component edges and diagram wire routing."""

import pytest

from circuitmap.diagram import layout
from circuitmap.errors import CannotRemoveLastTerminal, UnknownId
from circuitmap.types import Edge, TerminalKind
from circuitmap.wiring.models import (
    Component,
    ComponentDefinition,
    Connection,
    DiagramSnapshot,
    LegacyPosition,
    Placed,
    Terminal,
    TerminalSpec,
)
from circuitmap.wiring.store import build_component


def _definition(*kinds: TerminalKind) -> ComponentDefinition:
    return ComponentDefinition(
        id="fuse-box", type="fuse-box", label="Fuse Box",
        terminal_specs=tuple(TerminalSpec(kind=k) for k in kinds),
    )


def _offsets(component: Component) -> list[float]:
    return [t.placement.offset for t in component.terminals]


def test_spaced_offsets():
    assert layout.spaced_offsets(1) == [50]
    assert layout.spaced_offsets(2) == pytest.approx([100 / 3, 200 / 3])
    assert layout.spaced_offsets(3) == [25, 50, 75]
    assert layout.spaced_offsets(0) == []


def test_default_label():
    assert layout.default_label(TerminalKind.POSITIVE) == "+"
    assert layout.default_label(TerminalKind.NEGATIVE) == "-"
    assert layout.default_label(TerminalKind.EARTH) == ""
    assert layout.default_label("positive") == "+"

    with pytest.raises(UnknownId):
        layout.default_label("plasma")


def test_initialize_places_only_unplaced_terminals():
    comp = Component(
        id="c1", type="fuse-box", x=0, y=0, definition=_definition(),
        terminals=(
            Terminal(id="t1", kind=TerminalKind.POSITIVE, component_id="c1",
                     placement=Placed(edge=Edge.RIGHT, offset=20)),
            Terminal(id="t2", kind=TerminalKind.NEGATIVE, component_id="c1",
                     placement=LegacyPosition(x=0, y=50)),
        ),
    )
    placed = layout.initialize_placements(comp)
    assert placed.terminal("t1").placement == Placed(edge=Edge.RIGHT, offset=20)
    assert placed.terminal("t2").placement == Placed(edge=Edge.BOTTOM, offset=50)
    assert (placed.terminal("t1").x, placed.terminal("t1").y) == pytest.approx((90, -30))


def test_add_terminal_respaces_bottom_row_only():
    comp = build_component(_definition(TerminalKind.POSITIVE, TerminalKind.NEGATIVE), (0, 0))
    side = comp.terminals[0].id
    comp = layout.reposition_terminal(comp, side, Edge.LEFT, 40)

    comp, added = layout.add_terminal(comp, TerminalKind.EARTH)
    assert added.placement.edge == Edge.BOTTOM
    assert comp.terminal(side).placement == Placed(edge=Edge.LEFT, offset=40)

    bottom = [t.placement.offset for t in comp.terminals if t.edge == Edge.BOTTOM]
    assert bottom == pytest.approx([100 / 3, 200 / 3])


def test_add_terminal_uses_kind_label():
    comp = build_component(_definition(TerminalKind.SIGNAL), (0, 0))
    _, positive = layout.add_terminal(comp, TerminalKind.POSITIVE)
    _, custom = layout.add_terminal(comp, TerminalKind.POSITIVE, label="B+")
    assert positive.label == "+"
    assert custom.label == "B+"
    assert positive.component_id == comp.id


def test_remove_terminal_guards():
    comp = build_component(_definition(TerminalKind.POSITIVE), (0, 0))
    with pytest.raises(CannotRemoveLastTerminal):
        layout.remove_terminal(comp, comp.terminals[0].id)
    with pytest.raises(UnknownId):
        layout.remove_terminal(comp, "term-missing")


def test_remove_terminal_keeps_remaining_offsets():
    comp = build_component(_definition(TerminalKind.POSITIVE, TerminalKind.NEGATIVE, TerminalKind.EARTH), (0, 0))
    smaller = layout.remove_terminal(comp, comp.terminals[1].id)
    assert _offsets(smaller) == [25, 75]


def test_reposition_clamps_off_corners():
    comp = build_component(_definition(TerminalKind.POSITIVE), (100, 100))
    tid = comp.terminals[0].id

    low = layout.reposition_terminal(comp, tid, Edge.TOP, 2)
    assert low.terminal(tid).placement == Placed(edge=Edge.TOP, offset=10)
    assert (low.terminal(tid).x, low.terminal(tid).y) == pytest.approx((28, 50))

    high = layout.reposition_terminal(comp, tid, Edge.RIGHT, 99)
    assert high.terminal(tid).placement.offset == 90

    with pytest.raises(UnknownId):
        layout.reposition_terminal(comp, "term-missing", Edge.TOP, 50)


def test_auto_orient_faces_other_component():
    left = build_component(_definition(TerminalKind.POSITIVE), (0, 0))
    below = build_component(_definition(TerminalKind.NEGATIVE), (10, 400))

    a, b = layout.auto_orient_on_connect(left, left.terminals[0], below, below.terminals[0])
    assert a.placement == Placed(edge=Edge.BOTTOM, offset=50)
    assert b.placement == Placed(edge=Edge.TOP, offset=50)
    assert (b.x, b.y) == (10, 350)


def test_auto_orient_legacy_terminal_uses_middle_offset():
    legacy = Terminal(id="t1", kind=TerminalKind.POSITIVE, component_id="c1",
                      placement=LegacyPosition(x=3, y=4))
    own = Component(id="c1", type="x", x=0, y=0, definition=_definition(), terminals=(legacy,))
    other = build_component(_definition(TerminalKind.NEGATIVE), (500, 0))

    faced, _ = layout.auto_orient_on_connect(own, legacy, other, other.terminals[0])
    assert faced.placement == Placed(edge=Edge.RIGHT, offset=50)
    assert (faced.x, faced.y) == (90, 0)


def test_route_wires_skips_dangling_connections():
    a = build_component(_definition(TerminalKind.POSITIVE), (0, 0))
    b = build_component(_definition(TerminalKind.NEGATIVE), (300, 0))
    good = Connection(id="conn-1", from_terminal_id=a.terminals[0].id,
                      to_terminal_id=b.terminals[0].id, cable_size="6mm²")
    dangling = Connection(id="conn-2", from_terminal_id=a.terminals[0].id, to_terminal_id="term-gone")
    snap = DiagramSnapshot(components=(a, b), connections=(good, dangling))

    routes = layout.route_wires(snap)
    assert [r.connection_id for r in routes] == ["conn-1"]
    assert routes[0].cable_size == "6mm²"
    assert routes[0].points[0] == (0, 50)
    assert routes[0].points[-1] == (300, 50)
