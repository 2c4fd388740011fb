"""Test document serialization and validation."""

import json

import pytest

from circuitmap.errors import MalformedDocument
from circuitmap.types import Edge, TerminalKind
from circuitmap.wiring import store
from circuitmap.wiring.document import dump_document, dumps, load_document, loads, read_document, save_document
from circuitmap.wiring.models import ComponentDefinition, DiagramSnapshot, LegacyPosition, Placed, TerminalSpec

SHORE = ComponentDefinition(
    id="shore-power", type="shore-power", label="Shore Power",
    terminal_specs=(TerminalSpec(kind=TerminalKind.AC_LIVE, label="L"),
                    TerminalSpec(kind=TerminalKind.AC_NEUTRAL, label="N")),
    specs={"voltage": "230V"},
)


def _diagram() -> DiagramSnapshot:
    snap, a = store.place(DiagramSnapshot(), SHORE, (0, 0))
    snap, b = store.place(snap, SHORE, (0, 300))
    snap, _ = store.connect(snap, a.terminals[0].id, b.terminals[1].id)
    return snap


def _raw_component(terminal: dict) -> dict:
    return {
        "id": "comp-1", "type": "shore-power", "label": "Shore Power", "x": 100, "y": 100,
        "definition": {"id": "shore-power", "type": "shore-power"},
        "terminals": [terminal],
    }


def test_document_shape_is_plain_json():
    data = dump_document(_diagram(), name="Van", settings={"grid_size": 20})
    assert set(data) == {"name", "version", "components", "connections", "settings"}
    assert data["name"] == "Van"
    term = data["components"][0]["terminals"][0]
    assert term["component_id"] == data["components"][0]["id"]
    assert term["placement"]["mode"] == "placed"
    assert json.loads(json.dumps(data)) == data


def test_round_trip_preserves_snapshot():
    snap = _diagram()
    loaded = load_document(dump_document(snap))
    assert loaded.snapshot == snap
    assert loaded.name == "Untitled Circuit"
    assert loaded.settings == {}


def test_dumps_keeps_unicode_cable_labels():
    snap = _diagram()
    text = dumps(snap, name="Van")
    assert "2.5mm²" in text
    assert loads(text).snapshot == snap


def test_terminal_without_placement_loads_as_legacy():
    raw = _raw_component({"id": "t1", "kind": "positive", "component_id": "comp-1", "x": 40, "y": 150})
    loaded = load_document({"components": [raw], "connections": []})
    term = loaded.snapshot.terminal("t1")
    assert term.placement == LegacyPosition(x=40, y=150)
    assert (term.x, term.y) == (40, 150)
    assert term.edge is None


def test_placement_without_mode_is_placed():
    raw = _raw_component({"id": "t1", "kind": "earth", "component_id": "comp-1",
                          "placement": {"edge": "left", "offset": 50}})
    loaded = load_document({"components": [raw], "connections": []})
    term = loaded.snapshot.terminal("t1")
    assert term.placement == Placed(edge=Edge.LEFT, offset=50)
    assert (term.x, term.y) == (10, 100)


@pytest.mark.parametrize("data", [
    None,
    [],
    {"components": []},
    {"connections": []},
    {"components": {}, "connections": []},
])
def test_missing_arrays_are_rejected(data):
    with pytest.raises(MalformedDocument):
        load_document(data)


def test_schema_violations_are_rejected():
    raw = _raw_component({"id": "t1", "kind": "positive", "component_id": "comp-1",
                          "placement": {"mode": "placed", "edge": "bottom", "offset": 150}})
    with pytest.raises(MalformedDocument):
        load_document({"components": [raw], "connections": []})

    with pytest.raises(MalformedDocument):
        load_document({"components": [], "connections": [{"id": "c1"}]})


def test_invalid_json_is_rejected():
    with pytest.raises(MalformedDocument):
        loads("{components: ")


def test_save_and_read(tmp_path):
    snap = _diagram()
    path = save_document(snap, tmp_path / "van.json", name="Weekend Van")
    loaded = read_document(path)
    assert loaded.name == "Weekend Van"
    assert loaded.snapshot == snap


def test_terminal_owned_by_another_component_is_rejected():
    raw = _raw_component({"id": "t1", "kind": "positive", "component_id": "comp-9",
                          "placement": {"mode": "placed", "edge": "bottom", "offset": 50}})
    with pytest.raises(MalformedDocument):
        load_document({"components": [raw], "connections": []})


def test_duplicate_ids_are_rejected():
    term = {"id": "t1", "kind": "positive", "component_id": "comp-1",
            "placement": {"mode": "placed", "edge": "bottom", "offset": 50}}
    raw = _raw_component(term)
    with pytest.raises(MalformedDocument):
        load_document({"components": [{**raw, "terminals": [term, term]}], "connections": []})

    twin = {**raw, "terminals": [{**term, "id": "t2"}]}
    with pytest.raises(MalformedDocument):
        load_document({"components": [raw, twin], "connections": []})
