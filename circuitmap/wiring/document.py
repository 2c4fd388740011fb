"""Plain-document boundary for diagram snapshots.

A document is JSON-compatible: ``{name, version, components, connections,
settings}``. Terminals reference their component by id string. Loading
either yields a complete snapshot or raises MalformedDocument; there is no
partial import.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from circuitmap import __version__
from circuitmap.diagram.layout import refresh_positions
from circuitmap.errors import MalformedDocument
from circuitmap.wiring.models import DiagramSnapshot

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Untitled Circuit"


@dataclass
class LoadedDocument:
    """A validated document: the snapshot plus its project metadata."""

    snapshot: DiagramSnapshot
    name: str = DEFAULT_NAME
    version: str = __version__
    settings: dict[str, Any] = field(default_factory=dict)


def dump_document(
    snapshot: DiagramSnapshot,
    *,
    name: str = DEFAULT_NAME,
    settings: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Serialize a snapshot into a JSON-compatible dict."""
    data = snapshot.model_dump(mode="json")
    return {
        "name": name,
        "version": __version__,
        "components": data["components"],
        "connections": data["connections"],
        "settings": dict(settings or {}),
    }


def _normalize_terminal(term: Any) -> Any:
    """Older documents omit ``placement`` (use stored x/y) or its ``mode`` tag."""
    if not isinstance(term, dict):
        return term
    placement = term.get("placement")
    if placement is None:
        placement = {"mode": "legacy", "x": term.get("x", 0.0), "y": term.get("y", 0.0)}
    elif isinstance(placement, dict) and "mode" not in placement:
        placement = {"mode": "placed", **placement}
    return {**term, "placement": placement}


def _check_ownership(snapshot: DiagramSnapshot) -> None:
    """Ids are unique and every terminal points back at the component holding it."""
    component_ids: set[str] = set()
    terminal_ids: set[str] = set()
    for comp in snapshot.components:
        if comp.id in component_ids:
            raise MalformedDocument(f"Duplicate component id: {comp.id}")
        component_ids.add(comp.id)
        for term in comp.terminals:
            if term.component_id != comp.id:
                raise MalformedDocument(
                    f"Terminal {term.id} names {term.component_id} but is held by {comp.id}"
                )
            if term.id in terminal_ids:
                raise MalformedDocument(f"Duplicate terminal id: {term.id}")
            terminal_ids.add(term.id)


def load_document(data: Any) -> LoadedDocument:
    """Validate a document dict and build its snapshot.

    Raises MalformedDocument when ``components`` or ``connections`` is
    missing, anything fails schema validation, or ids are duplicated or
    point at the wrong component.
    """
    if not isinstance(data, dict):
        raise MalformedDocument("Document must be a JSON object")
    for key in ("components", "connections"):
        if not isinstance(data.get(key), list):
            raise MalformedDocument(f"Document is missing the '{key}' array")

    components = []
    for comp in data["components"]:
        if isinstance(comp, dict):
            comp = {**comp, "terminals": [_normalize_terminal(t) for t in comp.get("terminals", [])]}
        components.append(comp)

    try:
        snapshot = DiagramSnapshot.model_validate(
            {"components": components, "connections": data["connections"]}
        )
    except ValidationError as e:
        logger.warning("Rejected document: %d validation errors", e.error_count())
        raise MalformedDocument(str(e)) from e

    try:
        _check_ownership(snapshot)
    except MalformedDocument as e:
        logger.warning("Rejected document: %s", e)
        raise

    snapshot = snapshot.model_copy(
        update={"components": tuple(refresh_positions(c) for c in snapshot.components)}
    )
    settings = data.get("settings")
    return LoadedDocument(
        snapshot=snapshot,
        name=data.get("name") or DEFAULT_NAME,
        version=data.get("version") or __version__,
        settings=settings if isinstance(settings, dict) else {},
    )


def _parse(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedDocument(f"Invalid JSON: {e}") from e


def dumps(snapshot: DiagramSnapshot, **kwargs: Any) -> str:
    return json.dumps(dump_document(snapshot, **kwargs), indent=2, ensure_ascii=False)


def loads(text: str) -> LoadedDocument:
    return load_document(_parse(text))


def save_document(snapshot: DiagramSnapshot, path: str | Path, **kwargs: Any) -> Path:
    """Write a document file. Returns the file path."""
    out = Path(path)
    out.write_text(dumps(snapshot, **kwargs), encoding="utf-8")
    logger.info("Document saved: %s", out)
    return out


def read_document_data(path: str | Path) -> Any:
    """Parsed but unvalidated document contents."""
    return _parse(Path(path).read_text(encoding="utf-8"))


def read_document(path: str | Path) -> LoadedDocument:
    return load_document(read_document_data(path))
