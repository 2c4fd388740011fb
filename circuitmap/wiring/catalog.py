"""Component definition lookup.

The catalog contents (built-in van components, icons) are owned by the
host application; this module only provides lookup by type or id, search,
and custom definitions.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Iterable, Optional

import yaml

from circuitmap.types import ComponentCategory, TerminalKind
from circuitmap.wiring.models import ComponentDefinition, TerminalSpec

logger = logging.getLogger(__name__)


class DefinitionCatalog:
    """In-memory definition table keyed by id."""

    def __init__(self, definitions: Iterable[ComponentDefinition] = ()) -> None:
        self._definitions: dict[str, ComponentDefinition] = {}
        for definition in definitions:
            self.add(definition)

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions.values())

    def add(self, definition: ComponentDefinition) -> None:
        """Register a definition, replacing any existing one with the same id."""
        if definition.id in self._definitions:
            logger.info("Replacing definition %s", definition.id)
        self._definitions[definition.id] = definition

    def find(self, type_or_id: str) -> Optional[ComponentDefinition]:
        """Look up by type or id."""
        found = self._definitions.get(type_or_id)
        if found is not None:
            return found
        for definition in self._definitions.values():
            if definition.type == type_or_id:
                return definition
        return None

    def by_category(self, category: ComponentCategory) -> list[ComponentDefinition]:
        return [d for d in self._definitions.values() if d.category == category]

    def search(self, query: str) -> list[ComponentDefinition]:
        """Case-insensitive match on label, type or description."""
        q = query.lower()
        return [
            d for d in self._definitions.values()
            if q in d.label.lower() or q in d.type.lower() or q in d.description.lower()
        ]

    def custom(self) -> list[ComponentDefinition]:
        return [d for d in self._definitions.values() if d.is_custom]

    @classmethod
    def from_yaml(cls, path: str | Path) -> DefinitionCatalog:
        """Load definitions from a YAML file with a top-level ``definitions`` list."""
        with Path(path).open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        definitions = [ComponentDefinition.model_validate(item) for item in raw.get("definitions", [])]
        logger.info("Loaded %d definitions from %s", len(definitions), path)
        return cls(definitions)


def create_custom_definition(
    label: str,
    category: ComponentCategory,
    terminals: Iterable[tuple[TerminalKind, Optional[str]]],
    *,
    description: str = "",
    specs: Optional[dict[str, str]] = None,
) -> ComponentDefinition:
    """Build a user-defined component; its id doubles as its type."""
    ident = f"custom-{uuid.uuid4().hex[:12]}"
    return ComponentDefinition(
        id=ident,
        type=ident,
        label=label,
        category=category,
        description=description,
        specs=specs or {},
        terminal_specs=tuple(TerminalSpec(kind=kind, label=lbl) for kind, lbl in terminals),
        is_custom=True,
    )
