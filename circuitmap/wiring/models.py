"""Pydantic models for the wiring diagram.

A DiagramSnapshot is the immutable state of one diagram: placed components
(each owning its terminals) and the connections between terminals. Every
model is frozen; edits produce new instances via ``model_copy`` so an
observer always sees a whole snapshot, never a half-applied edit.
"""

from __future__ import annotations

import uuid
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from circuitmap.diagram.style import OFFSET_MAX, OFFSET_MIN
from circuitmap.types import ComponentCategory, Edge, TerminalKind


def new_id(prefix: str) -> str:
    """Opaque unique id, e.g. ``comp-3f9a1c0b2d4e``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Component definitions (owned by the external catalog)
# ---------------------------------------------------------------------------


class TerminalSpec(FrozenModel):
    """One terminal a definition creates on placement."""

    kind: TerminalKind
    label: Optional[str] = None


class ComponentDefinition(FrozenModel):
    """Template a placed component is built from."""

    id: str = Field(..., description="Catalog id (e.g. 'solar-panel')")
    type: str = Field(..., description="Type key; equals id for catalog entries")
    label: str = Field(default="", description="Display name")
    category: ComponentCategory = Field(default=ComponentCategory.CUSTOM)
    description: str = Field(default="")
    specs: dict[str, str] = Field(default_factory=dict, description="Free-form spec sheet")
    terminal_specs: tuple[TerminalSpec, ...] = Field(default=())
    is_custom: bool = Field(default=False)


# ---------------------------------------------------------------------------
# Terminal placement: symbolic (edge + offset) or legacy absolute coordinates
# ---------------------------------------------------------------------------


class Placed(FrozenModel):
    """Terminal anchored to a component edge, ``offset`` percent along it."""

    mode: Literal["placed"] = "placed"
    edge: Edge
    offset: float = Field(..., ge=OFFSET_MIN, le=OFFSET_MAX)


class LegacyPosition(FrozenModel):
    """Terminal stored at absolute diagram coordinates (imported documents)."""

    mode: Literal["legacy"] = "legacy"
    x: float
    y: float


Placement = Annotated[Union[Placed, LegacyPosition], Field(discriminator="mode")]


class Terminal(FrozenModel):
    """A connection point on a component."""

    id: str
    kind: TerminalKind
    component_id: str = Field(..., description="Owning component id (back-reference)")
    placement: Placement
    label: str = Field(default="")
    # Cached absolute position; derived from placement + owning component.
    x: float = 0.0
    y: float = 0.0

    @property
    def edge(self) -> Optional[Edge]:
        if isinstance(self.placement, Placed):
            return self.placement.edge
        return None


class Component(FrozenModel):
    """A component instance placed on the canvas, centered at (x, y)."""

    id: str
    type: str
    label: str = ""
    x: float
    y: float
    definition: ComponentDefinition
    terminals: tuple[Terminal, ...] = Field(default=())
    notes: str = Field(default="")

    @property
    def definition_id(self) -> str:
        return self.definition.id

    def terminal(self, terminal_id: str) -> Optional[Terminal]:
        for term in self.terminals:
            if term.id == terminal_id:
                return term
        return None

    def terminal_ids(self) -> set[str]:
        return {t.id for t in self.terminals}


class Connection(FrozenModel):
    """A cable between two terminals on different components."""

    id: str
    from_terminal_id: str
    to_terminal_id: str
    cable_size: str = Field(default="", description="Free-text cable label, e.g. '2.5mm²'")

    def touches(self, terminal_ids: set[str]) -> bool:
        return self.from_terminal_id in terminal_ids or self.to_terminal_id in terminal_ids


class DiagramSnapshot(FrozenModel):
    """Immutable pair of components and connections; one point in history."""

    components: tuple[Component, ...] = Field(default=())
    connections: tuple[Connection, ...] = Field(default=())

    # -- Lookups (no mutation) --

    def component(self, component_id: str) -> Optional[Component]:
        for comp in self.components:
            if comp.id == component_id:
                return comp
        return None

    def terminal(self, terminal_id: str) -> Optional[Terminal]:
        for comp in self.components:
            term = comp.terminal(terminal_id)
            if term is not None:
                return term
        return None

    def owner_of(self, terminal_id: str) -> Optional[Component]:
        """The component holding ``terminal_id``, if any."""
        for comp in self.components:
            if comp.terminal(terminal_id) is not None:
                return comp
        return None

    def connection(self, connection_id: str) -> Optional[Connection]:
        for conn in self.connections:
            if conn.id == connection_id:
                return conn
        return None

    def connections_of(self, component_id: str) -> list[Connection]:
        comp = self.component(component_id)
        if comp is None:
            return []
        ids = comp.terminal_ids()
        return [c for c in self.connections if c.touches(ids)]
