"""Typed failures raised by store operations and document loading.

Store functions raise these; ``EditorSession`` catches them at the
operation boundary so a rejected edit leaves state unchanged.
"""

from __future__ import annotations


class DiagramError(Exception):
    """Base class for every recoverable diagram failure."""


class InvalidConnection(DiagramError):
    """Connect attempted between a terminal and itself or two terminals of one component."""


class CannotRemoveLastTerminal(DiagramError):
    """A component must keep at least one terminal."""


class UnknownId(DiagramError):
    """An operation referenced a component, terminal or connection that does not exist."""

    def __init__(self, kind: str, ident: str) -> None:
        super().__init__(f"Unknown {kind} id: {ident}")
        self.kind = kind
        self.id = ident


class MalformedDocument(DiagramError):
    """A persisted document is missing required fields or fails validation."""


class InvalidDefinition(DiagramError):
    """A component definition that cannot be placed, e.g. one with no terminals."""
