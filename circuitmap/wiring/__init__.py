"""Diagram data model, graph store, definition catalog and document boundary."""
