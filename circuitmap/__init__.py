"""Wiring-diagram editing core: geometry, terminal layout, graph store, history."""

__version__ = "0.1.0"
