"""Geometry kernel, terminal layout and wire routing."""
