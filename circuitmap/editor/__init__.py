"""Editing session: history, viewport and pointer interaction."""
