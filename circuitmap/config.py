"""Configuration loading from YAML + environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings

from circuitmap.diagram import style


class CircuitMapConfig(BaseSettings):
    # Logging
    log_level: str = "INFO"

    # Cables
    default_cable_unit: str = style.DEFAULT_CABLE_UNIT
    default_cable_size: str = style.DEFAULT_CABLE_SIZE

    # Canvas display (carried in saved documents)
    grid_size: int = 20
    snap_to_grid: bool = False
    show_grid: bool = True

    # History
    history_limit: int = 50
    history_coalesce_ms: int = 300

    # Editing
    duplicate_offset: float = style.DUPLICATE_OFFSET
    terminal_hit_radius: float = 8.0

    # Viewport
    zoom_min: float = style.ZOOM_MIN
    zoom_max: float = style.ZOOM_MAX
    zoom_step: float = style.ZOOM_STEP
    wheel_zoom_step: float = style.WHEEL_ZOOM_STEP

    @property
    def default_cable_label(self) -> str:
        """Cable label given to every new connection, e.g. ``2.5mm²``."""
        return f"{self.default_cable_size}{self.default_cable_unit}"

    def project_settings(self) -> dict[str, Any]:
        """Settings block written into saved documents."""
        return {
            "default_cable_unit": self.default_cable_unit,
            "grid_size": self.grid_size,
            "snap_to_grid": self.snap_to_grid,
            "show_grid": self.show_grid,
        }

    @classmethod
    def from_yaml(cls, path: str | Path = "circuitmap.yaml") -> CircuitMapConfig:
        """Load config from a YAML file; environment variables fill keys the file omits."""
        yaml_path = Path(path)
        yaml_data: dict[str, Any] = {}

        if yaml_path.exists():
            with yaml_path.open("r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
            yaml_data = _flatten_yaml(raw.get("circuitmap", {}))

        return cls(**yaml_data)


def _flatten_yaml(data: dict, prefix: str = "") -> dict:
    """Flatten nested YAML into flat key-value pairs for Pydantic.

    ``history: {limit: 20}`` becomes ``history_limit: 20``.
    """
    flat: dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}_{key}" if prefix else key
        if isinstance(value, dict):
            flat.update(_flatten_yaml(value, full_key))
        else:
            flat[full_key] = value
    return flat
