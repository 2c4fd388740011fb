"""Canvas viewport: pan offset, zoom and the screen/diagram transform."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from circuitmap.diagram.style import WHEEL_ZOOM_STEP, ZOOM_DEFAULT, ZOOM_MAX, ZOOM_MIN, ZOOM_STEP
from circuitmap.types import Point
from circuitmap.wiring.models import Component


@dataclass
class Viewport:
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = ZOOM_DEFAULT
    zoom_min: float = ZOOM_MIN
    zoom_max: float = ZOOM_MAX
    zoom_step: float = ZOOM_STEP
    wheel_step: float = WHEEL_ZOOM_STEP

    @property
    def pan_offset(self) -> Point:
        return (self.pan_x, self.pan_y)

    def state(self) -> dict:
        """Current ``{pan_offset, zoom}`` for host renderers."""
        return {"pan_offset": self.pan_offset, "zoom": self.zoom}

    # -- Transform --

    def screen_to_diagram(self, screen: Point) -> Point:
        return ((screen[0] - self.pan_x) / self.zoom, (screen[1] - self.pan_y) / self.zoom)

    def diagram_to_screen(self, pos: Point) -> Point:
        return (pos[0] * self.zoom + self.pan_x, pos[1] * self.zoom + self.pan_y)

    # -- Zoom --

    def set_zoom(self, zoom: float) -> float:
        self.zoom = min(self.zoom_max, max(self.zoom_min, zoom))
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom + self.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom - self.zoom_step)

    def wheel(self, delta_y: float, modifier: bool = True) -> float:
        """Wheel zoom; only acts while the zoom modifier (Ctrl/Cmd) is held."""
        if modifier and delta_y:
            self.set_zoom(self.zoom + (-self.wheel_step if delta_y > 0 else self.wheel_step))
        return self.zoom

    # -- Pan --

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy

    def reset(self) -> None:
        self.zoom = ZOOM_DEFAULT
        self.pan_x = 0.0
        self.pan_y = 0.0

    def center_on(self, components: Iterable[Component], canvas_width: float, canvas_height: float) -> bool:
        """Pan so the middle of all component centers sits mid-canvas.

        Returns False (and leaves the view alone) when there are no components.
        """
        comps = list(components)
        if not comps:
            return False
        xs = [c.x for c in comps]
        ys = [c.y for c in comps]
        center_x = (min(xs) + max(xs)) / 2
        center_y = (min(ys) + max(ys)) / 2
        self.pan_x = canvas_width / 2 - center_x * self.zoom
        self.pan_y = canvas_height / 2 - center_y * self.zoom
        return True
