"""Shared enums and type aliases."""

from enum import Enum

Point = tuple[float, float]


class Edge(str, Enum):
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    @property
    def is_horizontal(self) -> bool:
        """Top and bottom edges run horizontally; wires leave them vertically."""
        return self in (Edge.TOP, Edge.BOTTOM)


class TerminalKind(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    EARTH = "earth"
    AC_LIVE = "ac-live"
    AC_NEUTRAL = "ac-neutral"
    SIGNAL = "signal"


class ComponentCategory(str, Enum):
    POWER_SOURCE = "power-source"
    POWER_STORAGE = "power-storage"
    POWER_MANAGEMENT = "power-management"
    DISTRIBUTION = "distribution"
    LIGHTING = "lighting"
    CLIMATE = "climate"
    WATER = "water"
    APPLIANCES = "appliances"
    SAFETY = "safety"
    MONITORING = "monitoring"
    CUSTOM = "custom"


class MouseButton(str, Enum):
    PRIMARY = "primary"
    MIDDLE = "middle"
    SECONDARY = "secondary"
