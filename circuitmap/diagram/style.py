"""Fixed geometry and interaction constants for the wiring canvas."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Component footprint (shared by every component, center-based)
# ---------------------------------------------------------------------------
COMPONENT_WIDTH = 180.0   # diagram units
COMPONENT_HEIGHT = 100.0  # diagram units

# ---------------------------------------------------------------------------
# Terminals
# ---------------------------------------------------------------------------
OFFSET_MIN = 0.0            # % along an edge
OFFSET_MAX = 100.0
REPOSITION_OFFSET_MIN = 10.0  # manual repositioning keeps terminals off the corners
REPOSITION_OFFSET_MAX = 90.0
CONNECT_FALLBACK_OFFSET = 50.0  # offset used when a legacy terminal is auto-oriented

# Default terminal labels by kind (others get an empty label)
KIND_LABELS = {
    "positive": "+",
    "negative": "-",
}

# ---------------------------------------------------------------------------
# Wires
# ---------------------------------------------------------------------------
STUB_LENGTH = 25.0  # straight run leaving a terminal before the first bend

# ---------------------------------------------------------------------------
# Viewport
# ---------------------------------------------------------------------------
ZOOM_MIN = 0.25
ZOOM_MAX = 2.0
ZOOM_STEP = 0.25
WHEEL_ZOOM_STEP = 0.1
ZOOM_DEFAULT = 1.0

# ---------------------------------------------------------------------------
# Cables
# ---------------------------------------------------------------------------
DEFAULT_CABLE_SIZE = "2.5"
DEFAULT_CABLE_UNIT = "mm²"
DEFAULT_CABLE_LABEL = f"{DEFAULT_CABLE_SIZE}{DEFAULT_CABLE_UNIT}"

# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------
DUPLICATE_OFFSET = 60.0  # both axes
