"""Compile-time configuration shared by the graph engine and its renderers.

Units are annotated per constant: *virtual* values are in axis units,
*element* values are pixels relative to the drawing surface.
Keeping these contracts in one module gives tests a single place to lock the
interaction semantics.
"""

from __future__ import annotations

from dataclasses import dataclass

# Axis limits (virtual) ------------------------------------------------------
MAX_VIEWPORT = 10_000
MAX_SIZE = 1_000

MAX_VIRTUAL_WIDTH = MAX_VIEWPORT
MAX_VIRTUAL_HEIGHT = MAX_SIZE
MIN_VIRTUAL_WIDTH = 100
MIN_VIRTUAL_HEIGHT = 1

# Margins reserved for rulers and labels (element) ---------------------------
MARGIN_BOTTOM = 20
MARGIN_LEFT = 40
MARGIN_TOP = 30
MARGIN_RIGHT = 40

# Snapping (element) ---------------------------------------------------------
SNAP_DISTANCE_POINT = 20
SNAP_DISTANCE_LINE = 15

POINT_CIRCLE_RADIUS = 5
INFO_LABEL_WIDTH = 155
INFO_LABEL_HEIGHT = 50

# Rulers ---------------------------------------------------------------------
# Base virtual unit: 10 / 2**8. Doubling gives .0390625, .078125, ... 1.25, 2.5,
# 5, 10, 20, 40, 80, ...
GRID_SIZE_MULTIPLIER = 10 / 256
MIN_RULER_SPACING = 40
RULER_MARKING_LENGTH = 8

# Dragging (virtual) ---------------------------------------------------------
POINT_MARGIN = 1

# Auto-extension (relative) --------------------------------------------------
EXTENSION_MARGIN_MULTIPLIER = 0.05
VIEWPORT_MODIFY_INCREMENT = 0.01
UNDER_ZOOM_FRACTION = 0.2

# Scheduling (milliseconds) --------------------------------------------------
EXTEND_TICK_MS = 10
FRAME_MS = 16

DEFAULT_CANVAS_WIDTH = 640
DEFAULT_CANVAS_HEIGHT = 360


@dataclass(frozen=True)
class GraphStyle:
    """Colors and fonts used when drawing the graph.

    Parameters
    ----------
    main:
        Line and point color.
    main_mid:
        Marker color for the line-snapped cursor.
    main_soft:
        Grid line color.
    background:
        Label text color on the dark info box.
    highlight:
        Color of the highlighted control point.
    label_font:
        Font for the axis unit labels.
    """

    main: str = "#4791ff"
    main_mid: str = "#a5c9ff"
    main_soft: str = "#eeeeee"
    background: str = "#ffffff"
    highlight: str = "#FFAEA3"
    edge: str = "black"
    info_box: str = "rgba(0, 0, 0, 0.7)"
    label_font: str = "bold 12px sans-serif"
    info_font_size: int = 14


__all__ = [
    "DEFAULT_CANVAS_HEIGHT",
    "DEFAULT_CANVAS_WIDTH",
    "EXTEND_TICK_MS",
    "EXTENSION_MARGIN_MULTIPLIER",
    "FRAME_MS",
    "GRID_SIZE_MULTIPLIER",
    "GraphStyle",
    "INFO_LABEL_HEIGHT",
    "INFO_LABEL_WIDTH",
    "MARGIN_BOTTOM",
    "MARGIN_LEFT",
    "MARGIN_RIGHT",
    "MARGIN_TOP",
    "MAX_SIZE",
    "MAX_VIEWPORT",
    "MAX_VIRTUAL_HEIGHT",
    "MAX_VIRTUAL_WIDTH",
    "MIN_RULER_SPACING",
    "MIN_VIRTUAL_HEIGHT",
    "MIN_VIRTUAL_WIDTH",
    "POINT_CIRCLE_RADIUS",
    "POINT_MARGIN",
    "RULER_MARKING_LENGTH",
    "SNAP_DISTANCE_LINE",
    "SNAP_DISTANCE_POINT",
    "UNDER_ZOOM_FRACTION",
    "VIEWPORT_MODIFY_INCREMENT",
]
