"""Viewport model for the draggable graph.

Purpose
-------
This module defines ``GraphViewport``, the mutable record of how much of the
virtual axis system is visible, plus the two pure rules that resize it:

- :func:`fit_dimensions_to_points` picks an extent that frames both control
  points (used when points change programmatically),
- :func:`ruler_spacing_for` picks the ruler step for an axis.

Notes
-----
The auto-extension loop in :mod:`clampgraph.graph_controller` also mutates
the extent while a point is dragged near an edge; it writes through the same
record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .geometry import Point, clamp
from .graph_constants import (
    EXTENSION_MARGIN_MULTIPLIER,
    GRID_SIZE_MULTIPLIER,
    MAX_VIRTUAL_HEIGHT,
    MAX_VIRTUAL_WIDTH,
    MIN_RULER_SPACING,
    MIN_VIRTUAL_HEIGHT,
    MIN_VIRTUAL_WIDTH,
    UNDER_ZOOM_FRACTION,
)
from .transform import Axis, CoordinateTransform


@dataclass
class GraphViewport:
    """State model for the visible part of the virtual axis system.

    Parameters
    ----------
    virtual_width : float
        Visible viewport range, ``[0, virtual_width]``.
    virtual_height : float
        Visible size range, ``[0, virtual_height]``.
    ruler_spacing_x : float
        Virtual distance between x ruler markings.
    ruler_spacing_y : float
        Virtual distance between y ruler markings.
    """

    virtual_width: float = MIN_VIRTUAL_WIDTH
    virtual_height: float = MIN_VIRTUAL_HEIGHT
    ruler_spacing_x: float = GRID_SIZE_MULTIPLIER
    ruler_spacing_y: float = GRID_SIZE_MULTIPLIER

    def ruler_spacing(self, axis: Axis) -> float:
        return self.ruler_spacing_x if axis == "x" else self.ruler_spacing_y

    def set_ruler_spacing(self, axis: Axis, spacing: float) -> None:
        if axis == "x":
            self.ruler_spacing_x = spacing
        else:
            self.ruler_spacing_y = spacing


def fit_dimensions_to_points(
    p1: Point,
    p2: Point,
    virtual_width: float,
    virtual_height: float,
    *,
    force: bool = False,
) -> Optional[tuple[float, float]]:
    """Return a new ``(width, height)`` framing ``p1`` and ``p2``, or ``None``.

    The extent only changes when a point lies outside it or when the points
    occupy less than ``UNDER_ZOOM_FRACTION`` of it (``force`` skips the check).
    The new extent leaves a margin of 10% of the far coordinate (or the near
    coordinate, whichever is larger) beyond the far point.
    """
    lower_y = min(p1.y, p2.y)
    higher_y = max(p1.y, p2.y)

    should_update = force or (
        p1.x < 0
        or lower_y < 0
        or p2.x > virtual_width
        or higher_y > virtual_height
        or p2.x < virtual_width * UNDER_ZOOM_FRACTION
        or higher_y < virtual_height * UNDER_ZOOM_FRACTION
    )
    if not should_update:
        return None

    space_right = max(p1.x, p2.x * EXTENSION_MARGIN_MULTIPLIER * 2)
    space_top = max(lower_y, higher_y * EXTENSION_MARGIN_MULTIPLIER * 2)

    width = clamp(p2.x + space_right, MIN_VIRTUAL_WIDTH, MAX_VIRTUAL_WIDTH)
    height = clamp(higher_y + space_top, MIN_VIRTUAL_HEIGHT, MAX_VIRTUAL_HEIGHT)
    return width, height


def ruler_spacing_for(transform: CoordinateTransform, axis: Axis) -> float:
    """Smallest ``GRID_SIZE_MULTIPLIER * 2**n`` at least ``MIN_RULER_SPACING`` px wide."""
    min_virtual_unit = transform.element_to_virtual_units(axis, MIN_RULER_SPACING)
    spacing = GRID_SIZE_MULTIPLIER
    while spacing < min_virtual_unit:
        spacing *= 2
    return spacing


__all__ = ["GraphViewport", "fit_dimensions_to_points", "ruler_spacing_for"]
