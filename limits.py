"""Boundary points of the line through the two control points.

The graph draws the line beyond ``p1`` and ``p2`` until it leaves the visible
virtual rectangle ``[0, virtual_width] x [0, virtual_height]``. Each end has its
own clamp policy:

- clamped: the line is flat beyond the control point, so the boundary point
  sits on the vertical edge at the control point's height;
- unclamped: the line keeps its slope until it crosses the first rectangle
  edge in the direction away from the other control point.

The result must be recomputed whenever p1, p2, the virtual extent or a clamp
flag changes.
"""

from __future__ import annotations

import math

from .geometry import LinearFunction, Point


def _nearest_exit(reference: Point, vertical: Point, horizontal: Point | None) -> Point:
    if horizontal is None or not (math.isfinite(horizontal.x) and math.isfinite(horizontal.y)):
        return vertical
    if Point.distance_between(horizontal, reference) < Point.distance_between(vertical, reference):
        return horizontal
    return vertical


def _horizontal_crossing(line: LinearFunction, y: float) -> Point | None:
    if line.slope == 0:
        return None
    x = line.x_at(y)
    if not math.isfinite(x):
        return None
    return Point(x, y)


def compute_limits(
    p1: Point,
    p2: Point,
    virtual_width: float,
    virtual_height: float,
    is_clamped_min: bool,
    is_clamped_max: bool,
) -> tuple[Point, Point]:
    """Return ``(p_start, p_end)`` where the drawn line meets the rectangle.

    Parameters
    ----------
    p1, p2 : Point
        Control points in virtual units, ``p1.x < p2.x``.
    virtual_width, virtual_height : float
        Virtual extent of the visible rectangle.
    is_clamped_min, is_clamped_max : bool
        Clamp policy of the low (``p1``) and high (``p2``) ends.

    Returns
    -------
    tuple[Point, Point]
        Boundary points in virtual units.

    Notes
    -----
    For an unclamped end two exits are possible: the vertical edge and the
    horizontal edge the ray heads toward. The one closer to that end's own
    control point is the one the ray reaches first. Flat lines and other
    degenerate cases fall back to the vertical edge.
    """
    line = LinearFunction.from_points(p1, p2)

    if is_clamped_min:
        p_start = Point(0.0, p1.y)
    else:
        # Heading left: a falling line rises toward the top edge.
        edge_y = virtual_height if line.slope < 0 else 0.0
        p_start = _nearest_exit(
            p1,
            Point(0.0, line.intercept),
            _horizontal_crossing(line, edge_y),
        )

    if is_clamped_max:
        p_end = Point(virtual_width, p2.y)
    else:
        edge_y = virtual_height if line.slope > 0 else 0.0
        p_end = _nearest_exit(
            p2,
            Point(virtual_width, line.y_at(virtual_width)),
            _horizontal_crossing(line, edge_y),
        )

    return p_start, p_end


__all__ = ["compute_limits"]
