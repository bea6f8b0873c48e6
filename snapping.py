"""Cursor snapping onto the drawn polyline.

The polyline is ``(p_start, p1, p2, p_end)``. All distances are measured in
element units: the virtual axis system is not isotropic, so a distance that is
perpendicular on screen is generally not perpendicular in virtual units.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from .geometry import Point
from .graph_constants import SNAP_DISTANCE_LINE, SNAP_DISTANCE_POINT
from .transform import CoordinateTransform

# Vertex and segment distances are computed along different paths; treat them
# as equal below this difference (element units).
_CORNER_TOLERANCE = 1e-9


def segment_distances(cursor: Point, vertices: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Distances from ``cursor`` to each consecutive segment of ``vertices``.

    Parameters
    ----------
    cursor : Point
        Cursor position.
    vertices : numpy.ndarray
        ``(n, 2)`` array of polyline vertices.

    Returns
    -------
    distances : numpy.ndarray
        ``(n - 1,)`` distances. When the foot of the perpendicular falls within
        the segment this is the perpendicular distance, otherwise the distance
        to the nearer endpoint.
    feet : numpy.ndarray
        ``(n - 1, 2)`` feet of the perpendicular on each segment's line.
    """
    c = np.array([cursor.x, cursor.y], dtype=float)
    starts = vertices[:-1]
    ends = vertices[1:]
    direction = ends - starts
    length2 = np.einsum("ij,ij->i", direction, direction)

    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(length2 > 0, np.einsum("ij,ij->i", c - starts, direction) / length2, 0.0)

    feet = starts + t[:, None] * direction
    perpendicular = np.hypot(*(c - feet).T)
    to_endpoint = np.minimum(np.hypot(*(c - starts).T), np.hypot(*(c - ends).T))
    in_range = (length2 > 0) & (t >= 0.0) & (t <= 1.0)
    return np.where(in_range, perpendicular, to_endpoint), feet


def compute_line_snap(
    cursor: Point,
    polyline: Sequence[Point],
    transform: CoordinateTransform,
    threshold: float = SNAP_DISTANCE_LINE,
) -> Optional[Point]:
    """Return the element-space point the cursor snaps to, or ``None``.

    Parameters
    ----------
    cursor : Point
        Cursor in element units.
    polyline : sequence of Point
        ``(p_start, p1, p2, p_end)`` in virtual units.
    transform : CoordinateTransform
        Current virtual/element mapping.
    threshold : float
        Maximum segment distance (element units) that still snaps.

    Notes
    -----
    When the cursor is as close to a vertex as to the nearest segment (it sits
    at a shared corner, or beyond a segment's end) the vertex itself is
    returned; otherwise the foot of the perpendicular onto the nearest segment.
    """
    element_points = [transform.virtual_to_element(p) for p in polyline]
    vertices = np.array([p.as_tuple() for p in element_points], dtype=float)

    distances, feet = segment_distances(cursor, vertices)
    nearest_segment = int(np.argmin(distances))
    segment_distance = float(distances[nearest_segment])
    if segment_distance > threshold:
        return None

    c = np.array([cursor.x, cursor.y], dtype=float)
    vertex_distances = np.hypot(*(vertices - c).T)
    nearest_vertex = int(np.argmin(vertex_distances))
    if float(vertex_distances[nearest_vertex]) - segment_distance <= _CORNER_TOLERANCE:
        return element_points[nearest_vertex]

    foot = feet[nearest_segment]
    return Point(float(foot[0]), float(foot[1]))


def nearest_point_within(
    cursor: Point,
    candidates: Sequence[Point],
    threshold: float = SNAP_DISTANCE_POINT,
) -> Optional[int]:
    """Index of the candidate nearest to ``cursor`` within ``threshold``.

    Ties go to the earlier candidate. Returns ``None`` when no candidate is
    close enough.
    """
    best: Optional[int] = None
    best_distance = math.inf
    for index, candidate in enumerate(candidates):
        distance = Point.distance_between(cursor, candidate)
        if distance <= threshold and distance < best_distance:
            best, best_distance = index, distance
    return best


__all__ = ["compute_line_snap", "nearest_point_within", "segment_distances"]
