"""Immutable 2D geometry primitives used by the graph engine.

Purpose
-------
This module defines ``Point`` and ``LinearFunction``, the value types shared by
the coordinate transform, the boundary solver and the snap engine. Both are
frozen dataclasses: every operation returns a new instance.

Concepts and structure
----------------------
A ``Point`` carries no information about the coordinate space it lives in
(virtual axis units or element pixels). Callers keep track of that and only
move between spaces through :class:`clampgraph.transform.CoordinateTransform`.

Important gotchas
-----------------
- Vertical lines have no finite slope. ``LinearFunction.from_points`` stores
  ``VERTICAL_SLOPE`` (a large finite sentinel) instead of ``inf`` so downstream
  arithmetic never produces ``nan``.
- Intersecting parallel lines is expected during interactive dragging; it logs
  a warning and returns a finite point instead of raising.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import Iterable, Iterator, Tuple, TypeVar

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

T = TypeVar("T")

#: Finite stand-in for the slope of a vertical line.
VERTICAL_SLOPE = 1e12


def _require_coordinate(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(
            f"Point needs two number arguments (x, y); got {name}={value!r}"
        )
    result = float(value)
    if math.isnan(result):
        raise TypeError(f"Point coordinate {name} must not be NaN")
    return result


def clamp(n: float, low: float, high: float) -> float:
    """Return ``n`` limited to the closed range ``[low, high]``."""
    return min(max(n, low), high)


def pairwise(items: Iterable[T]) -> Iterator[Tuple[T, T]]:
    """Yield adjacent pairs: ``[a, b, c] -> (a, b), (b, c)``."""
    iterator = iter(items)
    try:
        prev = next(iterator)
    except StopIteration:
        return
    for item in iterator:
        yield prev, item
        prev = item


def format_decimal(value: float, decimals: int = 2) -> str:
    """Round ``value`` and render it without trailing zeros (``12.50 -> "12.5"``).

    Negative zero renders as ``"0"``.
    """
    text = f"{round(value, decimals):.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


@dataclass(frozen=True)
class Point:
    """A point in either virtual or element coordinates.

    Parameters
    ----------
    x, y : float
        Coordinates. Any real number is accepted; ``bool``, ``None``, strings
        and ``nan`` raise ``TypeError``.
    """

    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", _require_coordinate("x", self.x))
        object.__setattr__(self, "y", _require_coordinate("y", self.y))

    @staticmethod
    def distance_between(p1: "Point", p2: "Point") -> float:
        """Euclidean distance between ``p1`` and ``p2``."""
        return math.hypot(p2.x - p1.x, p2.y - p1.y)

    def offset(self, dx: float, dy: float) -> "Point":
        """Return a new point displaced by ``(dx, dy)``."""
        return Point(self.x + dx, self.y + dy)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class LinearFunction:
    """Line ``y = slope * x + intercept``.

    Parameters
    ----------
    slope : float
        Finite slope. Vertical lines use ``VERTICAL_SLOPE``.
    intercept : float
        Value of ``y`` at ``x = 0``.

    Examples
    --------
    >>> line = LinearFunction.from_points(Point(10, 5), Point(20, 15))
    >>> line.slope, line.intercept
    (1.0, -5.0)
    >>> line.y_at(50)
    45.0
    """

    slope: float
    intercept: float

    def __post_init__(self) -> None:
        slope = float(self.slope)
        if math.isnan(slope):
            raise ValueError("LinearFunction slope must not be NaN")
        if math.isinf(slope):
            slope = math.copysign(VERTICAL_SLOPE, slope)
        object.__setattr__(self, "slope", slope)
        object.__setattr__(self, "intercept", float(self.intercept))

    @classmethod
    def from_points(cls, p1: Point, p2: Point) -> "LinearFunction":
        """Line through ``p1`` and ``p2``."""
        if not isinstance(p1, Point) or not isinstance(p2, Point):
            raise TypeError("LinearFunction.from_points expects two Point instances")
        dx = p2.x - p1.x
        dy = p2.y - p1.y
        if dx == 0:
            slope = VERTICAL_SLOPE if dy >= 0 else -VERTICAL_SLOPE
        else:
            slope = dy / dx
        return cls(slope, p1.y - slope * p1.x)

    @classmethod
    def from_point_slope(cls, p: Point, slope: float) -> "LinearFunction":
        """Line with ``slope`` passing through ``p``."""
        return cls(slope, p.y - slope * p.x)

    @staticmethod
    def intersection(l1: "LinearFunction", l2: "LinearFunction") -> Point:
        """Intersection point of ``l1`` and ``l2``.

        Parallel lines have no intersection; a warning is logged and the point
        of ``l1`` at ``x = 0`` is returned.
        """
        if l1.slope == l2.slope:
            logger.warning("Linear functions are parallel")
            return Point(0.0, l1.intercept)
        x = (l2.intercept - l1.intercept) / (l1.slope - l2.slope)
        return Point(x, l1.y_at(x))

    @property
    def inverse(self) -> "LinearFunction":
        """Perpendicular direction (slope ``-1/slope``) through the intercept."""
        if self.slope == 0:
            return LinearFunction(VERTICAL_SLOPE, self.intercept)
        return LinearFunction(-1.0 / self.slope, self.intercept)

    def y_at(self, x: float) -> float:
        return self.slope * x + self.intercept

    def x_at(self, y: float) -> float:
        """Value of ``x`` where the line reaches ``y``.

        A flat line never reaches any other height: the result is a signed
        infinity (or ``0.0`` when ``y`` is on the line).
        """
        if self.slope == 0:
            delta = y - self.intercept
            return 0.0 if delta == 0 else math.copysign(math.inf, delta)
        return (y - self.intercept) / self.slope

    def foot_of_perpendicular(self, p: Point) -> Point:
        """Projection of ``p`` onto this line."""
        normal = LinearFunction.from_point_slope(p, self.inverse.slope)
        return LinearFunction.intersection(self, normal)

    def distance_from(self, p: Point) -> float:
        """Shortest distance from ``p`` to the infinite line."""
        return Point.distance_between(p, self.foot_of_perpendicular(p))

    def distance_to_point_in_range(self, p: Point, x_start: float, x_end: float) -> float:
        """Distance from ``p`` to the part of the line with x in the given range.

        If the perpendicular foot falls inside ``[x_start, x_end]`` the result is
        the perpendicular distance, otherwise the distance to the nearer range
        endpoint on the line.
        """
        low, high = min(x_start, x_end), max(x_start, x_end)
        foot = self.foot_of_perpendicular(p)
        if low <= foot.x <= high:
            return Point.distance_between(p, foot)
        return min(
            Point.distance_between(p, Point(low, self.y_at(low))),
            Point.distance_between(p, Point(high, self.y_at(high))),
        )


__all__ = [
    "VERTICAL_SLOPE",
    "LinearFunction",
    "Point",
    "clamp",
    "format_decimal",
    "pairwise",
]
