"""Mapping between virtual axis units and element pixel units.

The graph works in two coordinate systems:

- *virtual units*: the axis system (viewport px on x, size on y). One unit is
  generally not one pixel and y grows upward.
- *element units*: pixels relative to the drawing surface's top-left corner,
  y grows downward.

Each axis is scaled independently over the drawing rectangle, which is the
surface minus the margins reserved for rulers and labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .geometry import Point
from .graph_constants import MARGIN_BOTTOM, MARGIN_LEFT, MARGIN_RIGHT, MARGIN_TOP

Axis = Literal["x", "y"]


@dataclass(frozen=True)
class SurfaceRect:
    """On-screen bounding box of a drawing surface (element units)."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class Margins:
    """Space reserved around the axis system for rulers (element units)."""

    top: float = MARGIN_TOP
    right: float = MARGIN_RIGHT
    bottom: float = MARGIN_BOTTOM
    left: float = MARGIN_LEFT


DEFAULT_MARGINS = Margins()


@dataclass(frozen=True)
class CoordinateTransform:
    """Pure virtual/element conversion for one extent and surface geometry.

    Parameters
    ----------
    virtual_width, virtual_height : float
        Current virtual extent of the axis system.
    rect : SurfaceRect
        Bounding box of the surface on screen.
    margins : Margins
        Pixel margins around the grid.

    Raises
    ------
    ValueError
        If the surface leaves no room for the grid on either axis, or the
        virtual extent is not positive.
    """

    virtual_width: float
    virtual_height: float
    rect: SurfaceRect
    margins: Margins = DEFAULT_MARGINS

    def __post_init__(self) -> None:
        if self.grid_width <= 0 or self.grid_height <= 0:
            raise ValueError(
                f"Surface {self.rect.width}x{self.rect.height} is too small for its margins"
            )
        if self.virtual_width <= 0 or self.virtual_height <= 0:
            raise ValueError("Virtual dimensions must be positive")

    @property
    def grid_width(self) -> float:
        """Width of the part of the surface belonging to the axis system."""
        return self.rect.width - self.margins.left - self.margins.right

    @property
    def grid_height(self) -> float:
        """Height of the part of the surface belonging to the axis system."""
        return self.rect.height - self.margins.top - self.margins.bottom

    def _extents(self, axis: Axis) -> tuple[float, float]:
        if axis == "x":
            return self.virtual_width, self.grid_width
        if axis == "y":
            return self.virtual_height, self.grid_height
        raise ValueError(f"Unknown axis {axis!r}; expected 'x' or 'y'")

    def element_to_virtual_units(self, axis: Axis, element_value: float) -> float:
        virtual_size, grid_size = self._extents(axis)
        return element_value * (virtual_size / grid_size)

    def virtual_to_element_units(self, axis: Axis, virtual_value: float) -> float:
        virtual_size, grid_size = self._extents(axis)
        return virtual_value / (virtual_size / grid_size)

    def viewport_to_element(self, p: Point) -> Point:
        """Screen (client) coordinates to coordinates relative to the surface."""
        return Point(p.x - self.rect.left, p.y - self.rect.top)

    def virtual_to_element(self, p: Point) -> Point:
        """Position of a virtual point on the surface."""
        # Virtual y is measured from the bottom, element y from the top.
        y_from_top = self.virtual_height - p.y
        return Point(
            self.virtual_to_element_units("x", p.x) + self.margins.left,
            self.virtual_to_element_units("y", y_from_top) + self.margins.top,
        )

    def element_to_virtual(self, p: Point) -> Point:
        """Virtual position of a point on the surface."""
        x = self.element_to_virtual_units("x", p.x - self.margins.left)
        y_from_top = self.element_to_virtual_units("y", p.y - self.margins.top)
        return Point(x, self.virtual_height - y_from_top)


__all__ = ["Axis", "CoordinateTransform", "DEFAULT_MARGINS", "Margins", "SurfaceRect"]
