from __future__ import annotations

import pytest

from clampgraph.geometry import Point
from clampgraph.graph_constants import MARGIN_BOTTOM, MARGIN_LEFT, MARGIN_RIGHT, MARGIN_TOP
from clampgraph.transform import CoordinateTransform, SurfaceRect


def _transform(width: float = 100, height: float = 50) -> CoordinateTransform:
    # Grid of 560 x 310 px
    return CoordinateTransform(width, height, SurfaceRect(10, 20, 640, 360))


def test_grid_size_excludes_margins() -> None:
    t = _transform()
    assert t.grid_width == 640 - MARGIN_LEFT - MARGIN_RIGHT
    assert t.grid_height == 360 - MARGIN_TOP - MARGIN_BOTTOM


def test_virtual_origin_is_bottom_left_of_grid() -> None:
    t = _transform()
    origin = t.virtual_to_element(Point(0, 0))
    corner = t.virtual_to_element(Point(100, 50))
    assert origin.as_tuple() == pytest.approx((MARGIN_LEFT, 360 - MARGIN_BOTTOM))
    assert corner.as_tuple() == pytest.approx((640 - MARGIN_RIGHT, MARGIN_TOP))


@pytest.mark.parametrize("axis", ["x", "y"])
def test_unit_conversion_round_trip(axis) -> None:
    t = _transform(1234.5, 67.8)
    for value in (0.0, 1.0, 17.25, 300.0):
        assert t.virtual_to_element_units(axis, t.element_to_virtual_units(axis, value)) == pytest.approx(value)


def test_point_round_trip() -> None:
    t = _transform()
    for p in (Point(0, 0), Point(12.5, 7), Point(100, 50), Point(-3, 60)):
        back = t.element_to_virtual(t.virtual_to_element(p))
        assert back.x == pytest.approx(p.x)
        assert back.y == pytest.approx(p.y)


def test_viewport_to_element_subtracts_surface_origin() -> None:
    assert _transform().viewport_to_element(Point(110, 220)) == Point(100, 200)


def test_invalid_geometry_raises() -> None:
    with pytest.raises(ValueError):
        CoordinateTransform(100, 50, SurfaceRect(0, 0, 60, 360))
    with pytest.raises(ValueError):
        CoordinateTransform(0, 50, SurfaceRect(0, 0, 640, 360))
    with pytest.raises(ValueError):
        _transform().element_to_virtual_units("z", 1)  # type: ignore[arg-type]
