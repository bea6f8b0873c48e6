from __future__ import annotations

import logging
import math

import pytest

from clampgraph.geometry import (
    VERTICAL_SLOPE,
    LinearFunction,
    Point,
    clamp,
    format_decimal,
    pairwise,
)


def test_point_rejects_non_numeric_coordinates() -> None:
    with pytest.raises(TypeError):
        Point("1", 2)
    with pytest.raises(TypeError):
        Point(1, None)
    with pytest.raises(TypeError):
        Point(True, 2)
    with pytest.raises(TypeError):
        Point(float("nan"), 0)


def test_point_is_immutable_and_distance_is_euclidean() -> None:
    p = Point(3, 4)
    with pytest.raises(AttributeError):
        p.x = 1  # type: ignore[misc]
    assert Point.distance_between(Point(0, 0), p) == 5.0
    assert p.offset(1, -1) == Point(4, 3)


def test_line_from_points_and_evaluation() -> None:
    line = LinearFunction.from_points(Point(10, 5), Point(20, 15))
    assert line.slope == 1.0
    assert line.intercept == -5.0
    assert line.y_at(50) == 45.0
    assert line.x_at(0) == 5.0


def test_vertical_line_uses_finite_sentinel_slope() -> None:
    up = LinearFunction.from_points(Point(3, 0), Point(3, 10))
    down = LinearFunction.from_points(Point(3, 10), Point(3, 0))
    assert up.slope == VERTICAL_SLOPE
    assert down.slope == -VERTICAL_SLOPE
    assert math.isfinite(up.intercept)


def test_infinite_slope_is_replaced_and_nan_rejected() -> None:
    assert LinearFunction(math.inf, 0).slope == VERTICAL_SLOPE
    assert LinearFunction(-math.inf, 0).slope == -VERTICAL_SLOPE
    with pytest.raises(ValueError):
        LinearFunction(math.nan, 0)


def test_flat_line_x_at_is_signed_infinity() -> None:
    flat = LinearFunction(0, 2)
    assert flat.x_at(2) == 0.0
    assert flat.x_at(5) == math.inf
    assert flat.x_at(-5) == -math.inf


def test_inverse_is_perpendicular() -> None:
    line = LinearFunction(2, 1)
    assert line.inverse.slope == pytest.approx(-0.5)
    assert LinearFunction(0, 1).inverse.slope == VERTICAL_SLOPE


def test_intersection_and_parallel_fallback(caplog) -> None:
    a = LinearFunction(1, 0)
    b = LinearFunction(-1, 4)
    assert LinearFunction.intersection(a, b) == Point(2, 2)

    with caplog.at_level(logging.WARNING, logger="clampgraph.geometry"):
        p = LinearFunction.intersection(a, LinearFunction(1, 3))
    assert p == Point(0, 0)
    assert "parallel" in caplog.text


def test_distance_to_point_in_range() -> None:
    line = LinearFunction(0, 0)
    # Foot inside the range: perpendicular distance.
    assert line.distance_to_point_in_range(Point(5, 3), 0, 10) == pytest.approx(3)
    # Foot outside the range: distance to the nearer endpoint.
    assert line.distance_to_point_in_range(Point(13, 4), 0, 10) == pytest.approx(5)
    # Range given backwards.
    assert line.distance_to_point_in_range(Point(13, 4), 10, 0) == pytest.approx(5)


def test_helpers() -> None:
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert list(pairwise([1, 2, 3])) == [(1, 2), (2, 3)]
    assert list(pairwise([])) == []
    assert format_decimal(12.5) == "12.5"
    assert format_decimal(7.0) == "7"
    assert format_decimal(0.035 * 100) == "3.5"
    assert format_decimal(-0.001) == "0"
    assert format_decimal(1.26, 1) == "1.3"
