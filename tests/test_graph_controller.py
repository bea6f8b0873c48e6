from __future__ import annotations

import logging

import pytest

from clampgraph.geometry import Point
from clampgraph.graph_constants import (
    EXTEND_TICK_MS,
    FRAME_MS,
    GraphStyle,
    MAX_VIRTUAL_WIDTH,
    POINT_MARGIN,
)
from clampgraph.graph_controller import ExtensionLoopState, HighlightedPoint
from clampgraph.store import GraphState

TICK_S = EXTEND_TICK_MS / 1000.0
FRAME_S = FRAME_MS / 1000.0


def _screen(controller, p: Point) -> Point:
    return controller.transform.virtual_to_element(p)


def test_construction_fits_extent_and_requests_a_frame(make_controller, scheduler, surface) -> None:
    controller = make_controller(GraphState(sizes=((200, 14), (400, 21))))
    assert controller.virtual_width == pytest.approx(600)
    assert controller.virtual_height == pytest.approx(35)
    assert controller.highlighted is None
    assert not controller.is_point_selected

    assert len(scheduler.active(FRAME_S)) == 1
    scheduler.run_pending(FRAME_S)
    assert surface.frames == 1
    assert "(vw)" in surface.texts()
    assert "(px)" in surface.texts()


def test_hover_highlights_nearest_point_and_sets_cursor(make_controller, input_source, surface) -> None:
    controller = make_controller()
    input_source.move(_screen(controller, controller.p1).offset(3, 3))
    assert controller.highlighted is HighlightedPoint.P1
    assert controller.line_snapped_cursor is None
    assert surface.cursors[-1] == "grab"

    input_source.move(_screen(controller, controller.p2))
    assert controller.highlighted is HighlightedPoint.P2

    input_source.move(Point(600, 20))
    assert controller.highlighted is None
    assert surface.cursors[-1] == "default"


def test_drag_p1_past_p2_clamps_to_point_margin(make_controller, input_source, surface) -> None:
    controller = make_controller()
    p2 = controller.p2
    start = _screen(controller, controller.p1)

    input_source.move(start)
    input_source.down(start)
    assert controller.is_point_selected
    assert surface.cursors[-1] == "grabbing"

    input_source.move(Point(590, start.y))
    assert controller.p1.x == p2.x - POINT_MARGIN
    assert controller.p1.y == pytest.approx(14, abs=0.01)

    input_source.up(Point(590, start.y))
    assert not controller.is_point_selected
    assert controller.changes == [{"sizes": ((p2.x - POINT_MARGIN, controller.p1.y), (p2.x, p2.y))}]


def test_drag_p2_before_p1_clamps_to_point_margin(make_controller, input_source) -> None:
    controller = make_controller()
    p1 = controller.p1
    start = _screen(controller, controller.p2)
    input_source.drag(start, Point(0, start.y))
    assert controller.p2.x == p1.x + POINT_MARGIN
    assert controller.changes[-1]["sizes"][1][0] == p1.x + POINT_MARGIN


def test_drag_keeps_points_inside_the_extent(make_controller, input_source) -> None:
    controller = make_controller()
    start = _screen(controller, controller.p1)
    input_source.move(start)
    input_source.down(start)
    input_source.move(Point(start.x, 5000))
    assert controller.p1.y == 0
    assert controller.p_start.y >= 0


def test_drag_updates_limit_points(make_controller, input_source) -> None:
    controller = make_controller(GraphState(is_clamped_min=True))
    start = _screen(controller, controller.p1)
    input_source.move(start)
    input_source.down(start)
    input_source.move(start.offset(0, -40))
    assert controller.p_start == Point(0, controller.p1.y)


def test_pointer_up_without_drag_reports_nothing(make_controller, input_source) -> None:
    controller = make_controller()
    input_source.move(Point(600, 20))
    input_source.down(Point(600, 20))
    input_source.up(Point(600, 20))
    assert controller.changes == []


def test_line_snap_near_the_polyline(make_controller, input_source) -> None:
    controller = make_controller()
    a = _screen(controller, controller.p1)
    b = _screen(controller, controller.p2)
    mid = Point((a.x + b.x) / 2, (a.y + b.y) / 2)

    input_source.move(mid.offset(0, 4))
    assert controller.highlighted is None
    snapped = controller.line_snapped_cursor
    assert snapped is not None
    assert Point.distance_between(snapped, mid) < 5

    input_source.move(Point(1000, 1000))
    assert controller.line_snapped_cursor is None


def test_dragging_p2_to_the_right_edge_extends_width(make_controller, input_source, scheduler) -> None:
    controller = make_controller()
    width = controller.virtual_width
    start = _screen(controller, controller.p2)

    input_source.move(start)
    input_source.down(start)
    input_source.move(Point(620, start.y))
    assert controller.p2.x == width
    assert controller.extend_flags.extend_x
    assert not controller.extend_flags.extend_y
    assert controller.is_extending

    assert scheduler.run_pending(TICK_S) == 1
    assert controller.virtual_width == pytest.approx(width * 1.01)
    # Stationary cursor, new ratio: the point follows the edge.
    assert controller.p2.x == pytest.approx(round(controller.virtual_width, 2), abs=0.01)

    scheduler.run_pending(TICK_S)
    assert controller.virtual_width == pytest.approx(width * 1.01 * 1.01)

    input_source.up(Point(620, start.y))
    assert not controller.is_extending
    assert scheduler.active(TICK_S) == []
    assert controller.changes[-1]["sizes"][1] == (controller.p2.x, controller.p2.y)


def test_extension_stops_at_maximum_width(make_controller, input_source, scheduler) -> None:
    controller = make_controller(GraphState(sizes=((5000, 14), (9500, 21))))
    assert controller.virtual_width == MAX_VIRTUAL_WIDTH
    start = _screen(controller, controller.p2)

    input_source.move(start)
    input_source.down(start)
    input_source.move(Point(630, start.y))
    assert controller.is_extending

    scheduler.run_pending(TICK_S)
    assert controller.virtual_width == MAX_VIRTUAL_WIDTH
    assert not controller.is_extending
    assert scheduler.active(TICK_S) == []


def test_dragging_p1_to_the_left_edge_reduces_width(make_controller, input_source, scheduler) -> None:
    controller = make_controller()
    width = controller.virtual_width
    start = _screen(controller, controller.p1)

    input_source.move(start)
    input_source.down(start)
    input_source.move(Point(0, start.y))
    assert controller.p1.x == 0
    assert controller.extend_flags.reduce_x

    scheduler.run_pending(TICK_S)
    assert controller.virtual_width == pytest.approx(width * 0.99)
    assert controller.virtual_width >= controller.p2.x


def test_leaving_the_margin_stops_the_loop(make_controller, input_source, scheduler) -> None:
    controller = make_controller()
    start = _screen(controller, controller.p2)
    input_source.move(start)
    input_source.down(start)
    input_source.move(Point(620, start.y))
    assert controller.is_extending

    input_source.move(start)
    assert not controller.is_extending
    assert scheduler.run_pending(TICK_S) == 0


def test_extension_tick_on_stopped_state_is_a_no_op(make_controller) -> None:
    controller = make_controller()
    width = controller.virtual_width
    state = ExtensionLoopState(HighlightedPoint.P2, 1, 0, stopped=True)
    assert controller.extension_tick(state) is state
    assert controller.virtual_width == width


def test_contract_violations_are_logged(make_controller, caplog) -> None:
    controller = make_controller()
    with caplog.at_level(logging.WARNING, logger="clampgraph.graph_controller"):
        controller.check_extend_virtual_dimensions()
        controller.start_extension_loop()
        controller.stop_extension_loop()
    assert "No highlighted point" in caplog.text
    assert "needs to be highlighted" in caplog.text
    assert "Extension loop is not running" in caplog.text
    assert not controller.is_extending


def test_starting_a_running_loop_is_logged(make_controller, input_source, caplog) -> None:
    controller = make_controller()
    start = _screen(controller, controller.p2)
    input_source.move(start)
    input_source.down(start)
    input_source.move(Point(620, start.y))
    with caplog.at_level(logging.ERROR, logger="clampgraph.graph_controller"):
        controller.start_extension_loop()
    assert "already started" in caplog.text
    assert controller.is_extending


def test_update_is_idempotent(make_controller) -> None:
    state = GraphState(sizes=((320, 16), (1280, 24)), is_clamped_max=True)
    controller = make_controller(state)
    controller.update(state)
    snapshot = (
        controller.virtual_width,
        controller.virtual_height,
        controller.p1,
        controller.p2,
        controller.p_start,
        controller.p_end,
    )
    controller.update(state)
    assert snapshot == (
        controller.virtual_width,
        controller.virtual_height,
        controller.p1,
        controller.p2,
        controller.p_start,
        controller.p_end,
    )


def test_update_applies_new_sizes_and_clamp_flags(make_controller) -> None:
    controller = make_controller()
    controller.update(GraphState(sizes=((100, 10), (3000, 60)), is_clamped_min=True))
    assert controller.p1 == Point(100, 10)
    assert controller.p2 == Point(3000, 60)
    assert controller.virtual_width >= 3000
    assert controller.virtual_height >= 60
    assert controller.p_start == Point(0, 10)
    assert controller.is_clamped_min


def test_redraws_are_coalesced(make_controller, input_source, scheduler, surface) -> None:
    controller = make_controller()
    scheduler.run_pending(FRAME_S)
    start = _screen(controller, controller.p1)
    input_source.move(start)
    input_source.down(start)
    for dx in range(1, 6):
        input_source.move(start.offset(dx, 0))
    assert len(scheduler.active(FRAME_S)) == 1
    scheduler.run_pending(FRAME_S)
    assert surface.frames == 2


def test_highlighted_point_drawn_with_info_label(make_controller, input_source, scheduler, surface) -> None:
    controller = make_controller()
    style = GraphStyle()
    input_source.move(_screen(controller, controller.p2))
    scheduler.run_pending(FRAME_S)

    colors = [call[3] for call in surface.of_kind("circle")]
    assert colors == [style.main, style.highlight]
    assert "Viewport:" in surface.texts()
    assert "Size:" in surface.texts()
    assert "21px" in surface.texts()
    assert len(surface.of_kind("rect")) == 1


def test_dragging_p2_to_the_top_edge_extends_height(make_controller, input_source, scheduler) -> None:
    controller = make_controller()
    height = controller.virtual_height
    start = _screen(controller, controller.p2)

    input_source.move(start)
    input_source.down(start)
    input_source.move(Point(start.x, 0))
    assert controller.p2.y == height
    assert controller.extend_flags.extend_y
    assert not controller.extend_flags.extend_x

    scheduler.run_pending(TICK_S)
    assert controller.virtual_height == pytest.approx(height * 1.01)
    assert controller.p2.y == pytest.approx(round(controller.virtual_height, 2), abs=0.01)
    assert controller.virtual_width == pytest.approx(600)


def test_dragging_p2_to_the_bottom_edge_reduces_height(make_controller, input_source, scheduler) -> None:
    controller = make_controller()
    height = controller.virtual_height
    start = _screen(controller, controller.p2)

    input_source.move(start)
    input_source.down(start)
    input_source.move(Point(start.x, 360))
    assert controller.p2.y == 0
    assert controller.extend_flags.reduce_y
    assert not controller.extend_flags.extend_y

    scheduler.run_pending(TICK_S)
    assert controller.virtual_height == pytest.approx(height * 0.99)


def test_height_reduction_stops_above_the_other_point(make_controller, input_source, scheduler) -> None:
    controller = make_controller()
    start = _screen(controller, controller.p2)
    input_source.move(start)
    input_source.down(start)
    input_source.move(Point(start.x, 360))

    for _ in range(500):
        if scheduler.run_pending(TICK_S) == 0:
            break
    assert not controller.is_extending
    # Minimum height is p1.y plus 10% of the height before the last tick.
    assert controller.p1.y < controller.virtual_height < controller.p1.y + 2
    assert controller.p2.y == 0


def test_equidistant_cursor_highlights_p1(make_controller, input_source) -> None:
    # Extent 560 x 28 on a 560 px wide grid: one unit per pixel horizontally.
    controller = make_controller(GraphState(sizes=((270, 14), (290, 14))))
    a = _screen(controller, controller.p1)
    b = _screen(controller, controller.p2)
    assert (a.x, b.x) == (310, 330)

    input_source.move(Point(320, a.y))
    assert controller.highlighted is HighlightedPoint.P1


def test_update_rounds_sizes_to_two_decimals(make_controller) -> None:
    controller = make_controller()
    state = GraphState(sizes=((200.123, 14), (400, 21)))
    controller.update(state)
    assert controller.p1 == Point(200.12, 14)
    assert controller.sizes() != state.sizes

    extent = (controller.virtual_width, controller.virtual_height)
    controller.update(state)
    assert controller.p1 == Point(200.12, 14)
    assert (controller.virtual_width, controller.virtual_height) == extent
