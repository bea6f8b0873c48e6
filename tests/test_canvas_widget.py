from __future__ import annotations

import logging

from clampgraph.canvas_widget import GraphCanvasWidget
from clampgraph.geometry import Point
from clampgraph.graph_controller import GraphController, HighlightedPoint
from clampgraph.store import GraphState
from clampgraph.surfaces import DrawingSurface, InputSource, PointerEvent
from clampgraph.transform import SurfaceRect


def _canvas() -> tuple[GraphCanvasWidget, list]:
    canvas = GraphCanvasWidget(width=500, height=300)
    sent: list = []
    canvas.send = lambda content, buffers=None: sent.append(content)
    return canvas, sent


def test_canvas_implements_surface_and_input_protocols() -> None:
    canvas, _sent = _canvas()
    assert isinstance(canvas, DrawingSurface)
    assert isinstance(canvas, InputSource)


def test_bounding_rect_follows_synced_origin() -> None:
    canvas, _sent = _canvas()
    canvas.origin_x = 12.5
    canvas.origin_y = 80
    assert canvas.bounding_rect() == SurfaceRect(12.5, 80, 500, 300)


def test_flush_sends_the_buffered_frame() -> None:
    canvas, sent = _canvas()
    canvas.clear()
    canvas.draw_line(Point(0, 0), Point(10, 10), color="red", line_width=2)
    canvas.draw_circle(Point(5, 5), radius=3, color="blue")
    canvas.flush()

    assert sent[-1]["type"] == "draw"
    ops = [c["op"] for c in sent[-1]["commands"]]
    assert ops == ["clear", "line", "circle"]
    assert canvas.last_frame == sent[-1]["commands"]


def test_pointer_messages_reach_callbacks() -> None:
    canvas, _sent = _canvas()
    events: list[PointerEvent] = []
    canvas.on_pointer(events.append)

    canvas._handle_custom_msg(canvas, {"type": "pointer", "event": {"type": "pointerdown", "clientX": 3, "clientY": 4}}, [])
    canvas._handle_custom_msg(canvas, {"type": "pointer", "event": {"type": "wheel"}}, [])
    canvas._handle_custom_msg(canvas, {"type": "other"}, [])

    assert len(events) == 1
    assert events[0].kind == "pointerdown"
    assert events[0].client_point == Point(3, 4)


def test_failing_pointer_callback_is_logged(caplog) -> None:
    canvas, _sent = _canvas()
    seen = []

    def _broken(_event):
        raise RuntimeError("boom")

    canvas.on_pointer(_broken)
    canvas.on_pointer(seen.append)
    with caplog.at_level(logging.ERROR, logger="clampgraph.canvas_widget"):
        canvas.dispatch_pointer(PointerEvent("pointermove", 1, 1))
    assert len(seen) == 1
    assert "Pointer callback failed" in caplog.text


def test_controller_drives_canvas(scheduler) -> None:
    canvas, sent = _canvas()
    canvas.origin_x, canvas.origin_y = 100, 50
    controller = GraphController(GraphState(), canvas, input_source=canvas, scheduler=scheduler)

    scheduler.run_pending()
    assert sent[-1]["type"] == "draw"

    # Client coordinates are offset by the canvas origin.
    p1 = controller.transform.virtual_to_element(controller.p1)
    canvas.dispatch_pointer(PointerEvent("pointermove", p1.x + 100, p1.y + 50))
    assert controller.highlighted is HighlightedPoint.P1
    assert canvas.cursor == "grab"
