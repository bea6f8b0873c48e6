"""Draw one graph frame through a :class:`DrawingSurface`.

The renderer is a pure function of a :class:`GraphFrame`: the controller
captures everything that must be drawn in one immutable record, so a frame can
be drawn on the live canvas widget or replayed on a static Plotly surface.

Draw order (later items paint over earlier ones):

1. ruler markings, ruler labels and grid lines,
2. the polyline ``p_start -> p1 -> p2 -> p_end``,
3. the axis edges,
4. the line-snapped cursor marker,
5. the two control points,
6. the unit labels,
7. the info label next to the snapped cursor or highlighted point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .geometry import Point, format_decimal, pairwise
from .graph_constants import (
    GraphStyle,
    INFO_LABEL_HEIGHT,
    INFO_LABEL_WIDTH,
    MARGIN_LEFT,
    POINT_CIRCLE_RADIUS,
    RULER_MARKING_LENGTH,
)
from .surfaces import DrawingSurface
from .transform import CoordinateTransform

_LABEL_SPACING = 5
_TEXT_DISTANCE = 3


@dataclass(frozen=True)
class GraphFrame:
    """Everything needed to draw the graph once.

    Parameters
    ----------
    transform : CoordinateTransform
        Virtual/element mapping at capture time.
    ruler_spacing_x, ruler_spacing_y : float
        Virtual distance between ruler markings.
    polyline : tuple of four Points
        ``(p_start, p1, p2, p_end)`` in virtual units.
    highlighted : {"p1", "p2"} or None
        Which control point is drawn in the highlight color.
    line_snapped_cursor : Point or None
        Snapped cursor position in element units.
    size_unit, viewport_unit : str
        Labels for the axes and the info box.
    """

    transform: CoordinateTransform
    ruler_spacing_x: float
    ruler_spacing_y: float
    polyline: tuple[Point, Point, Point, Point]
    highlighted: Optional[str] = None
    line_snapped_cursor: Optional[Point] = None
    size_unit: str = "px"
    viewport_unit: str = "vw"

    @property
    def p1(self) -> Point:
        return self.polyline[1]

    @property
    def p2(self) -> Point:
        return self.polyline[2]


def _ruler_steps(extent: float, spacing: float):
    # Multiplying avoids the float drift of repeated additions.
    i = 0
    while i * spacing < extent:
        yield i * spacing
        i += 1


def _draw_rulers(surface: DrawingSurface, frame: GraphFrame, style: GraphStyle) -> None:
    t = frame.transform

    marking_x = t.element_to_virtual_units("y", RULER_MARKING_LENGTH)
    for v in _ruler_steps(t.virtual_width, frame.ruler_spacing_x):
        mark_start = t.virtual_to_element(Point(v, 0))
        mark_end = t.virtual_to_element(Point(v, -marking_x))
        if v:
            surface.draw_line(mark_start, mark_end)
        surface.draw_text(format_decimal(v), Point(mark_end.x, mark_end.y + 10))
        if v:
            grid_end = t.virtual_to_element(Point(v, t.virtual_height))
            surface.draw_line(mark_start, grid_end, color=style.main_soft)

    marking_y = t.element_to_virtual_units("x", RULER_MARKING_LENGTH)
    for v in _ruler_steps(t.virtual_height, frame.ruler_spacing_y):
        mark_start = t.virtual_to_element(Point(0, v))
        mark_end = t.virtual_to_element(Point(-marking_y, v))
        surface.draw_line(mark_start, mark_end)
        surface.draw_text(
            format_decimal(v), Point(mark_end.x - 4, mark_end.y), text_align="right"
        )
        if v:
            grid_end = t.virtual_to_element(Point(t.virtual_width, v))
            surface.draw_line(mark_start, grid_end, color=style.main_soft)


def _draw_info_label(surface: DrawingSurface, frame: GraphFrame, style: GraphStyle) -> None:
    t = frame.transform
    if frame.line_snapped_cursor is not None:
        origin = frame.line_snapped_cursor
    else:
        origin = t.virtual_to_element(frame.p2 if frame.highlighted == "p2" else frame.p1)

    total_width = INFO_LABEL_WIDTH + POINT_CIRCLE_RADIUS
    total_height = INFO_LABEL_HEIGHT + POINT_CIRCLE_RADIUS + _LABEL_SPACING

    # Preferred placement is above-left of the origin; flip when there is no room.
    has_left_space = origin.x - total_width > t.virtual_to_element(Point(0, 0)).x
    has_top_space = origin.y - total_height > t.virtual_to_element(Point(0, t.virtual_height)).y

    top_left = Point(
        origin.x - total_width if has_left_space else origin.x,
        origin.y - total_height if has_top_space else origin.y + _LABEL_SPACING * 2,
    )
    surface.draw_rect(top_left, INFO_LABEL_WIDTH, INFO_LABEL_HEIGHT, style.info_box)

    font_size = style.info_font_size
    text_left = top_left.x + font_size / 2
    text_right = top_left.x + INFO_LABEL_WIDTH - font_size / 2
    text_top = top_left.y + INFO_LABEL_HEIGHT / 2 - font_size / 5 - _TEXT_DISTANCE
    text_bottom = top_left.y + INFO_LABEL_HEIGHT / 2 + font_size + _TEXT_DISTANCE

    units = t.element_to_virtual(origin)
    bold = f"bold {font_size}px sans-serif"
    regular = f"{font_size}px sans-serif"

    surface.draw_text("Viewport:", Point(text_left, text_top), color=style.background, font=bold)
    surface.draw_text("Size:", Point(text_left, text_bottom), color=style.background, font=bold)
    surface.draw_text(
        f"{format_decimal(units.x, 1)}{frame.viewport_unit}",
        Point(text_right, text_top),
        color=style.background,
        font=regular,
        text_align="right",
    )
    surface.draw_text(
        f"{format_decimal(units.y, 2)}{frame.size_unit}",
        Point(text_right, text_bottom),
        color=style.background,
        font=regular,
        text_align="right",
    )


def draw_graph(surface: DrawingSurface, frame: GraphFrame, style: GraphStyle = GraphStyle()) -> None:
    """Clear ``surface`` and draw ``frame`` on it.

    Surfaces that batch commands (``flush`` method) are flushed at the end.
    """
    t = frame.transform
    surface.clear()

    _draw_rulers(surface, frame, style)

    for a, b in pairwise(t.virtual_to_element(p) for p in frame.polyline):
        surface.draw_line(a, b, color=style.main, line_width=2)

    origin = t.virtual_to_element(Point(0, 0))
    surface.draw_line(origin, t.virtual_to_element(Point(t.virtual_width, 0)), color=style.edge)
    surface.draw_line(origin, t.virtual_to_element(Point(0, t.virtual_height)), color=style.edge)

    if frame.line_snapped_cursor is not None:
        surface.draw_circle(
            frame.line_snapped_cursor, radius=POINT_CIRCLE_RADIUS, color=style.main_mid
        )

    for name, p in (("p1", frame.p1), ("p2", frame.p2)):
        color = style.highlight if frame.highlighted == name else style.main
        surface.draw_circle(t.virtual_to_element(p), radius=POINT_CIRCLE_RADIUS, color=color)

    axis_end = t.virtual_to_element(Point(t.virtual_width, 0))
    surface.draw_text(
        f"({frame.viewport_unit})",
        Point(axis_end.x + 10, axis_end.y),
        text_align="left",
        font=style.label_font,
    )
    surface.draw_text(
        f"({frame.size_unit})",
        Point(MARGIN_LEFT, 14),
        text_align="right",
        font=style.label_font,
    )

    if frame.line_snapped_cursor is not None or frame.highlighted is not None:
        _draw_info_label(surface, frame, style)

    flush = getattr(surface, "flush", None)
    if flush is not None:
        flush()


__all__ = ["GraphFrame", "draw_graph"]
