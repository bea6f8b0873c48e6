"""Interactive controller for the two-point graph.

Purpose
-------
``GraphController`` owns all transient interaction state of the graph: the
mirrored control points, the derived boundary points, the visible extent, the
highlighted/dragged point, the line-snapped cursor and the auto-extension loop.
It reacts to pointer events, keeps the geometry consistent, requests redraws
and reports finished drags.

Concepts and structure
----------------------
Point interaction is a small state machine::

    idle -> highlighted -> dragging -> idle

Independently, while dragging, the extension loop may run: when the dragged
point is within 5% of an edge the visible extent grows (or shrinks near the
origin) by 1% per tick, and the point is re-derived from the last cursor pixel
position, so the point keeps moving under a stationary cursor.

Architecture notes
------------------
- Every pointer handler and every loop tick runs under one re-entrant lock and
  completes its whole sequence (move, limits, extension flags, redraw
  request) before the next one starts.
- The extension loop is a resumable tick function over
  :class:`ExtensionLoopState`; :class:`clampgraph.scheduling.IntervalLoop`
  drives it and stops it when the state reports ``stopped``.
- Contract violations (extending without a highlighted point, starting a
  running loop, stopping a stopped loop) are logged and ignored.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from .geometry import Point, clamp
from .graph_constants import (
    EXTEND_TICK_MS,
    EXTENSION_MARGIN_MULTIPLIER,
    FRAME_MS,
    GraphStyle,
    MAX_VIRTUAL_HEIGHT,
    MAX_VIRTUAL_WIDTH,
    MIN_VIRTUAL_HEIGHT,
    MIN_VIRTUAL_WIDTH,
    POINT_MARGIN,
    SNAP_DISTANCE_LINE,
    SNAP_DISTANCE_POINT,
    VIEWPORT_MODIFY_INCREMENT,
)
from .graph_renderer import GraphFrame, draw_graph
from .graph_view import GraphViewport, fit_dimensions_to_points, ruler_spacing_for
from .limits import compute_limits
from .scheduling import FrameRequester, IntervalLoop, TickScheduler
from .snapping import compute_line_snap, nearest_point_within
from .store import GraphState, Sizes
from .surfaces import DrawingSurface, InputSource, PointerEvent
from .transform import Axis, CoordinateTransform

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class HighlightedPoint(enum.Enum):
    """Which control point is highlighted (and possibly dragged)."""

    P1 = "p1"
    P2 = "p2"

    @property
    def other(self) -> "HighlightedPoint":
        return HighlightedPoint.P2 if self is HighlightedPoint.P1 else HighlightedPoint.P1


@dataclass(frozen=True)
class ExtendFlags:
    """Per-axis grow/shrink requests derived from the dragged point's position."""

    extend_x: bool = False
    extend_y: bool = False
    reduce_x: bool = False
    reduce_y: bool = False

    @property
    def any(self) -> bool:
        return self.extend_x or self.extend_y or self.reduce_x or self.reduce_y

    @property
    def direction(self) -> tuple[int, int]:
        dx = 1 if self.extend_x else -1 if self.reduce_x else 0
        dy = 1 if self.extend_y else -1 if self.reduce_y else 0
        return dx, dy


@dataclass(frozen=True)
class ExtensionLoopState:
    """Input and output of one extension tick.

    ``direction_x``/``direction_y`` are ``1`` (grow), ``-1`` (shrink) or ``0``.
    An axis direction drops to ``0`` once its extent hits a limit; ``stopped``
    is set when both have, or when the loop was cancelled.
    """

    point: HighlightedPoint
    direction_x: int
    direction_y: int
    stopped: bool = False


class GraphController:
    """Drag, snap and auto-extend logic behind the interactive graph.

    Parameters
    ----------
    state : GraphState
        Initial store state; provides the control points, clamp flags and units.
    surface : DrawingSurface
        Where frames are drawn; also provides the on-screen bounding box.
    input_source : InputSource, optional
        Pointer event source. Events can also be fed to :meth:`handle_pointer`.
    scheduler : TickScheduler, optional
        Timer backend shared by the extension loop and the redraw coalescing.
    on_change : callable, optional
        Receives ``{"sizes": ((x1, y1), (x2, y2))}`` once per completed drag.
    style : GraphStyle, optional
        Colors and fonts for drawing.
    """

    def __init__(
        self,
        state: GraphState,
        surface: DrawingSurface,
        *,
        input_source: Optional[InputSource] = None,
        scheduler: Optional[TickScheduler] = None,
        on_change: Optional[Callable[[dict[str, Any]], None]] = None,
        style: GraphStyle = GraphStyle(),
    ) -> None:
        self._lock = threading.RLock()
        self._surface = surface
        self._style = style
        self.on_change = on_change

        (x1, y1), (x2, y2) = state.sizes
        self._p1 = Point(x1, y1)
        self._p2 = Point(x2, y2)
        self._is_clamped_min = state.is_clamped_min
        self._is_clamped_max = state.is_clamped_max
        self._size_unit = state.size_unit
        self._viewport_unit = state.viewport_unit

        self._viewport = GraphViewport()
        self._fit_dimensions(force=True)

        self._p_start, self._p_end = Point(0, 0), Point(0, 0)
        self.update_limit_points()
        self.update_ruler_spacing("x")
        self.update_ruler_spacing("y")

        self._cursor = Point(-1, -1)
        self._line_snapped_cursor: Optional[Point] = None
        self._highlighted: Optional[HighlightedPoint] = None
        self._is_point_selected = False

        self._flags = ExtendFlags()
        self._extension: Optional[ExtensionLoopState] = None
        self._extension_loop = IntervalLoop(
            self._on_extension_tick,
            execute_every_ms=EXTEND_TICK_MS,
            scheduler=scheduler,
            name="Extension loop",
        )
        self._frames = FrameRequester(self.draw, frame_ms=FRAME_MS, scheduler=scheduler)
        self._draw_log_t = 0.0

        if input_source is not None:
            input_source.on_pointer(self.handle_pointer)

        self.refresh()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def p1(self) -> Point:
        return self._p1

    @property
    def p2(self) -> Point:
        return self._p2

    @property
    def p_start(self) -> Point:
        return self._p_start

    @property
    def p_end(self) -> Point:
        return self._p_end

    @property
    def virtual_width(self) -> float:
        return self._viewport.virtual_width

    @property
    def virtual_height(self) -> float:
        return self._viewport.virtual_height

    @property
    def viewport(self) -> GraphViewport:
        return self._viewport

    @property
    def highlighted(self) -> Optional[HighlightedPoint]:
        return self._highlighted

    @property
    def is_point_selected(self) -> bool:
        return self._is_point_selected

    @property
    def line_snapped_cursor(self) -> Optional[Point]:
        return self._line_snapped_cursor

    @property
    def extend_flags(self) -> ExtendFlags:
        return self._flags

    @property
    def is_extending(self) -> bool:
        return self._extension_loop.is_running

    @property
    def is_clamped_min(self) -> bool:
        return self._is_clamped_min

    @property
    def is_clamped_max(self) -> bool:
        return self._is_clamped_max

    @property
    def transform(self) -> CoordinateTransform:
        """Mapping for the current extent and the surface's current bounding box."""
        return CoordinateTransform(
            self._viewport.virtual_width,
            self._viewport.virtual_height,
            self._surface.bounding_rect(),
        )

    def point(self, which: HighlightedPoint) -> Point:
        return self._p1 if which is HighlightedPoint.P1 else self._p2

    def polyline(self) -> tuple[Point, Point, Point, Point]:
        return (self._p_start, self._p1, self._p2, self._p_end)

    def sizes(self) -> Sizes:
        return ((self._p1.x, self._p1.y), (self._p2.x, self._p2.y))

    # ------------------------------------------------------------------
    # Geometry maintenance
    # ------------------------------------------------------------------

    def _set_point(self, which: HighlightedPoint, p: Point) -> None:
        if which is HighlightedPoint.P1:
            self._p1 = p
        else:
            self._p2 = p

    def move_point(self, which: HighlightedPoint, coords: Point, is_clamped: bool = True) -> None:
        """Move a control point, rounding to 2 decimals.

        When ``is_clamped`` the point stays inside the visible extent and at
        least ``POINT_MARGIN`` away (horizontally) from the other point.
        """
        x = round(coords.x, 2)
        y = round(coords.y, 2)
        if is_clamped:
            if which is HighlightedPoint.P1:
                x = clamp(x, 0.0, self._p2.x - POINT_MARGIN)
            else:
                x = clamp(x, self._p1.x + POINT_MARGIN, self._viewport.virtual_width)
            y = clamp(y, 0.0, self._viewport.virtual_height)
        self._set_point(which, Point(x, y))

    def update_limit_points(self) -> None:
        """Recompute ``p_start``/``p_end``; required after any geometry change."""
        self._p_start, self._p_end = compute_limits(
            self._p1,
            self._p2,
            self._viewport.virtual_width,
            self._viewport.virtual_height,
            self._is_clamped_min,
            self._is_clamped_max,
        )

    def update_ruler_spacing(self, axis: Axis) -> None:
        self._viewport.set_ruler_spacing(axis, ruler_spacing_for(self.transform, axis))

    def _fit_dimensions(self, force: bool = False) -> bool:
        fitted = fit_dimensions_to_points(
            self._p1,
            self._p2,
            self._viewport.virtual_width,
            self._viewport.virtual_height,
            force=force,
        )
        if fitted is None:
            return False
        self._viewport.virtual_width, self._viewport.virtual_height = fitted
        logger.debug("virtual dimensions fitted to %.2f x %.2f", *fitted)
        return True

    def set_virtual_dimensions_from_points(self) -> bool:
        """Re-fit the extent to the control points if they left or under-fill it."""
        with self._lock:
            return self._fit_dimensions()

    # ------------------------------------------------------------------
    # Snapping / highlighting
    # ------------------------------------------------------------------

    def update_line_snapped_cursor(self, transform: Optional[CoordinateTransform] = None) -> None:
        transform = transform if transform is not None else self.transform
        self._line_snapped_cursor = compute_line_snap(
            self._cursor, self.polyline(), transform, SNAP_DISTANCE_LINE
        )

    def _update_highlight(self, transform: CoordinateTransform) -> bool:
        index = nearest_point_within(
            self._cursor,
            (transform.virtual_to_element(self._p1), transform.virtual_to_element(self._p2)),
            SNAP_DISTANCE_POINT,
        )
        highlighted = None if index is None else (HighlightedPoint.P1, HighlightedPoint.P2)[index]
        changed = highlighted is not self._highlighted
        self._highlighted = highlighted
        return changed

    # ------------------------------------------------------------------
    # Auto-extension
    # ------------------------------------------------------------------

    def check_extend_virtual_dimensions(self) -> None:
        """Refresh the extend/reduce flags from the highlighted point's position."""
        if self._highlighted is None:
            logger.error("No highlighted point. Unable to extend")
            return

        point = self.point(self._highlighted)
        other = self.point(self._highlighted.other)
        width = self._viewport.virtual_width
        height = self._viewport.virtual_height
        margin = EXTENSION_MARGIN_MULTIPLIER

        extend_x = point.x > width - width * margin
        reduce_x = not extend_x and point.x < width * margin and other.x < width
        extend_y = point.y > height - height * margin
        reduce_y = not extend_y and point.y < height * margin and other.y < height
        self._flags = ExtendFlags(extend_x, extend_y, reduce_x, reduce_y)

    def start_extension_loop(self) -> None:
        with self._lock:
            if self._extension_loop.is_running:
                logger.error("Extension loop already started")
                return
            if self._highlighted is None:
                logger.error("A point needs to be highlighted to extend virtual dimensions")
                return
            dx, dy = self._flags.direction
            self._extension = ExtensionLoopState(self._highlighted, dx, dy)
            self._extension_loop.start()

    def stop_extension_loop(self) -> None:
        with self._lock:
            if not self._extension_loop.is_running:
                logger.warning("Extension loop is not running")
                return
            if self._extension is not None:
                self._extension = replace(self._extension, stopped=True)
            self._extension_loop.stop()

    def extension_tick(self, state: ExtensionLoopState) -> ExtensionLoopState:
        """Advance the extension loop by one tick and return its next state."""
        if state.stopped:
            return state

        with self._lock:
            dx, dy = state.direction_x, state.direction_y
            viewport = self._viewport

            if dx != 0:
                min_limit = MIN_VIRTUAL_WIDTH
                if state.point is HighlightedPoint.P1:
                    min_limit = max(
                        self._p2.x + viewport.virtual_width * EXTENSION_MARGIN_MULTIPLIER * 2,
                        MIN_VIRTUAL_WIDTH,
                    )
                requested = viewport.virtual_width * (1 + VIEWPORT_MODIFY_INCREMENT * dx)
                viewport.virtual_width = clamp(requested, min_limit, MAX_VIRTUAL_WIDTH)
                self.update_ruler_spacing("x")
                if viewport.virtual_width != requested:
                    dx = 0

            if dy != 0:
                other = self.point(state.point.other)
                min_limit = max(
                    other.y + viewport.virtual_height * EXTENSION_MARGIN_MULTIPLIER * 2,
                    MIN_VIRTUAL_HEIGHT,
                )
                requested = viewport.virtual_height * (1 + VIEWPORT_MODIFY_INCREMENT * dy)
                viewport.virtual_height = clamp(requested, min_limit, MAX_VIRTUAL_HEIGHT)
                self.update_ruler_spacing("y")
                if viewport.virtual_height != requested:
                    dy = 0

            # The transform ratio changed: the same pixel is a new virtual position.
            self.move_point(state.point, self.transform.element_to_virtual(self._cursor))
            self.update_limit_points()
            self.refresh()

            return replace(state, direction_x=dx, direction_y=dy, stopped=(dx == 0 and dy == 0))

    def _on_extension_tick(self) -> bool:
        with self._lock:
            state = self._extension
            if state is None or state.stopped:
                return False
            self._extension = self.extension_tick(state)
            if self._extension.stopped:
                logger.debug("Extension loop reached its limits")
                return False
            return True

    def _update_extension_loop(self) -> None:
        previous = self._flags
        self.check_extend_virtual_dimensions()
        is_extension = self._flags.any
        is_change = self._flags != previous
        running = self._extension_loop.is_running

        if is_extension and not running:
            self.start_extension_loop()
        elif running and not is_extension:
            self.stop_extension_loop()
        elif running and is_change:
            self.stop_extension_loop()
            self.start_extension_loop()

    # ------------------------------------------------------------------
    # Pointer handling
    # ------------------------------------------------------------------

    def handle_pointer(self, event: PointerEvent) -> None:
        if event.kind == "pointermove":
            self.handle_pointer_move(event)
        elif event.kind == "pointerdown":
            self.handle_pointer_down(event)
        elif event.kind == "pointerup":
            self.handle_pointer_up(event)

    def handle_pointer_move(self, event: PointerEvent) -> None:
        with self._lock:
            transform = self.transform
            self._cursor = transform.viewport_to_element(event.client_point)
            do_refresh = False

            if self._is_point_selected:
                if self._highlighted is None:
                    logger.error("Point appears as selected but highlighted point is missing")
                    self._is_point_selected = False
                    return
                self.move_point(self._highlighted, transform.element_to_virtual(self._cursor))
                self.update_limit_points()
                self._update_extension_loop()
                do_refresh = True
            elif self._update_highlight(transform):
                do_refresh = True

            if self._highlighted is None:
                previous_snap = self._line_snapped_cursor
                self.update_line_snapped_cursor(transform)
                if previous_snap is not None or self._line_snapped_cursor is not None:
                    do_refresh = True
            elif self._line_snapped_cursor is not None:
                self._line_snapped_cursor = None
                do_refresh = True

            self._update_cursor_style()
            if do_refresh:
                self.refresh()

    def handle_pointer_down(self, event: Optional[PointerEvent] = None) -> None:
        with self._lock:
            if self._highlighted is not None:
                self._is_point_selected = True
                self._update_cursor_style()

    def handle_pointer_up(self, event: Optional[PointerEvent] = None) -> None:
        with self._lock:
            if not self._is_point_selected:
                return
            self._is_point_selected = False
            if self._extension_loop.is_running:
                self.stop_extension_loop()
            self._flags = ExtendFlags()
            self._update_cursor_style()
            self.refresh()
            sizes = self.sizes()

        logger.info("drag finished: p1=%s p2=%s", sizes[0], sizes[1])
        if self.on_change is not None:
            self.on_change({"sizes": sizes})

    def _update_cursor_style(self) -> None:
        set_cursor = getattr(self._surface, "set_cursor", None)
        if set_cursor is None:
            return
        if self._highlighted is None:
            set_cursor("default")
        elif self._is_point_selected:
            set_cursor("grabbing")
        else:
            set_cursor("grab")

    # ------------------------------------------------------------------
    # External state
    # ------------------------------------------------------------------

    def update(self, state: GraphState) -> None:
        """Mirror a store state into the graph.

        Sizes are taken as given (no drag clamping); the extent is re-fitted
        only when the new points fall outside it or under-fill it. Points are
        still rounded to 2 decimals, so a store value such as 200.123 stays
        different from ``sizes()`` and later updates re-run the fit check.
        """
        with self._lock:
            geometry_changed = False
            if state.is_clamped_min != self._is_clamped_min:
                self._is_clamped_min = state.is_clamped_min
                geometry_changed = True
            if state.is_clamped_max != self._is_clamped_max:
                self._is_clamped_max = state.is_clamped_max
                geometry_changed = True

            if state.sizes != self.sizes():
                (x1, y1), (x2, y2) = state.sizes
                self.move_point(HighlightedPoint.P1, Point(x1, y1), is_clamped=False)
                self.move_point(HighlightedPoint.P2, Point(x2, y2), is_clamped=False)
                self._fit_dimensions()
                self.update_ruler_spacing("x")
                self.update_ruler_spacing("y")
                geometry_changed = True

            if geometry_changed:
                self.update_limit_points()

            self._size_unit = state.size_unit
            self._viewport_unit = state.viewport_unit
            self.refresh()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def frame(self) -> GraphFrame:
        """Immutable description of what the next draw shows."""
        with self._lock:
            return GraphFrame(
                transform=self.transform,
                ruler_spacing_x=self._viewport.ruler_spacing_x,
                ruler_spacing_y=self._viewport.ruler_spacing_y,
                polyline=self.polyline(),
                highlighted=None if self._highlighted is None else self._highlighted.value,
                line_snapped_cursor=self._line_snapped_cursor,
                size_unit=self._size_unit,
                viewport_unit=self._viewport_unit,
            )

    def draw(self, surface: Optional[DrawingSurface] = None) -> None:
        """Draw the current frame on ``surface`` (default: the controller's)."""
        target = surface if surface is not None else self._surface
        frame = self.frame()
        draw_graph(target, frame, self._style)

        now = time.monotonic()
        if logger.isEnabledFor(logging.DEBUG) and (now - self._draw_log_t) > 0.5:
            self._draw_log_t = now
            logger.debug(
                "draw extent=%.2fx%.2f p1=%s p2=%s",
                frame.transform.virtual_width,
                frame.transform.virtual_height,
                self._p1.as_tuple(),
                self._p2.as_tuple(),
            )

    def refresh(self) -> None:
        """Request a redraw on the next frame; repeated requests coalesce."""
        self._frames.request()


__all__ = [
    "ExtendFlags",
    "ExtensionLoopState",
    "GraphController",
    "HighlightedPoint",
]
