from __future__ import annotations

from typing import Callable, Optional

import pytest

from clampgraph.geometry import Point
from clampgraph.store import GraphState
from clampgraph.surfaces import PointerEvent
from clampgraph.transform import SurfaceRect


class RecordingSurface:
    """Drawing surface that keeps the draw calls of the last frame."""

    def __init__(self, width: float = 640, height: float = 360, left: float = 0, top: float = 0):
        self.rect = SurfaceRect(left, top, width, height)
        self.calls: list[tuple] = []
        self.frames = 0
        self.cursors: list[str] = []

    def clear(self) -> None:
        self.calls = []
        self.frames += 1

    def draw_line(self, a, b, *, color=None, line_width=None) -> None:
        self.calls.append(("line", a, b, color, line_width))

    def draw_text(self, text, p, *, color=None, text_align=None, font=None) -> None:
        self.calls.append(("text", text, p, color, text_align, font))

    def draw_rect(self, p, width, height, fill="black") -> None:
        self.calls.append(("rect", p, width, height, fill))

    def draw_circle(self, p, *, radius=20, color=None) -> None:
        self.calls.append(("circle", p, radius, color))

    def bounding_rect(self) -> SurfaceRect:
        return self.rect

    def set_cursor(self, cursor: str) -> None:
        self.cursors.append(cursor)

    def of_kind(self, kind: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == kind]

    def texts(self) -> list[str]:
        return [call[1] for call in self.of_kind("text")]


class _ManualHandle:
    def __init__(self, scheduler: "ManualScheduler", delay_s: float, callback: Callable[[], None]):
        self.scheduler = scheduler
        self.delay_s = delay_s
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose callbacks only run when the test fires them."""

    def __init__(self) -> None:
        self.pending: list[_ManualHandle] = []

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self, delay_s, callback)
        self.pending.append(handle)
        return handle

    def run_pending(self, delay_s: Optional[float] = None) -> int:
        """Fire pending callbacks once (optionally only those with ``delay_s``)."""
        due = [h for h in self.pending if delay_s is None or h.delay_s == delay_s]
        self.pending = [h for h in self.pending if h not in due]
        fired = 0
        for handle in due:
            if not handle.cancelled:
                handle.callback()
                fired += 1
        return fired

    def active(self, delay_s: Optional[float] = None) -> list[_ManualHandle]:
        return [
            h for h in self.pending
            if not h.cancelled and (delay_s is None or h.delay_s == delay_s)
        ]


class FakeInputSource:
    """Pointer source driven by the test, in client coordinates."""

    def __init__(self) -> None:
        self.callbacks: list[Callable[[PointerEvent], None]] = []

    def on_pointer(self, callback: Callable[[PointerEvent], None]) -> None:
        self.callbacks.append(callback)

    def emit(self, kind: str, x: float, y: float) -> None:
        event = PointerEvent(kind, x, y)
        for callback in self.callbacks:
            callback(event)

    def move(self, p: Point) -> None:
        self.emit("pointermove", p.x, p.y)

    def down(self, p: Point) -> None:
        self.emit("pointerdown", p.x, p.y)

    def up(self, p: Point) -> None:
        self.emit("pointerup", p.x, p.y)

    def drag(self, start: Point, *path: Point) -> None:
        self.move(start)
        self.down(start)
        for p in path:
            self.move(p)
        self.up(path[-1] if path else start)


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def input_source() -> FakeInputSource:
    return FakeInputSource()


@pytest.fixture
def default_state() -> GraphState:
    return GraphState(sizes=((200, 14), (400, 21)))


@pytest.fixture
def make_controller(surface, scheduler, input_source):
    from clampgraph.graph_controller import GraphController

    def _make(state: Optional[GraphState] = None, **kwargs):
        changes: list[dict] = []
        controller = GraphController(
            state if state is not None else GraphState(),
            surface,
            input_source=input_source,
            scheduler=scheduler,
            on_change=changes.append,
            **kwargs,
        )
        controller.changes = changes
        return controller

    return _make
