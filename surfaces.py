"""Interfaces between the graph engine and its host environment.

The engine never touches a concrete display or event system. It draws through
a :class:`DrawingSurface` and receives pointer input through an
:class:`InputSource`; ``GraphCanvasWidget`` implements both for notebooks,
``PlotlySurface`` implements drawing for static snapshots, and tests inject
recording fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional, Protocol, runtime_checkable

from .geometry import Point
from .transform import SurfaceRect

PointerKind = Literal["pointermove", "pointerdown", "pointerup"]
POINTER_KINDS: tuple[str, ...] = ("pointermove", "pointerdown", "pointerup")


@dataclass(frozen=True)
class PointerEvent:
    """Normalized pointer event.

    Parameters
    ----------
    kind : {"pointermove", "pointerdown", "pointerup"}
        Event type.
    client_x, client_y : float
        Pointer position in screen (client) coordinates, not relative to the
        drawing surface.
    raw : Any, optional
        Original payload, for debugging only.
    """

    kind: PointerKind
    client_x: float
    client_y: float
    raw: Any = None

    def __post_init__(self) -> None:
        if self.kind not in POINTER_KINDS:
            raise ValueError(f"Unknown pointer event kind: {self.kind!r}")

    @property
    def client_point(self) -> Point:
        return Point(self.client_x, self.client_y)

    @classmethod
    def from_message(cls, msg: dict[str, Any]) -> "PointerEvent":
        """Build an event from a frontend message ``{"type", "clientX", "clientY"}``."""
        return cls(
            kind=msg["type"],
            client_x=float(msg.get("clientX", 0.0)),
            client_y=float(msg.get("clientY", 0.0)),
            raw=msg,
        )


@runtime_checkable
class DrawingSurface(Protocol):
    def clear(self) -> None: ...

    def draw_line(
        self,
        a: Point,
        b: Point,
        *,
        color: Optional[str] = None,
        line_width: Optional[float] = None,
    ) -> None: ...

    def draw_text(
        self,
        text: str,
        p: Point,
        *,
        color: Optional[str] = None,
        text_align: Optional[str] = None,
        font: Optional[str] = None,
    ) -> None: ...

    def draw_rect(self, p: Point, width: float, height: float, fill: str = "black") -> None: ...

    def draw_circle(
        self, p: Point, *, radius: float = 20, color: Optional[str] = None
    ) -> None: ...

    def bounding_rect(self) -> SurfaceRect: ...


@runtime_checkable
class InputSource(Protocol):
    def on_pointer(self, callback: Callable[[PointerEvent], None]) -> None: ...


__all__ = ["DrawingSurface", "InputSource", "POINTER_KINDS", "PointerEvent", "PointerKind"]
