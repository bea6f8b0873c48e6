"""Static Plotly rendition of a graph frame.

``PlotlySurface`` implements :class:`clampgraph.surfaces.DrawingSurface` by
collecting Plotly layout shapes and annotations in element (pixel)
coordinates. ``to_figure()`` turns them into a ``go.Figure`` whose axes match
the surface pixels (y pointing down), which is useful for exporting a
snapshot of the graph or for rendering where no live canvas is available.
"""

from __future__ import annotations

import re
from typing import Any, Optional

import plotly.graph_objects as go

from .geometry import Point
from .graph_constants import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH
from .transform import SurfaceRect

_FONT_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)px")
_ANCHORS = {"left": "left", "start": "left", "right": "right", "end": "right", "center": "center"}


def _font_spec(font: Optional[str]) -> tuple[float, bool]:
    if not font:
        return 10.0, False
    match = _FONT_SIZE_RE.search(font)
    size = float(match.group(1)) if match else 10.0
    return size, "bold" in font.split()


class PlotlySurface:
    """Collect draw calls as Plotly shapes; see :meth:`to_figure`."""

    def __init__(self, width: int = DEFAULT_CANVAS_WIDTH, height: int = DEFAULT_CANVAS_HEIGHT) -> None:
        self.width = int(width)
        self.height = int(height)
        self.shapes: list[dict[str, Any]] = []
        self.annotations: list[dict[str, Any]] = []

    def clear(self) -> None:
        self.shapes = []
        self.annotations = []

    def draw_line(self, a: Point, b: Point, *, color: Optional[str] = None, line_width: Optional[float] = None) -> None:
        self.shapes.append(
            dict(
                type="line",
                x0=round(a.x), y0=round(a.y), x1=round(b.x), y1=round(b.y),
                line=dict(color=color or "black", width=line_width or 1),
            )
        )

    def draw_text(
        self,
        text: str,
        p: Point,
        *,
        color: Optional[str] = None,
        text_align: Optional[str] = None,
        font: Optional[str] = None,
    ) -> None:
        size, bold = _font_spec(font)
        self.annotations.append(
            dict(
                x=p.x,
                y=p.y,
                text=f"<b>{text}</b>" if bold else text,
                showarrow=False,
                xanchor=_ANCHORS.get(text_align or "left", "left"),
                # Canvas text is positioned by its baseline.
                yanchor="bottom",
                font=dict(color=color or "black", size=size),
            )
        )

    def draw_rect(self, p: Point, width: float, height: float, fill: str = "black") -> None:
        self.shapes.append(
            dict(
                type="rect",
                x0=p.x, y0=p.y, x1=p.x + width, y1=p.y + height,
                fillcolor=fill,
                line=dict(width=0),
            )
        )

    def draw_circle(self, p: Point, *, radius: float = 20, color: Optional[str] = None) -> None:
        self.shapes.append(
            dict(
                type="circle",
                x0=p.x - radius, y0=p.y - radius, x1=p.x + radius, y1=p.y + radius,
                fillcolor=color or "black",
                line=dict(width=0),
            )
        )

    def bounding_rect(self) -> SurfaceRect:
        return SurfaceRect(0, 0, self.width, self.height)

    def to_figure(self) -> go.Figure:
        """Return a ``go.Figure`` showing the collected frame at pixel scale."""
        fig = go.Figure()
        fig.update_layout(
            width=self.width,
            height=self.height,
            margin=dict(l=0, r=0, t=0, b=0),
            plot_bgcolor="white",
            showlegend=False,
            shapes=self.shapes,
            annotations=self.annotations,
        )
        fig.update_xaxes(range=[0, self.width], visible=False, fixedrange=True)
        fig.update_yaxes(range=[self.height, 0], visible=False, fixedrange=True)
        return fig


__all__ = ["PlotlySurface"]
