"""
canvas_widget.py: notebook canvas for the interactive graph via anywidget

Overview
--------
`GraphCanvasWidget` is an `anywidget.AnyWidget` that plays both host roles the
graph engine needs:

- **DrawingSurface**: Python-side draw calls are buffered as a display list
  and shipped to the frontend in one custom message on `flush()`; the
  frontend replays them on an HTML `<canvas>`.
- **InputSource**: the frontend listens to window-level pointer events (so a
  drag keeps working when the pointer leaves the canvas) and forwards them as
  custom messages; Python callbacks registered with `on_pointer()` receive
  `PointerEvent` objects in client coordinates.

The frontend also keeps the canvas' on-screen position in the `origin_x` /
`origin_y` traits, so `bounding_rect()` matches the coordinates pointer
events are reported in.

Message protocol
----------------
Python -> frontend::

    {"type": "draw", "commands": [{"op": "clear"}, {"op": "line", ...}, ...]}

Frontend -> Python::

    {"type": "pointer", "event": {"type": "pointermove", "clientX": 10, "clientY": 20}}

Pointer moves are coalesced to one message per animation frame.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import anywidget
import traitlets

from .geometry import Point
from .graph_constants import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH
from .surfaces import POINTER_KINDS, PointerEvent
from .transform import SurfaceRect

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = ["GraphCanvasWidget"]


class GraphCanvasWidget(anywidget.AnyWidget):
    """
    Canvas-backed drawing surface and pointer source for notebooks.

    Traitlets (synced to frontend)
    ------------------------------
    width, height:
        Canvas size in CSS pixels.
    origin_x, origin_y:
        Canvas top-left corner in client coordinates. Written by the frontend.
    cursor:
        CSS cursor shown over the canvas ("default", "grab", "grabbing").
    debug_js:
        If True, enables console logging from the frontend.

    Notes
    -----
    Draw commands issued between `clear()` and `flush()` form one frame; the
    last flushed frame is kept in `last_frame` for inspection.
    """

    width = traitlets.Int(DEFAULT_CANVAS_WIDTH).tag(sync=True)
    height = traitlets.Int(DEFAULT_CANVAS_HEIGHT).tag(sync=True)
    origin_x = traitlets.Float(0.0).tag(sync=True)
    origin_y = traitlets.Float(0.0).tag(sync=True)
    cursor = traitlets.Unicode("default").tag(sync=True)
    debug_js = traitlets.Bool(False).tag(sync=True)

    _esm = r"""
    function safeLog(enabled, ...args) {
      if (enabled) console.log("[GraphCanvasWidget]", ...args);
    }

    function replay(ctx, canvas, commands) {
      for (const c of commands) {
        ctx.save();
        switch (c.op) {
          case "clear":
            ctx.clearRect(0, 0, canvas.width, canvas.height);
            break;
          case "line":
            if (c.color) ctx.strokeStyle = c.color;
            if (c.line_width) ctx.lineWidth = c.line_width;
            ctx.beginPath();
            ctx.moveTo(Math.round(c.a[0]), Math.round(c.a[1]));
            ctx.lineTo(Math.round(c.b[0]), Math.round(c.b[1]));
            ctx.closePath();
            ctx.stroke();
            break;
          case "text":
            if (c.color) ctx.fillStyle = c.color;
            if (c.text_align) ctx.textAlign = c.text_align;
            if (c.font) ctx.font = c.font;
            ctx.fillText(c.text, c.p[0], c.p[1]);
            break;
          case "rect":
            ctx.fillStyle = c.fill;
            ctx.beginPath();
            ctx.rect(c.p[0], c.p[1], c.width, c.height);
            ctx.fill();
            break;
          case "circle":
            if (c.color) ctx.fillStyle = c.color;
            ctx.beginPath();
            ctx.arc(c.p[0], c.p[1], c.radius, 0, 2 * Math.PI);
            ctx.closePath();
            ctx.fill();
            break;
        }
        ctx.restore();
      }
    }

    export default {
      render({ model, el }) {
        const debug = !!model.get("debug_js");
        const canvas = document.createElement("canvas");
        canvas.style.display = "block";
        el.appendChild(canvas);
        const ctx = canvas.getContext("2d");

        function applySize() {
          canvas.width = model.get("width");
          canvas.height = model.get("height");
          canvas.style.width = model.get("width") + "px";
          canvas.style.height = model.get("height") + "px";
        }

        function syncOrigin() {
          const r = canvas.getBoundingClientRect();
          if (r.left !== model.get("origin_x") || r.top !== model.get("origin_y")) {
            model.set("origin_x", r.left);
            model.set("origin_y", r.top);
            model.save_changes();
          }
        }

        let pendingMove = null;
        let frame = null;

        function send(e) {
          model.send({ type: "pointer", event: { type: e.type, clientX: e.clientX, clientY: e.clientY } });
        }

        function flushMove() {
          frame = null;
          if (pendingMove) {
            syncOrigin();
            send(pendingMove);
            pendingMove = null;
          }
        }

        const onMove = (e) => {
          pendingMove = e;
          if (frame === null) frame = requestAnimationFrame(flushMove);
        };
        const onButton = (e) => {
          if (pendingMove) flushMove();
          syncOrigin();
          send(e);
        };

        const onMsg = (msg) => {
          if (msg && msg.type === "draw") {
            safeLog(debug, "draw", msg.commands.length);
            replay(ctx, canvas, msg.commands);
          }
        };
        const onSize = () => { applySize(); syncOrigin(); };
        const onCursor = () => { canvas.style.cursor = model.get("cursor"); };

        applySize();
        onCursor();
        requestAnimationFrame(syncOrigin);

        window.addEventListener("pointermove", onMove);
        window.addEventListener("pointerdown", onButton);
        window.addEventListener("pointerup", onButton);
        window.addEventListener("resize", syncOrigin);
        window.addEventListener("scroll", syncOrigin, true);
        model.on("msg:custom", onMsg);
        model.on("change:width", onSize);
        model.on("change:height", onSize);
        model.on("change:cursor", onCursor);

        return () => {
          try { if (frame !== null) cancelAnimationFrame(frame); } catch (e) {}
          window.removeEventListener("pointermove", onMove);
          window.removeEventListener("pointerdown", onButton);
          window.removeEventListener("pointerup", onButton);
          window.removeEventListener("resize", syncOrigin);
          window.removeEventListener("scroll", syncOrigin, true);
          try { model.off("msg:custom", onMsg); } catch (e) {}
          try { model.off("change:width", onSize); } catch (e) {}
          try { model.off("change:height", onSize); } catch (e) {}
          try { model.off("change:cursor", onCursor); } catch (e) {}
        };
      }
    };
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._commands: list[dict[str, Any]] = []
        self._pointer_callbacks: list[Callable[[PointerEvent], None]] = []
        self.last_frame: list[dict[str, Any]] = []
        self.on_msg(self._handle_custom_msg)

    # --- DrawingSurface -------------------------------------------------

    def clear(self) -> None:
        self._commands = [{"op": "clear"}]

    def draw_line(
        self,
        a: Point,
        b: Point,
        *,
        color: Optional[str] = None,
        line_width: Optional[float] = None,
    ) -> None:
        self._commands.append(
            {"op": "line", "a": a.as_tuple(), "b": b.as_tuple(), "color": color, "line_width": line_width}
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
        self._commands.append(
            {"op": "text", "text": text, "p": p.as_tuple(), "color": color, "text_align": text_align, "font": font}
        )

    def draw_rect(self, p: Point, width: float, height: float, fill: str = "black") -> None:
        self._commands.append(
            {"op": "rect", "p": p.as_tuple(), "width": width, "height": height, "fill": fill}
        )

    def draw_circle(self, p: Point, *, radius: float = 20, color: Optional[str] = None) -> None:
        self._commands.append({"op": "circle", "p": p.as_tuple(), "radius": radius, "color": color})

    def bounding_rect(self) -> SurfaceRect:
        return SurfaceRect(self.origin_x, self.origin_y, self.width, self.height)

    def flush(self) -> None:
        """Send the buffered frame to the frontend."""
        self.last_frame = self._commands
        self._commands = []
        self.send({"type": "draw", "commands": self.last_frame})

    def set_cursor(self, cursor: str) -> None:
        if self.cursor != cursor:
            self.cursor = cursor

    # --- InputSource ----------------------------------------------------

    def on_pointer(self, callback: Callable[[PointerEvent], None]) -> None:
        self._pointer_callbacks.append(callback)

    def _handle_custom_msg(self, _widget: Any, content: Any, _buffers: Any = None) -> None:
        if not isinstance(content, dict) or content.get("type") != "pointer":
            return
        payload = content.get("event") or {}
        if payload.get("type") not in POINTER_KINDS:
            logger.debug("Ignoring pointer message %r", payload)
            return
        self.dispatch_pointer(PointerEvent.from_message(payload))

    def dispatch_pointer(self, event: PointerEvent) -> None:
        """Deliver ``event`` to every registered pointer callback."""
        for callback in list(self._pointer_callbacks):
            try:
                callback(event)
            except Exception:
                logger.exception("Pointer callback failed for %s", event.kind)
