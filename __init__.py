"""Top-level public API for the ``clampgraph`` package.

This module re-exports the notebook-facing entry point and the building
blocks of the interactive graph, for example:

>>> from clampgraph import CalcGenerator  # doctest: +SKIP
>>> CalcGenerator(storage_path="sizes.json")  # doctest: +SKIP

The graph engine (geometry, transform, limits, snapping, controller) has no
widget dependency and can be driven by any drawing surface and pointer source.
"""

from .app import CalcGenerator
from .calc import Calc
from .canvas_widget import GraphCanvasWidget
from .css_output import CssOutput
from .form_input import FormInput
from .geometry import LinearFunction, Point
from .graph_constants import GraphStyle
from .graph_controller import (
    ExtendFlags,
    ExtensionLoopState,
    GraphController,
    HighlightedPoint,
)
from .graph_renderer import GraphFrame, draw_graph
from .InputConvert import InputConvert
from .limits import compute_limits
from .local_storage import retrieve_local_data, save_local_data
from .plotly_surface import PlotlySurface
from .snapping import compute_line_snap
from .store import GraphState, StateStore
from .surfaces import DrawingSurface, InputSource, PointerEvent
from .transform import CoordinateTransform, SurfaceRect

__all__ = [
    "Calc",
    "CalcGenerator",
    "CoordinateTransform",
    "CssOutput",
    "DrawingSurface",
    "ExtendFlags",
    "ExtensionLoopState",
    "FormInput",
    "GraphCanvasWidget",
    "GraphController",
    "GraphFrame",
    "GraphState",
    "GraphStyle",
    "HighlightedPoint",
    "InputConvert",
    "InputSource",
    "LinearFunction",
    "PlotlySurface",
    "Point",
    "PointerEvent",
    "StateStore",
    "SurfaceRect",
    "compute_limits",
    "compute_line_snap",
    "draw_graph",
    "retrieve_local_data",
    "save_local_data",
]
