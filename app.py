"""Notebook entry point wiring the store, graph, form and CSS output.

Purpose
-------
``CalcGenerator`` is the object users create in a notebook cell. It owns the
:class:`StateStore` and connects every view to it:

- the graph canvas (drag the two points; one store write per finished drag),
- the form (edit values, units and output options),
- the CSS output (re-rendered on every change),
- optional persistence to a JSON file (saved on every change).

Examples
--------
>>> gen = CalcGenerator()  # doctest: +SKIP
>>> gen  # doctest: +SKIP
>>> gen.css  # doctest: +SKIP
'font-size: calc(7px + 3.5vw);'
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import plotly.graph_objects as go
from IPython.display import display

from .app_layout import AppLayout
from .calc import Calc
from .canvas_widget import GraphCanvasWidget
from .css_output import CssOutput
from .form_input import FormInput
from .graph_constants import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH
from .graph_controller import GraphController
from .local_storage import PathLike, retrieve_local_data, save_local_data
from .plotly_surface import PlotlySurface
from .scheduling import TickScheduler
from .store import GraphState, StateStore

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class CalcGenerator:
    """Interactive fluid-size generator.

    Parameters
    ----------
    state : GraphState, optional
        Initial state. Defaults to the saved state at ``storage_path`` when
        there is one, else to ``GraphState()``.
    storage_path : str or path-like, optional
        JSON file the state is loaded from and saved to after every change.
        No persistence when omitted.
    width, height : int
        Canvas size in pixels.
    scheduler : TickScheduler, optional
        Timer backend for the graph's extension loop and redraws.
    title : str
        Heading shown above the graph.
    """

    def __init__(
        self,
        state: Optional[GraphState] = None,
        *,
        storage_path: Optional[PathLike] = None,
        width: int = DEFAULT_CANVAS_WIDTH,
        height: int = DEFAULT_CANVAS_HEIGHT,
        scheduler: Optional[TickScheduler] = None,
        title: str = "Fluid size generator",
    ) -> None:
        if state is None and storage_path is not None:
            state = retrieve_local_data(storage_path)
        self.store = StateStore(state)
        self._storage_path = storage_path

        self.canvas = GraphCanvasWidget(width=width, height=height)
        self.graph = GraphController(
            self.store.get(),
            self.canvas,
            input_source=self.canvas,
            scheduler=scheduler,
            on_change=self.store.set,
        )
        self.store.subscribe(self.graph.update, run_immediately=False)

        self.form = FormInput(self.store)
        self.output = CssOutput(self.store)

        if storage_path is not None:
            self.store.subscribe(self._save, run_immediately=False)

        self._layout = AppLayout(title)
        self._layout.set_canvas_widget(self.canvas)
        self._layout.set_form_widget(self.form)
        self._layout.set_output_widget(self.output)

    def _save(self, state: GraphState) -> None:
        save_local_data(state, self._storage_path)

    @property
    def state(self) -> GraphState:
        return self.store.get()

    @property
    def css(self) -> str:
        """CSS text for the current state."""
        return Calc(self.store.get()).render()

    def set(self, **changes: Any) -> bool:
        """Update the state programmatically (same rules as the form)."""
        return self.store.set(**changes)

    def to_plotly(self) -> go.Figure:
        """Static Plotly snapshot of the graph as currently drawn."""
        surface = PlotlySurface(self.canvas.width, self.canvas.height)
        self.graph.draw(surface)
        return surface.to_figure()

    def _ipython_display_(self, **kwargs: Any) -> None:
        """
        Special method called by IPython to display the object.
        Uses IPython.display.display() to render the underlying widget.
        """
        display(self._layout.output_widget)


__all__ = ["CalcGenerator"]
