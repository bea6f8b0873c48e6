"""Widget tree of the size generator.

This module builds the notebook layout used by :class:`CalcGenerator`: a
title bar, the graph canvas on the left and a sidebar holding the form and
the CSS output.
"""

from __future__ import annotations

from typing import Any

import ipywidgets as widgets
from IPython.display import display


class OneShotOutput(widgets.Output):
    """
    An Output widget that can only be displayed once.

    Widgets are live objects connected to the frontend by a comm channel.
    Displaying the same instance twice produces two views fighting over the
    same state (for the canvas: two sets of window pointer listeners), so a
    second display attempt raises.

    Attributes
    ----------
    _displayed : bool
        Whether the widget has been displayed.
    """

    def __init__(self) -> None:
        super().__init__()
        self._displayed = False

    def _repr_mimebundle_(self, include: Any = None, exclude: Any = None, **kwargs: Any) -> Any:
        if self._displayed:
            raise RuntimeError(
                f"This {self.__class__.__name__} has already been displayed. "
                "Create a new generator instead of displaying this one again."
            )
        self._displayed = True
        return super()._repr_mimebundle_(include=include, exclude=exclude, **kwargs)

    @property
    def has_been_displayed(self) -> bool:
        return self._displayed


class AppLayout:
    """
    Visual structure of the generator.

    Responsibilities:
    - Building the HBox/VBox structure.
    - Exposing the canvas, form and output containers.
    """

    def __init__(self, title: str = "Fluid size generator") -> None:
        # 1. Title bar
        self.title_html = widgets.HTML(
            value=f"<h3 style='margin:0'>{title}</h3>", layout=widgets.Layout(margin="0 0 6px 0")
        )

        # 2. Graph area
        self.canvas_container = widgets.Box(
            children=(),
            layout=widgets.Layout(
                min_width="320px",
                margin="0px",
                padding="0px",
                flex="1 1 640px",
                border="1px solid #ddd",
                border_radius="8px",
                overflow="hidden",
            ),
        )

        # 3. Sidebar
        self.form_header = widgets.HTML("<b>Settings</b>", layout=widgets.Layout(margin="0"))
        self.form_box = widgets.VBox(
            layout=widgets.Layout(
                width="100%",
                padding="8px",
                border="1px solid rgba(15,23,42,0.08)",
                border_radius="10px",
            )
        )
        self.output_header = widgets.HTML(
            "<b>CSS</b>", layout=widgets.Layout(margin="10px 0 0 0")
        )
        self.output_box = widgets.VBox(
            layout=widgets.Layout(
                width="100%",
                padding="8px",
                border="1px solid rgba(15,23,42,0.08)",
                border_radius="10px",
            )
        )
        self.sidebar_container = widgets.VBox(
            [self.form_header, self.form_box, self.output_header, self.output_box],
            layout=widgets.Layout(
                margin="0px",
                padding="0px 0px 0px 10px",
                flex="0 1 420px",
                min_width="300px",
            ),
        )

        # 4. Main content (flex-wrap drops the sidebar below the canvas on narrow screens)
        self.content_wrapper = widgets.Box(
            [self.canvas_container, self.sidebar_container],
            layout=widgets.Layout(
                display="flex",
                flex_flow="row wrap",
                align_items="flex-start",
                width="100%",
                gap="8px",
            ),
        )

        self.root_widget = widgets.VBox(
            [self.title_html, self.content_wrapper],
            layout=widgets.Layout(width="100%"),
        )

    @property
    def output_widget(self) -> OneShotOutput:
        """Return a OneShotOutput wrapping the layout, ready for display."""
        out = OneShotOutput()
        with out:
            display(self.root_widget)
        return out

    def set_canvas_widget(self, widget: widgets.Widget) -> None:
        self.canvas_container.children = (widget,)

    def set_form_widget(self, widget: widgets.Widget) -> None:
        self.form_box.children = (widget,)

    def set_output_widget(self, widget: widgets.Widget) -> None:
        self.output_box.children = (widget,)


__all__ = ["AppLayout", "OneShotOutput"]
