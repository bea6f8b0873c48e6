"""Live CSS output for the current state."""

from __future__ import annotations

import html

import ipywidgets as widgets

from .calc import Calc
from .store import GraphState, StateStore


class CssOutput(widgets.HTML):
    """``widgets.HTML`` showing the rendered CSS; follows the store."""

    def __init__(self, store: StateStore, **kwargs) -> None:
        super().__init__(**kwargs)
        self.text = ""
        store.subscribe(self.update)

    def update(self, state: GraphState) -> None:
        self.text = Calc(state).render()
        self.value = (
            "<pre style='margin:0; padding:8px; white-space:pre-wrap; "
            "font-family:monospace; background:rgba(15,23,42,0.04); border-radius:6px'>"
            f"{html.escape(self.text)}</pre>"
        )


__all__ = ["CssOutput"]
