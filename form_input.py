import logging

import ipywidgets as widgets

from .InputConvert import InputConvert
from .geometry import format_decimal
from .store import CLAMP_METHODS, SIZE_UNITS, VIEWPORT_UNITS, GraphState, StateStore

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class FormInput(widgets.VBox):
    """
    Form controls mirroring the store state.

    Design notes
    ------------
    - Size fields are Text widgets that commit on Enter (continuous_update=False)
      and accept expressions like "1.5*16" or values with a unit ("24px") via
      InputConvert. If parsing fails, the field reverts to the store value.
    - Enabled/disabled state of dependent controls is derived from the store
      state, so the cross-field rules hold however the state was changed:
        * the px conversion is disabled while the size unit is px,
        * the property name is disabled while use_property is off,
        * the clamp method is disabled while neither end is clamped.
    - Checking a clamp turns use_property on; unchecking use_property clears
      both clamps.
    - `update(state)` writes a state into the controls without sending it back
      to the store.
    """

    def __init__(self, store: StateStore, **kwargs):
        self.store = store

        # Internal guard to prevent circular updates (store -> form -> store -> ...)
        self._syncing = False

        text_args = {
            "continuous_update": False,
            "style": {"description_width": "70px"},
            "layout": widgets.Layout(width="160px"),
        }
        self.viewport_0 = widgets.Text(description="Viewport 1", **text_args)
        self.size_0 = widgets.Text(description="Size 1", **text_args)
        self.viewport_1 = widgets.Text(description="Viewport 2", **text_args)
        self.size_1 = widgets.Text(description="Size 2", **text_args)

        self.size_unit = widgets.ToggleButtons(
            options=list(SIZE_UNITS), description="Size unit", style={"button_width": "48px"}
        )
        self.viewport_unit = widgets.ToggleButtons(
            options=list(VIEWPORT_UNITS), description="Viewport", style={"button_width": "48px"}
        )
        self.to_px_conversion = widgets.FloatText(
            description="1 unit =", layout=widgets.Layout(width="160px")
        )
        self.use_property = widgets.Checkbox(description="Use property", indent=False)
        self.property_name = widgets.Text(
            description="Property", continuous_update=False, layout=widgets.Layout(width="220px")
        )
        self.is_clamped_min = widgets.Checkbox(description="Clamp min", indent=False)
        self.is_clamped_max = widgets.Checkbox(description="Clamp max", indent=False)
        self.clamp_method = widgets.ToggleButtons(
            options=list(CLAMP_METHODS), description="Method", style={"button_width": "64px"}
        )

        super().__init__(
            [
                widgets.HTML("<b>Sizes</b>"),
                widgets.HBox([self.viewport_0, self.size_0]),
                widgets.HBox([self.viewport_1, self.size_1]),
                widgets.HTML("<b>Units</b>"),
                self.size_unit,
                self.viewport_unit,
                self.to_px_conversion,
                widgets.HTML("<b>Output</b>"),
                widgets.HBox([self.use_property, self.property_name]),
                widgets.HBox([self.is_clamped_min, self.is_clamped_max]),
                self.clamp_method,
            ],
            **kwargs,
        )

        for field in (self.viewport_0, self.size_0, self.viewport_1, self.size_1):
            field.observe(self._commit_sizes, names="value")
        self.size_unit.observe(self._commit_choice("size_unit"), names="value")
        self.viewport_unit.observe(self._commit_choice("viewport_unit"), names="value")
        self.clamp_method.observe(self._commit_choice("clamp_method"), names="value")
        self.property_name.observe(self._commit_choice("property_name"), names="value")
        self.to_px_conversion.observe(self._commit_conversion, names="value")
        self.use_property.observe(self._commit_use_property, names="value")
        self.is_clamped_min.observe(self._commit_clamp("is_clamped_min"), names="value")
        self.is_clamped_max.observe(self._commit_clamp("is_clamped_max"), names="value")

        store.subscribe(self.update)

    # --- Store -> form --------------------------------------------------------

    def update(self, state: GraphState) -> None:
        """Show ``state`` in the controls."""
        self._syncing = True
        try:
            (x1, y1), (x2, y2) = state.sizes
            self.viewport_0.value = format_decimal(x1)
            self.size_0.value = format_decimal(y1)
            self.viewport_1.value = format_decimal(x2)
            self.size_1.value = format_decimal(y2)
            self.size_unit.value = state.size_unit
            self.viewport_unit.value = state.viewport_unit
            self.to_px_conversion.value = state.to_px_conversion
            self.use_property.value = state.use_property
            self.property_name.value = state.property_name
            self.is_clamped_min.value = state.is_clamped_min
            self.is_clamped_max.value = state.is_clamped_max
            self.clamp_method.value = state.clamp_method

            self.to_px_conversion.disabled = state.size_unit == "px"
            self.property_name.disabled = not state.use_property
            self.clamp_method.disabled = not (state.is_clamped_min or state.is_clamped_max)
        finally:
            self._syncing = False

    # --- Form -> store --------------------------------------------------------

    def _set(self, **changes) -> bool:
        try:
            return self.store.set(**changes)
        except ValueError as e:
            logger.warning("Rejected form input %s: %s", changes, e)
            self.update(self.store.get())
            return False

    def _commit_sizes(self, change) -> None:
        if self._syncing:
            return
        try:
            x1, y1, x2, y2 = (
                InputConvert(field.value, float)
                for field in (self.viewport_0, self.size_0, self.viewport_1, self.size_1)
            )
        except ValueError:
            # Revert to the committed state
            self.update(self.store.get())
            return
        if not self._set(sizes=((x1, y1), (x2, y2))):
            # Normalize the displayed text
            self.update(self.store.get())

    def _commit_choice(self, name: str):
        def handler(change) -> None:
            if self._syncing:
                return
            self._set(**{name: change.new})

        return handler

    def _commit_conversion(self, change) -> None:
        if self._syncing:
            return
        self._set(to_px_conversion=change.new)

    def _commit_use_property(self, change) -> None:
        if self._syncing:
            return
        if change.new:
            self._set(use_property=True)
        else:
            self._set(use_property=False, is_clamped_min=False, is_clamped_max=False)

    def _commit_clamp(self, name: str):
        def handler(change) -> None:
            if self._syncing:
                return
            if change.new:
                self._set(**{name: True, "use_property": True})
            else:
                self._set(**{name: False})

        return handler


__all__ = ["FormInput"]
