"""CSS rendering of the size/viewport line.

``Calc`` turns a :class:`clampgraph.store.GraphState` into CSS text. The line
through the two ``(viewport px, size)`` pairs becomes a ``calc()`` expression
whose growth term is expressed in the viewport unit::

    size(viewport) = intercept + slope * viewport
    1vw = viewport / 100   =>   growth term = slope * 100 vw

When the size unit is ``rem``/``em`` the growth term is scaled by the px
conversion so that both terms are lengths. Clamped ends are written with one
of three methods: ``clamp()``, nested ``min()``/``max()`` or ``@media`` blocks.

Examples
--------
>>> Calc(GraphState(sizes=((200, 14), (400, 21)))).expression()
'calc(7px + 3.5vw)'
"""

from __future__ import annotations

import logging

from .geometry import LinearFunction, Point, format_decimal
from .store import GraphState

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

_MEDIA_FEATURE = {"vw": "min-width", "vh": "min-height"}


class Calc:
    """CSS renderer for one state."""

    def __init__(self, state: GraphState) -> None:
        self.state = state
        (x1, y1), (x2, y2) = state.sizes
        self.low = Point(x1, y1)
        self.high = Point(x2, y2)
        if x1 == x2:
            logger.warning("Both sizes share viewport %s; rendering a constant size", x1)
            self.line = LinearFunction(0.0, y2)
        else:
            self.line = LinearFunction.from_points(self.low, self.high)

    @property
    def slope(self) -> float:
        return self.line.slope

    @property
    def intercept(self) -> float:
        return self.line.intercept

    @property
    def growth(self) -> float:
        """Slope term coefficient, in viewport units."""
        growth = self.slope * 100
        if self.state.size_unit in ("rem", "em"):
            growth *= self.state.to_px_conversion
        return growth

    def _size(self, value: float) -> str:
        return f"{format_decimal(value)}{self.state.size_unit}"

    def expression(self) -> str:
        """The unclamped size as ``calc()`` (or a single term when possible)."""
        base = self._size(self.intercept)
        growth = format_decimal(self.growth)
        viewport_unit = self.state.viewport_unit

        if growth == "0":
            return base
        if format_decimal(self.intercept) == "0":
            return f"{growth}{viewport_unit}"
        if growth.startswith("-"):
            return f"calc({base} - {growth[1:]}{viewport_unit})"
        return f"calc({base} + {growth}{viewport_unit})"

    def value(self) -> str:
        """The size with its clamped ends applied via ``clamp()`` or ``min()``/``max()``."""
        expr = self.expression()
        state = self.state
        rising = self.slope >= 0
        y1, y2 = self._size(self.low.y), self._size(self.high.y)

        if state.is_clamped_min and state.is_clamped_max:
            low, high = (y1, y2) if rising else (y2, y1)
            if state.clamp_method == "minmax":
                return f"max({low}, min({expr}, {high}))"
            return f"clamp({low}, {expr}, {high})"
        if state.is_clamped_min:
            return f"max({y1}, {expr})" if rising else f"min({y1}, {expr})"
        if state.is_clamped_max:
            return f"min({y2}, {expr})" if rising else f"max({y2}, {expr})"
        return expr

    def declaration(self, value: str) -> str:
        return f"{self.state.property_name}: {value};"

    def media(self) -> str:
        """Declarations with the clamped ends expressed as media queries."""
        state = self.state
        feature = _MEDIA_FEATURE[state.viewport_unit]
        expr = self.expression()

        if not (state.is_clamped_min or state.is_clamped_max):
            return self.declaration(expr)

        lines = [self.declaration(self._size(self.low.y) if state.is_clamped_min else expr)]
        if state.is_clamped_min:
            lines.append(f"@media ({feature}: {format_decimal(self.low.x)}px) {{")
            lines.append(f"  {self.declaration(expr)}")
            lines.append("}")
        if state.is_clamped_max:
            lines.append(f"@media ({feature}: {format_decimal(self.high.x)}px) {{")
            lines.append(f"  {self.declaration(self._size(self.high.y))}")
            lines.append("}")
        return "\n".join(lines)

    def render(self) -> str:
        """Final CSS text for the current output options."""
        state = self.state
        if state.clamp_method == "media" and (state.is_clamped_min or state.is_clamped_max):
            return self.media()
        value = self.value()
        if state.use_property:
            return self.declaration(value)
        return value


__all__ = ["Calc"]
