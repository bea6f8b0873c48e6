"""Coercion of user-entered values into finite numbers.

Form fields and persisted state hand over numbers, numeric strings, strings
carrying a CSS unit (``"24px"``, ``"1.5rem"``) or small arithmetic expressions
(``"1.5*16"``). Everything is normalized here before it reaches the geometry,
where a bad coordinate would corrupt every derived value.
"""

from __future__ import annotations

import math
import re
from typing import Any, Type, TypeVar

import sympy as sp

T = TypeVar("T", int, float)

CSS_UNIT_SUFFIXES = ("px", "rem", "em", "vw", "vh")
_UNIT_RE = re.compile(r"^(?P<body>.*?)\s*(?P<unit>" + "|".join(CSS_UNIT_SUFFIXES) + r")$", re.I)


def strip_css_unit(text: str) -> tuple[str, str | None]:
    """Split ``"24px"`` into ``("24", "px")``; unitless text returns ``(text, None)``."""
    match = _UNIT_RE.match(text.strip())
    if match is None or not match.group("body"):
        return text.strip(), None
    return match.group("body"), match.group("unit").lower()


def InputConvert(obj: Any, dest_type: Type[T] = float, *, allow_negative: bool = True) -> T:
    """
    Convert `obj` to a finite `dest_type` (float or int).

    Rules:
    - Numbers (excluding bool) are cast directly.
    - Strings may carry a trailing CSS unit, which is ignored; the rest is
      parsed as a float, or else evaluated as a SymPy expression.
    - int destinations round to the nearest integer.

    Raises
    ------
    NotImplementedError
        If dest_type is unsupported.
    ValueError
        If the value is not a finite real number, or is negative while
        `allow_negative` is False.
    """
    if dest_type not in (float, int):
        raise NotImplementedError(
            f"Unsupported destination type: {dest_type!r}. Only float and int are supported."
        )

    if isinstance(obj, bool):
        raise ValueError(f"Could not convert boolean {obj!r} to {dest_type.__name__}.")

    if isinstance(obj, (int, float)):
        value = float(obj)
    elif isinstance(obj, str):
        body, _unit = strip_css_unit(obj)
        if body == "":
            raise ValueError(f"Cannot convert empty string to {dest_type.__name__}.")
        try:
            value = float(body)
        except ValueError:
            try:
                evaluated = sp.sympify(body).evalf()
                value = complex(evaluated).real if evaluated.is_real else math.nan
            except Exception as e:
                raise ValueError(
                    f"Could not convert {obj!r} to {dest_type.__name__} (neither directly nor via SymPy)."
                ) from e
    else:
        try:
            value = float(obj)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Could not convert {obj!r} to {dest_type.__name__}.") from e

    if not math.isfinite(value):
        raise ValueError(f"Could not convert {obj!r}: value is not a finite real number.")
    if not allow_negative and value < 0:
        raise ValueError(f"Could not convert {obj!r}: negative values are not allowed.")

    if dest_type is int:
        return int(round(value))  # type: ignore[return-value]
    return value  # type: ignore[return-value]


__all__ = ["CSS_UNIT_SUFFIXES", "InputConvert", "strip_css_unit"]
