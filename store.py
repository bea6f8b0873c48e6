"""Application state and its observable store.

Purpose
-------
``GraphState`` is the immutable record every component agrees on: the two
``(viewport, size)`` pairs, the clamp flags, units and output options.
``StateStore`` owns the current ``GraphState`` and notifies subscribers when a
``set`` call actually changes something.

Architecture notes
------------------
- State values are validated once, at construction. Sizes go through
  :func:`InputConvert` so strings coming from form fields or JSON are accepted.
- The graph controller, the form and the CSS output all subscribe to the
  store; the graph writes back exactly once per completed drag.
- Subscriber failures are logged and do not prevent later subscribers from
  running.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Optional

from .InputConvert import InputConvert

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

SIZE_UNITS: tuple[str, ...] = ("px", "rem", "em")
VIEWPORT_UNITS: tuple[str, ...] = ("vw", "vh")
CLAMP_METHODS: tuple[str, ...] = ("clamp", "minmax", "media")

SizePair = tuple[float, float]
Sizes = tuple[SizePair, SizePair]

DEFAULT_SIZES: Sizes = ((200.0, 14.0), (400.0, 21.0))


def _coerce_sizes(value: Any) -> Sizes:
    try:
        (vx1, vy1), (vx2, vy2) = value
    except (TypeError, ValueError) as e:
        raise ValueError(f"sizes must be two (viewport, size) pairs, got {value!r}") from e
    return (
        (InputConvert(vx1, float), InputConvert(vy1, float)),
        (InputConvert(vx2, float), InputConvert(vy2, float)),
    )


_BOOL_STRINGS = {"true": True, "false": False}


def _coerce_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _BOOL_STRINGS:
        return _BOOL_STRINGS[value.strip().lower()]
    raise ValueError(f"{name} must be a boolean; got {value!r}")


def _require_choice(name: str, value: Any, choices: tuple[str, ...]) -> str:
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}; got {value!r}")
    return value


@dataclass(frozen=True)
class GraphState:
    """Snapshot of everything the graph and the CSS output depend on.

    Parameters
    ----------
    sizes : tuple of two (viewport, size) pairs
        ``sizes[0]`` is p1, ``sizes[1]`` is p2. Viewport is in px, size in
        ``size_unit``.
    is_clamped_min, is_clamped_max : bool
        Whether the size stays flat below p1 / above p2.
    size_unit : {"px", "rem", "em"}
        Unit of the size axis.
    viewport_unit : {"vw", "vh"}
        Unit the growth term is expressed in.
    to_px_conversion : float
        Pixels per ``rem``/``em``.
    property_name : str
        CSS property written in front of the value.
    use_property : bool
        Whether the output is a full declaration or a bare value.
    clamp_method : {"clamp", "minmax", "media"}
        How clamped ends are written.
    """

    sizes: Sizes = DEFAULT_SIZES
    is_clamped_min: bool = False
    is_clamped_max: bool = False
    size_unit: str = "px"
    viewport_unit: str = "vw"
    to_px_conversion: float = 16.0
    property_name: str = "font-size"
    use_property: bool = True
    clamp_method: str = "clamp"

    def __post_init__(self) -> None:
        object.__setattr__(self, "sizes", _coerce_sizes(self.sizes))
        object.__setattr__(self, "is_clamped_min", _coerce_bool("is_clamped_min", self.is_clamped_min))
        object.__setattr__(self, "is_clamped_max", _coerce_bool("is_clamped_max", self.is_clamped_max))
        _require_choice("size_unit", self.size_unit, SIZE_UNITS)
        _require_choice("viewport_unit", self.viewport_unit, VIEWPORT_UNITS)
        _require_choice("clamp_method", self.clamp_method, CLAMP_METHODS)
        object.__setattr__(
            self,
            "to_px_conversion",
            InputConvert(self.to_px_conversion, float, allow_negative=False),
        )
        object.__setattr__(self, "property_name", str(self.property_name).strip())
        object.__setattr__(self, "use_property", _coerce_bool("use_property", self.use_property))

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible representation."""
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["sizes"] = [list(pair) for pair in self.sizes]
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GraphState":
        """Build a state from :meth:`to_dict` output; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class Observable:
    """Ordered list of callbacks notified with a payload."""

    def __init__(self) -> None:
        self._observers: list[Callable[[Any], None]] = []

    def subscribe(self, callback: Callable[[Any], None]) -> None:
        self._observers.append(callback)

    def unsubscribe(self, callback: Callable[[Any], None]) -> None:
        self._observers = [cb for cb in self._observers if cb != callback]

    def notify(self, payload: Any) -> None:
        for callback in list(self._observers):
            try:
                callback(payload)
            except Exception:
                name = getattr(callback, "__qualname__", repr(callback))
                logger.exception("State subscriber %s failed", name)

    def __len__(self) -> int:
        return len(self._observers)


class StateStore:
    """Single owner of the current :class:`GraphState`.

    Examples
    --------
    >>> store = StateStore()
    >>> seen = []
    >>> store.subscribe(seen.append, run_immediately=False)
    >>> store.set(is_clamped_min=True)
    True
    >>> seen[-1].is_clamped_min
    True
    >>> store.set(is_clamped_min=True)
    False
    """

    def __init__(self, state: Optional[GraphState] = None) -> None:
        self._state = state if state is not None else GraphState()
        self._observable = Observable()

    def get(self) -> GraphState:
        return self._state

    def subscribe(self, callback: Callable[[GraphState], None], run_immediately: bool = True) -> None:
        self._observable.subscribe(callback)
        if run_immediately:
            callback(self._state)

    def unsubscribe(self, callback: Callable[[GraphState], None]) -> None:
        self._observable.unsubscribe(callback)

    def set(self, partial: Optional[Mapping[str, Any]] = None, **changes: Any) -> bool:
        """Apply the fields that differ from the current state.

        Returns ``True`` when subscribers were notified.

        Raises
        ------
        KeyError
            For a field ``GraphState`` does not have.
        ValueError
            If the resulting state is invalid; the current state is kept.
        """
        requested = dict(partial or {})
        requested.update(changes)

        known = {f.name for f in fields(GraphState)}
        unknown = set(requested) - known
        if unknown:
            raise KeyError(f"Unknown state fields: {', '.join(sorted(unknown))}")

        candidate = replace(self._state, **requested)
        changed = {
            name for name in requested if getattr(candidate, name) != getattr(self._state, name)
        }
        if not changed:
            return False

        self._state = candidate
        logger.debug("state updated: %s", ", ".join(sorted(changed)))
        self._observable.notify(candidate)
        return True


__all__ = [
    "CLAMP_METHODS",
    "DEFAULT_SIZES",
    "GraphState",
    "Observable",
    "SIZE_UNITS",
    "StateStore",
    "VIEWPORT_UNITS",
]
