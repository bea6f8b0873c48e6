"""Persist the graph state between sessions as a small JSON file."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from .store import GraphState

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_STORAGE_PATH = Path.home() / ".clampgraph.json"


def save_local_data(state: GraphState, path: PathLike = DEFAULT_STORAGE_PATH) -> None:
    """Write ``state`` to ``path`` (parent directories are created)."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_suffix(target.suffix + ".tmp")
    tmp.write_text(json.dumps(state.to_dict(), indent=2), encoding="utf-8")
    os.replace(tmp, target)
    logger.debug("state saved to %s", target)


def retrieve_local_data(path: PathLike = DEFAULT_STORAGE_PATH) -> Optional[GraphState]:
    """Load a state saved by :func:`save_local_data`.

    Returns ``None`` when nothing was saved yet, or when the file cannot be
    decoded into a valid state (the problem is logged).
    """
    source = Path(path)
    if not source.exists():
        return None
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return GraphState.from_dict(data)
    except (OSError, ValueError, TypeError, KeyError) as e:
        logger.error("There was an error fetching the local data from %s: %s", source, e)
        return None


__all__ = ["DEFAULT_STORAGE_PATH", "retrieve_local_data", "save_local_data"]
