"""Timer helpers for the extension loop and coalesced redraws.

Both helpers run callbacks later through a :class:`TickScheduler`. The default
backend uses the running asyncio loop (the Jupyter kernel case) and falls back
to a daemon ``threading.Timer``. Tests inject a manual scheduler and fire ticks
by hand.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class TickScheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> Any:
        """Run ``callback`` after ``delay_s`` seconds; return a cancellable handle."""
        ...


class AutoScheduler:
    """Schedule on the running asyncio loop, or on a daemon thread timer."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> Any:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(delay_s, callback)
            timer.daemon = True
            timer.start()
            return timer
        return loop.call_later(delay_s, callback)


def _cancel(handle: Any) -> None:
    cancel = getattr(handle, "cancel", None)
    if cancel is not None:
        cancel()


class IntervalLoop:
    """Invoke ``tick`` on a fixed cadence until it asks to stop.

    Parameters
    ----------
    tick:
        Called once per interval. Returning ``False`` ends the loop.
    execute_every_ms:
        Cadence in milliseconds.
    scheduler:
        Timer backend. Defaults to :class:`AutoScheduler`.

    Notes
    -----
    Cancellation is explicit: :meth:`stop` sets a flag that every pending tick
    checks before running, in addition to cancelling the pending timer.
    Starting a running loop or stopping a stopped one is a contract violation;
    it is logged and ignored.
    """

    def __init__(
        self,
        tick: Callable[[], bool],
        *,
        execute_every_ms: int,
        scheduler: Optional[TickScheduler] = None,
        name: str = "IntervalLoop",
    ) -> None:
        if execute_every_ms <= 0:
            raise ValueError("execute_every_ms must be > 0")
        self._tick = tick
        self._interval_s = execute_every_ms / 1000.0
        self._scheduler = scheduler if scheduler is not None else AutoScheduler()
        self._name = name

        self._lock = threading.RLock()
        self._handle: Optional[Any] = None
        self._generation = 0
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> bool:
        with self._lock:
            if self._running:
                logger.error("%s already started", self._name)
                return False
            self._running = True
            self._generation += 1
            self._schedule_next_locked()
            logger.debug("%s started", self._name)
            return True

    def stop(self) -> bool:
        with self._lock:
            if not self._running:
                logger.warning("%s is not running", self._name)
                return False
            self._running = False
            if self._handle is not None:
                _cancel(self._handle)
                self._handle = None
            logger.debug("%s stopped", self._name)
            return True

    def _schedule_next_locked(self) -> None:
        generation = self._generation
        self._handle = self._scheduler.call_later(
            self._interval_s, lambda: self._on_tick(generation)
        )

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            # A stale timer from an earlier start, or a stop that raced the timer.
            if not self._running or generation != self._generation:
                return
            self._handle = None

        # The tick runs unlocked: it may stop or restart this loop itself.
        try:
            keep_going = self._tick()
        except Exception:
            logger.exception("%s tick failed", self._name)
            keep_going = True

        with self._lock:
            if not self._running or generation != self._generation:
                return
            if keep_going is False:
                self._running = False
                logger.debug("%s finished", self._name)
                return
            self._schedule_next_locked()


class FrameRequester:
    """Coalesce redraw requests into at most one callback per frame.

    Parameters
    ----------
    callback:
        Drawing function.
    frame_ms:
        Delay before the pending frame fires.
    scheduler:
        Timer backend. Defaults to :class:`AutoScheduler`.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        *,
        frame_ms: int,
        scheduler: Optional[TickScheduler] = None,
    ) -> None:
        if frame_ms <= 0:
            raise ValueError("frame_ms must be > 0")
        self._callback = callback
        self._frame_s = frame_ms / 1000.0
        self._scheduler = scheduler if scheduler is not None else AutoScheduler()
        self._lock = threading.Lock()
        self._pending = False

    @property
    def is_pending(self) -> bool:
        return self._pending

    def request(self) -> bool:
        """Schedule a frame unless one is already pending. Return ``True`` if scheduled."""
        with self._lock:
            if self._pending:
                return False
            self._pending = True
        self._scheduler.call_later(self._frame_s, self._on_frame)
        return True

    def _on_frame(self) -> None:
        with self._lock:
            self._pending = False
        try:
            self._callback()
        except Exception:
            logger.exception("FrameRequester callback failed")


__all__ = ["AutoScheduler", "FrameRequester", "IntervalLoop", "TickScheduler"]
