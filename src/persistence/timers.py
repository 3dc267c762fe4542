"""Cancellable one-shot timers for the save scheduler.

The scheduler only needs ``call_later`` and ``cancel``; hosts pick the
implementation matching their event model.  Tests substitute a manual
clock so debounce behavior can be checked without real delays.
"""

from __future__ import annotations

import asyncio
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable


class TimerHandle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        """Stop the callback from running.  No-op once it has fired."""


class Timers(ABC):
    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""


class _AsyncioHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioTimers(Timers):
    """Timers on an asyncio event loop; callbacks run on the loop thread."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioHandle(self.loop.call_later(delay, callback))


class _ThreadHandle(TimerHandle):
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingTimers(Timers):
    """Timers backed by daemon ``threading.Timer`` threads.

    Callbacks run off the caller's thread; the save scheduler serializes
    its own state changes with a lock.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return _ThreadHandle(timer)
