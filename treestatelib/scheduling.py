"""Deferred, cancellable callbacks for treestatelib.

The only asynchrony in the engine is clearing a node's loading indicator
some time after it expands. That is modelled as schedule-with-handle,
cancel-by-handle, fire-once. Two schedulers are provided:

- AsyncioScheduler: ``loop.call_later`` on an event loop (single-threaded,
  cooperative; the natural fit for UI sessions driven by asyncio)
- ThreadingScheduler: daemon ``threading.Timer`` objects for callers
  without an event loop

``treestatelib.testing.ManualScheduler`` drives a virtual clock for tests.
"""

import asyncio
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

Callback = Callable[[], None]


class ScheduledTask(ABC):
    """Handle for one scheduled callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Idempotent."""
        pass

    @abstractmethod
    def cancelled(self) -> bool:
        pass


class Scheduler(ABC):
    """Schedules fire-once callbacks after a delay."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callback) -> ScheduledTask:
        """Run ``callback`` once after ``delay`` seconds.

        Args:
            delay: Delay in seconds
            callback: Zero-argument callable

        Returns:
            Handle that can cancel the callback before it fires
        """
        pass


class _AsyncioTask(ScheduledTask):
    """Wraps an ``asyncio.TimerHandle``."""

    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by an asyncio event loop.

    Callbacks run on the loop's thread, so they never interleave with
    synchronous engine operations issued from that same loop.

    Example:
        async def main():
            controller = TreeExplorerController(roots, config,
                                                scheduler=AsyncioScheduler())
            controller.toggle_expansion('docs')
            await asyncio.sleep(1.1)
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Initialize the scheduler.

        Args:
            loop: Event loop to use; defaults to the running loop at
                scheduling time
        """
        self._loop = loop

    def schedule(self, delay: float, callback: Callback) -> ScheduledTask:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioTask(loop.call_later(delay, callback))


class _TimerTask(ScheduledTask):
    """Wraps a ``threading.Timer``."""

    def __init__(self, timer: threading.Timer):
        self._timer = timer
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()

    def cancelled(self) -> bool:
        return self._cancelled


class ThreadingScheduler(Scheduler):
    """
    Scheduler backed by daemon ``threading.Timer`` objects.

    Callbacks run on the timer thread. The controller's loading callback
    only discards one id from the loading set, but callers that react to
    the resulting notification must hop back to their own thread.
    """

    def schedule(self, delay: float, callback: Callback) -> ScheduledTask:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        task = _TimerTask(timer)
        timer.start()
        return task


def default_scheduler() -> Scheduler:
    """Pick AsyncioScheduler inside a running loop, ThreadingScheduler otherwise."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return ThreadingScheduler()
    return AsyncioScheduler(loop)
