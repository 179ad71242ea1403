"""Cancellable timers for the workflow simulations.

Every suspension point in the workflow (a progress tick, a reveal tick, the
exhaustion delay, a reply delay) is a ``TimerHandle`` obtained from a
``Scheduler``.  Cancelling revokes the handle: the callback never runs.

Classes
-------
Scheduler
    Abstract base: ``call_later(delay_ms, callback) -> TimerHandle``.
VirtualScheduler
    Deterministic simulated clock advanced explicitly by the caller.
AsyncioScheduler
    Real-time scheduler on top of an asyncio event loop (1 unit = 1 ms).
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from typing import Any

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], None]


# ===================================================================== #
#  Timer handle                                                          #
# ===================================================================== #

class TimerHandle(ABC):
    """A scheduled callback that can be revoked until it fires."""

    @abstractmethod
    def cancel(self) -> None:
        """Revoke the timer.  Idempotent; a no-op after the callback ran."""

    @property
    @abstractmethod
    def active(self) -> bool:
        """``True`` while the callback is still due to run."""


# ===================================================================== #
#  Scheduler base                                                        #
# ===================================================================== #

class Scheduler(ABC):
    """Issues ``TimerHandle`` objects on a single logical thread."""

    @abstractmethod
    def call_later(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        """Run *callback* once, *delay_ms* time-units from now."""

    @property
    @abstractmethod
    def now(self) -> float:
        """Current time in scheduler units."""

    @property
    @abstractmethod
    def pending_count(self) -> int:
        """Number of timers that are still due to fire."""

    @property
    def supports_tasks(self) -> bool:
        """``True`` when :meth:`create_task` can run coroutines concurrently."""
        return False

    def create_task(
        self,
        coro: Coroutine[Any, Any, Any],
        on_result: Callable[[Any], None],
    ) -> TimerHandle:
        """Run *coro* without blocking other timers, then pass its result
        to *on_result*.  Cancelling the handle cancels the coroutine.
        """
        coro.close()
        raise NotImplementedError(f"{type(self).__name__} cannot run coroutines")


# ===================================================================== #
#  Virtual (simulated) clock                                             #
# ===================================================================== #

class _VirtualTimer(TimerHandle):
    __slots__ = ("due", "seq", "callback", "_scheduler", "_active")

    def __init__(
        self,
        scheduler: VirtualScheduler,
        due: float,
        seq: int,
        callback: TimerCallback,
    ) -> None:
        self._scheduler = scheduler
        self.due = due
        self.seq = seq
        self.callback = callback
        self._active = True

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._scheduler._live.discard(self)

    @property
    def active(self) -> bool:
        return self._active

    def __lt__(self, other: _VirtualTimer) -> bool:
        return (self.due, self.seq) < (other.due, other.seq)


class VirtualScheduler(Scheduler):
    """Deterministic scheduler driven by :meth:`advance`.

    Timers due at the same instant fire in the order they were scheduled.
    A callback that schedules another timer whose due time falls inside the
    window being advanced sees it fire within the same ``advance`` call.

    Usage::

        clock = VirtualScheduler()
        clock.call_later(200, tick)
        clock.advance(200)   # tick runs here
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[_VirtualTimer] = []
        self._live: set[_VirtualTimer] = set()
        self._counter = itertools.count()

    def call_later(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        timer = _VirtualTimer(self, self._now + delay_ms, next(self._counter), callback)
        heapq.heappush(self._queue, timer)
        self._live.add(timer)
        return timer

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending_count(self) -> int:
        return len(self._live)

    @property
    def next_due(self) -> float | None:
        """Due time of the earliest live timer, or ``None`` when idle."""
        self._drop_cancelled()
        return self._queue[0].due if self._queue else None

    def _drop_cancelled(self) -> None:
        while self._queue and not self._queue[0].active:
            heapq.heappop(self._queue)

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward by *delta_ms*, firing every due timer.

        Returns the number of callbacks that ran.
        """
        if delta_ms < 0:
            raise ValueError(f"delta_ms must be >= 0, got {delta_ms}")
        target = self._now + delta_ms
        fired = 0
        while True:
            self._drop_cancelled()
            if not self._queue or self._queue[0].due > target:
                break
            timer = heapq.heappop(self._queue)
            self._now = timer.due
            timer._active = False
            self._live.discard(timer)
            timer.callback()
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, max_callbacks: int = 100_000) -> int:
        """Fire timers until none remain.

        Raises ``RuntimeError`` if more than *max_callbacks* fire, which
        indicates a timer chain that reschedules itself forever.
        """
        fired = 0
        while True:
            due = self.next_due
            if due is None:
                return fired
            fired += self.advance(due - self._now)
            if fired > max_callbacks:
                raise RuntimeError(
                    f"Scheduler still busy after {max_callbacks} callbacks"
                )


# ===================================================================== #
#  asyncio-backed real-time scheduler                                    #
# ===================================================================== #

class _AsyncioTimer(TimerHandle):
    __slots__ = ("_handle", "_scheduler", "_active")

    def __init__(self, scheduler: AsyncioScheduler) -> None:
        self._scheduler = scheduler
        self._handle: asyncio.TimerHandle | asyncio.Task[Any] | None = None
        self._active = True

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._scheduler._live.discard(self)
            if self._handle is not None:
                self._handle.cancel()

    @property
    def active(self) -> bool:
        return self._active


class AsyncioScheduler(Scheduler):
    """Schedules callbacks on an asyncio loop; one time-unit is 1 ms.

    Must be created and used from the thread running *loop*.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._live: set[_AsyncioTimer] = set()

    def call_later(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        timer = _AsyncioTimer(self)

        def _fire() -> None:
            if not timer._active:
                return
            timer._active = False
            self._live.discard(timer)
            callback()

        timer._handle = self._loop.call_later(delay_ms / 1000.0, _fire)
        self._live.add(timer)
        return timer

    @property
    def now(self) -> float:
        return self._loop.time() * 1000.0

    @property
    def pending_count(self) -> int:
        return len(self._live)

    async def wait_until_idle(self, poll_interval: float = 0.02) -> None:
        """Sleep until every scheduled timer has fired or been cancelled."""
        while self._live:
            await asyncio.sleep(poll_interval)

    @property
    def supports_tasks(self) -> bool:
        return True

    def create_task(
        self,
        coro: Coroutine[Any, Any, Any],
        on_result: Callable[[Any], None],
    ) -> TimerHandle:
        timer = _AsyncioTimer(self)

        def _done(task: asyncio.Task[Any]) -> None:
            if not timer._active:
                return
            timer._active = False
            self._live.discard(timer)
            if task.cancelled():
                return
            exc = task.exception()
            if exc is not None:
                logger.error("Scheduled task failed", exc_info=exc)
                return
            on_result(task.result())

        task = self._loop.create_task(coro)
        task.add_done_callback(_done)
        timer._handle = task
        self._live.add(timer)
        return timer
