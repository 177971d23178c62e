# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Deferred-callback schedulers for debounced recomputation.

A scheduler runs a callback after a delay on the same logical thread that
armed it; the returned handle can be cancelled until the callback fires.
Two implementations:

- VirtualClockScheduler: deterministic, driven by ``advance()``; for tests
  and synchronous embedding
- AsyncioScheduler: delegates to ``loop.call_later`` on an event loop
"""

import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Tuple

from typing_extensions import Protocol


class ScheduledHandle(Protocol):
    """Cancellable handle for a pending callback."""

    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle: ...


class VirtualTimerHandle:
    """Handle returned by VirtualClockScheduler.call_later."""

    def __init__(
        self,
        when: float,
        callback: Callable[[], None],
        on_cancel: Optional[Callable[[], None]] = None,
    ):
        self.when = when
        self._callback = callback
        self._on_cancel = on_cancel
        self._cancelled = False
        self._fired = False

    def cancel(self) -> None:
        if self._cancelled or self._fired:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()

    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    def _run(self) -> None:
        self._fired = True
        self._callback()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else ("fired" if self._fired else "pending")
        return f"{self.__class__.__name__}(when={self.when}, {state})"


class VirtualClockScheduler:
    """
    Single-threaded scheduler with a manually advanced clock.

    Callbacks due at the same instant fire in the order they were
    scheduled. Nothing runs until ``advance()`` or ``run_pending()`` is
    called.

    Examples
    --------
    >>> scheduler = VirtualClockScheduler()
    >>> fired = []
    >>> handle = scheduler.call_later(0.3, lambda: fired.append(scheduler.now))
    >>> scheduler.advance(0.2)
    0
    >>> scheduler.advance(0.1)
    1
    >>> fired
    [0.3]
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._queue: List[Tuple[float, int, VirtualTimerHandle]] = []
        self._counter = itertools.count()
        self._live = 0

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> VirtualTimerHandle:
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        # Cancelled entries never outnumber live ones
        if len(self._queue) - self._live > self._live:
            self._purge_cancelled()
        handle = VirtualTimerHandle(self._now + delay, callback, self._on_cancel)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        self._live += 1
        return handle

    def pending(self) -> int:
        """Number of armed, uncancelled callbacks."""
        return self._live

    def _on_cancel(self) -> None:
        self._live -= 1

    def _purge_cancelled(self) -> None:
        self._queue = [entry for entry in self._queue if not entry[2].cancelled()]
        heapq.heapify(self._queue)

    def _fire(self, handle: VirtualTimerHandle) -> None:
        self._live -= 1
        handle._run()

    def advance(self, dt: float) -> int:
        """
        Move the clock forward by ``dt`` and fire everything now due.

        Returns
        -------
        int
            Number of callbacks fired
        """
        if dt < 0:
            raise ValueError(f"cannot move the clock backwards (dt={dt})")
        target = self._now + dt
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self._now = when
            self._fire(handle)
            fired += 1
        self._now = target
        return fired

    def run_pending(self) -> int:
        """Fire every armed callback, advancing the clock to the last one."""
        fired = 0
        while self._queue:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self._now = max(self._now, when)
            self._fire(handle)
            fired += 1
        return fired

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(now={self._now}, pending={self.pending()})"


class AsyncioScheduler:
    """
    Scheduler backed by an asyncio event loop.

    Parameters
    ----------
    loop : Optional[asyncio.AbstractEventLoop]
        Loop to schedule on. Default: the running loop at call time
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return loop.call_later(delay, callback)
