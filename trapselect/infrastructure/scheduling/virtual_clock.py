"""
Virtual Clock Scheduler.

Deterministic SchedulerPort for tests and headless use: time only moves
when advance() is called, and due callbacks run in (due time, scheduling
order) order on the calling thread.
"""
import heapq
import itertools
from typing import Callable, List, Tuple

from ...core.ports.scheduler_port import SchedulerPort, TimerHandle


class VirtualTimerHandle(TimerHandle):
    """Handle of a callback scheduled on a VirtualClockScheduler."""

    def __init__(self, due_ms: int, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self._cancelled = False
        self._fired = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def active(self) -> bool:
        return not self._cancelled and not self._fired

    def fire(self) -> None:
        if not self.active:
            return
        self._fired = True
        self.callback()


class VirtualClockScheduler(SchedulerPort):
    """
    Scheduler driven by an explicit clock.

    Example:
        >>> clock = VirtualClockScheduler()
        >>> handle = clock.call_later(500, lambda: print("fired"))
        >>> clock.advance(499)
        >>> clock.advance(1)
        fired
    """

    def __init__(self):
        self._now_ms = 0
        self._sequence = itertools.count()
        self._queue: List[Tuple[int, int, VirtualTimerHandle]] = []

    @property
    def now_ms(self) -> int:
        return self._now_ms

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> VirtualTimerHandle:
        handle = VirtualTimerHandle(self._now_ms + max(0, int(delay_ms)), callback)
        heapq.heappush(self._queue, (handle.due_ms, next(self._sequence), handle))
        return handle

    def advance(self, delta_ms: int) -> int:
        """
        Move the clock forward, firing every callback that falls due.

        Callbacks scheduled by fired callbacks also run if they fall due
        inside the window.

        Returns:
            Number of callbacks fired
        """
        target = self._now_ms + max(0, int(delta_ms))
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due_ms, _, handle = heapq.heappop(self._queue)
            self._now_ms = due_ms
            if handle.active:
                handle.fire()
                fired += 1
        self._now_ms = target
        return fired

    def run_until_idle(self, limit_ms: int = 60000) -> int:
        """Advance until no active callback is pending (bounded by limit_ms)."""
        fired = 0
        deadline = self._now_ms + limit_ms
        while self.pending_count() and self._now_ms < deadline:
            next_due = min(due for due, _, h in self._queue if h.active)
            fired += self.advance(next_due - self._now_ms)
        return fired

    def pending_count(self) -> int:
        return sum(1 for _, _, handle in self._queue if handle.active)
