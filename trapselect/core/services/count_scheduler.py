# -*- coding: utf-8 -*-
"""
Count Scheduler.

Coalesces bursts of selection edits into a single count of matching files.

States:
    IDLE      no count pending; current_count() reports the last result
    PENDING   an edit arrived; the debounce timer is running
    COUNTING  the count call is running (possibly on a worker thread)

Rules:
- Each edit restarts the debounce timer (default 500 ms).
- An edit during COUNTING does not abort the running count; a trailing
  recount is armed once it completes.
- While suppressed (state loading), edits are ignored and a timer that
  fires is dropped.
- A failed count makes the count UNKNOWN. There is no automatic retry.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from ..domain.exceptions import CountError
from ..ports.scheduler_port import CountRunnerPort, SchedulerPort
from ...infrastructure.logging import get_count_logger
from ...infrastructure.scheduling.debouncer import Debouncer
from ...infrastructure.scheduling.runners import InlineCountRunner
from ...infrastructure.state.suppression_flag import SuppressionFlag

logger = get_count_logger()

DEFAULT_DEBOUNCE_MS = 500


class CountState(Enum):
    """Scheduler state."""
    IDLE = "idle"
    PENDING = "pending"
    COUNTING = "counting"


class CountStatus(Enum):
    """Non-numeric answers of current_count()."""
    PENDING = "pending"
    UNKNOWN = "unknown"


CountValue = Union[int, CountStatus]


class CountScheduler:
    """
    Debounced, non-reentrant counting of matching files.

    Args:
        scheduler: Timer source for the debounce delay
        count_fn: The count call. Receives the snapshot taken when the
            timer fires, or no argument when snapshot_fn is None.
        snapshot_fn: Captures the inputs of a count on the owner thread
            (typically the current CompiledPredicate)
        runner: Executes count_fn; inline by default
        delay_ms: Debounce interval
    """

    def __init__(
        self,
        scheduler: SchedulerPort,
        count_fn: Callable[..., int],
        snapshot_fn: Optional[Callable[[], Any]] = None,
        runner: Optional[CountRunnerPort] = None,
        delay_ms: int = DEFAULT_DEBOUNCE_MS,
    ):
        self._count_fn = count_fn
        self._snapshot_fn = snapshot_fn
        self._runner = runner or InlineCountRunner()
        self._debouncer = Debouncer(scheduler, delay_ms)
        self._suppression = SuppressionFlag("count_suppressed", auto_log=False)
        self._state = CountState.IDLE
        self._count: Optional[int] = None
        self._trailing = False
        self._listeners: List[Callable[[CountValue], None]] = []
        self.counts_started = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> CountState:
        return self._state

    @property
    def delay_ms(self) -> int:
        return self._debouncer.delay_ms

    @delay_ms.setter
    def delay_ms(self, value: int):
        self._debouncer.delay_ms = value

    @property
    def is_suppressed(self) -> bool:
        return self._suppression.is_set

    def current_count(self) -> CountValue:
        """Last count, PENDING while one is on its way, UNKNOWN if none is available."""
        if self._state is not CountState.IDLE:
            return CountStatus.PENDING
        if self._count is None:
            return CountStatus.UNKNOWN
        return self._count

    def add_listener(self, callback: Callable[[CountValue], None]) -> None:
        """Call ``callback(current_count())`` whenever a count completes or fails."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[CountValue], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on_input_changed(self) -> None:
        """Selection inputs changed: (re)start the debounce interval."""
        if self._suppression.is_set:
            self._suppression.note_suppressed()
            return
        if self._state is CountState.COUNTING:
            self._trailing = True
            return
        self._state = CountState.PENDING
        self._debouncer.call(self._on_timer)

    @contextmanager
    def suppressed(self):
        """Ignore input changes (and drop due timers) inside the block. Re-entrant."""
        with self._suppression.acquire():
            yield self

    def recount_now(self) -> None:
        """Run a pending count immediately, or start one if nothing is pending."""
        if self._debouncer.is_pending():
            self._debouncer.flush()
        elif self._state is CountState.IDLE:
            self._start_count()

    def cancel(self) -> None:
        """Drop a pending count. A running count still completes."""
        self._debouncer.cancel()
        if self._state is CountState.PENDING:
            self._state = CountState.IDLE
        self._trailing = False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_timer(self) -> None:
        if self._suppression.is_set:
            self._suppression.note_suppressed()
            self._state = CountState.IDLE
            logger.debug("Count timer fired while suppressed; dropped")
            return
        self._start_count()

    def _start_count(self) -> None:
        self._state = CountState.COUNTING
        self._trailing = False
        self.counts_started += 1
        if self._snapshot_fn is not None:
            snapshot = self._snapshot_fn()
            work = lambda: self._count_fn(snapshot)  # noqa: E731
        else:
            work = self._count_fn
        self._runner.run(work, self._on_count_done, self._on_count_failed)

    def _on_count_done(self, result: int) -> None:
        self._count = int(result)
        self._finish()

    def _on_count_failed(self, error: BaseException) -> None:
        failure = error if isinstance(error, CountError) else CountError(str(error))
        logger.warning(f"Counting matching files failed: {failure}")
        self._count = None
        self._finish()

    def _finish(self) -> None:
        self._state = CountState.IDLE
        value = self.current_count()
        for listener in list(self._listeners):
            listener(value)
        if self._trailing:
            self._trailing = False
            self.on_input_changed()
