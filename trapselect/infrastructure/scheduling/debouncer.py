"""
TrapSelect Debouncer Utility.

Debounce function calls with configurable delay over any SchedulerPort
(QTimer in the application, a virtual clock in tests).
"""
from typing import Callable, Optional

from ...core.ports.scheduler_port import SchedulerPort, TimerHandle


class Debouncer:
    """
    Debounce function calls with configurable delay.

    Every call restarts the delay; only the last call made before the delay
    elapses is executed.

    Usage:
        # Create debouncer with 500ms delay
        debouncer = Debouncer(scheduler, delay_ms=500)

        # In event handler
        def on_value_changed(text):
            debouncer.call(recount, text)

        # Cancel pending call
        debouncer.cancel()

        # Execute immediately if pending
        debouncer.flush()
    """

    def __init__(self, scheduler: SchedulerPort, delay_ms: int = 500):
        """
        Initialize Debouncer.

        Args:
            scheduler: Timer source running callbacks on the owner thread
            delay_ms: Delay in milliseconds before executing
        """
        self._scheduler = scheduler
        self._delay = max(0, delay_ms)
        self._timer: Optional[TimerHandle] = None
        self._pending_func: Optional[Callable] = None
        self._pending_args: tuple = ()
        self._pending_kwargs: dict = {}

    @property
    def delay_ms(self) -> int:
        """Get current delay in milliseconds."""
        return self._delay

    @delay_ms.setter
    def delay_ms(self, value: int):
        """Set delay in milliseconds."""
        self._delay = max(0, value)

    def call(self, func: Callable, *args, **kwargs):
        """
        Schedule a debounced function call.

        If called multiple times within the delay period,
        only the last call will be executed.

        Args:
            func: Function to call after delay
            *args: Positional arguments to pass to func
            **kwargs: Keyword arguments to pass to func
        """
        self._pending_func = func
        self._pending_args = args
        self._pending_kwargs = kwargs
        self._stop_timer()
        self._timer = self._scheduler.call_later(self._delay, self._execute)

    def _stop_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _execute(self):
        """Execute the pending function."""
        self._timer = None
        func, args, kwargs = self._pending_func, self._pending_args, self._pending_kwargs
        self._clear_pending()
        if func is not None:
            func(*args, **kwargs)

    def _clear_pending(self):
        """Clear pending call state."""
        self._pending_func = None
        self._pending_args = ()
        self._pending_kwargs = {}

    def cancel(self):
        """
        Cancel any pending call.

        The pending function will not be executed.
        """
        self._stop_timer()
        self._clear_pending()

    def flush(self):
        """
        Execute pending call immediately if any.

        Useful when the result is needed before the delay expires
        (e.g. the dialog is being accepted).
        """
        if self._pending_func is None:
            return
        self._stop_timer()
        self._execute()

    def is_pending(self) -> bool:
        """
        Check if there's a pending call.

        Returns:
            True if a call is scheduled and not yet executed
        """
        return self._pending_func is not None
