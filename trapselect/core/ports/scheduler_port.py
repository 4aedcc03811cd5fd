"""
Scheduler Port Interfaces.

Timer and background-execution abstractions used by the count scheduler.
Qt widgets provide QTimer / QThreadPool based adapters; tests use a virtual
clock and inline execution.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable


class TimerHandle(ABC):
    """A pending single-shot timer."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. No-op if it already ran."""
        raise NotImplementedError

    @property
    @abstractmethod
    def active(self) -> bool:
        """True while the callback is still due."""
        raise NotImplementedError


class SchedulerPort(ABC):
    """Runs callbacks after a delay on the owner thread."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """
        Schedule a single-shot callback.

        Args:
            delay_ms: Delay in milliseconds
            callback: Called on the owner thread once the delay elapsed

        Returns:
            TimerHandle that can cancel the call
        """
        raise NotImplementedError


class CountRunnerPort(ABC):
    """Runs a count call and reports its outcome on the owner thread."""

    @abstractmethod
    def run(
        self,
        func: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_failure: Callable[[BaseException], None],
    ) -> None:
        """
        Execute ``func``; deliver its result to ``on_success`` or its
        exception to ``on_failure``. Both callbacks run on the owner thread.
        """
        raise NotImplementedError
