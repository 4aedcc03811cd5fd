# -*- coding: utf-8 -*-
"""
Suppression Flag for TrapSelect

Re-entrant, depth-counted flag used to mute event handling while state is
being loaded or bulk-edited (e.g. restoring a saved selection must not
trigger one recount per restored term).

Key Features:
- Nested acquisition: the flag clears when the outermost holder exits
- Context manager support for safe acquisition
- Thread-safe operations with RLock
- Counters for monitoring muted events

Usage:
    from trapselect.infrastructure.state import SuppressionFlag

    loading = SuppressionFlag("loading_selection")

    with loading.acquire():
        restore_terms()          # handlers check loading.is_set and return

Author: TrapSelect Team
"""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from ..logging import get_app_logger

logger = get_app_logger()


class FlagState(Enum):
    """Flag states for monitoring."""
    CLEAR = "clear"
    ACQUIRED = "acquired"


@dataclass
class FlagStats:
    """Statistics for flag usage."""
    total_acquisitions: int = 0
    suppressed_events: int = 0
    longest_hold_ms: float = 0.0


class SuppressionFlag:
    """
    Thread-safe, re-entrant suppression flag.

    Example:
        >>> flag = SuppressionFlag("loading")
        >>> with flag.acquire():
        ...     with flag.acquire():
        ...         assert flag.depth == 2
        ...     assert flag.is_set
        >>> flag.is_set
        False
    """

    def __init__(self, name: str, auto_log: bool = True):
        """
        Initialize suppression flag.

        Args:
            name: Human-readable name for logging
            auto_log: Whether to log state changes (default: True)
        """
        self.name = name
        self.auto_log = auto_log
        self._depth = 0
        self._timestamp = 0.0
        self._lock = threading.RLock()
        self.stats = FlagStats()

    def _current_time_ms(self) -> float:
        return time.monotonic() * 1000

    @property
    def is_set(self) -> bool:
        with self._lock:
            return self._depth > 0

    @property
    def depth(self) -> int:
        with self._lock:
            return self._depth

    @property
    def state(self) -> FlagState:
        return FlagState.ACQUIRED if self.is_set else FlagState.CLEAR

    def note_suppressed(self) -> None:
        """Record that an event was muted by this flag."""
        with self._lock:
            self.stats.suppressed_events += 1

    @contextmanager
    def acquire(self):
        """
        Context manager for safe flag acquisition.

        Increments the depth on enter and decrements it on exit, even if an
        exception occurs.
        """
        with self._lock:
            self._depth += 1
            if self._depth == 1:
                self._timestamp = self._current_time_ms()
                self.stats.total_acquisitions += 1
                if self.auto_log:
                    logger.debug(f"SuppressionFlag '{self.name}' SET")
        try:
            yield self
        finally:
            with self._lock:
                self._depth -= 1
                if self._depth == 0:
                    elapsed = self._current_time_ms() - self._timestamp
                    if elapsed > self.stats.longest_hold_ms:
                        self.stats.longest_hold_ms = elapsed
                    if self.auto_log:
                        logger.debug(f"SuppressionFlag '{self.name}' CLEARED (held {elapsed:.0f}ms)")

    def __repr__(self) -> str:
        return f"SuppressionFlag('{self.name}', depth={self._depth})"
