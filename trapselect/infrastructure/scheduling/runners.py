# -*- coding: utf-8 -*-
"""
Count Runners for TrapSelect

Execute the (possibly slow) count call either inline or on a worker thread.
Uses ThreadPoolExecutor for background execution; outcomes are handed back
to the owner thread through a ``post`` callable, never delivered from the
worker directly.

Thread Safety Rules:
1. Only the count function runs on the worker; it receives an immutable
   CompiledPredicate snapshot
2. on_success / on_failure always run on the owner thread
3. Without a ``post`` callable, outcomes queue up until the owner thread
   calls drain()

Usage:
    from trapselect.infrastructure.scheduling import ThreadedCountRunner
    runner = ThreadedCountRunner()
    runner.run(lambda: store.count_matching(predicate), show_count, show_unknown)
    ...
    runner.drain()   # on the owner thread, e.g. from an idle timer
"""

import queue
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from ...core.ports.scheduler_port import CountRunnerPort
from ..logging import get_logger

logger = get_logger('TrapSelect.Count.Runner')

Outcome = Callable[[], None]


class InlineCountRunner(CountRunnerPort):
    """Runs the count synchronously on the calling thread."""

    def run(self, func, on_success, on_failure) -> None:
        try:
            result = func()
        except Exception as e:
            on_failure(e)
            return
        on_success(result)


class ThreadedCountRunner(CountRunnerPort):
    """
    Runs counts on a small thread pool.

    Args:
        max_workers: Worker threads (a single worker keeps counts ordered)
        post: Callable that schedules a zero-argument function on the
            owner thread. Defaults to an internal queue drained by drain().
    """

    def __init__(self, max_workers: int = 1, post: Optional[Callable[[Outcome], None]] = None):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='trapselect-count')
        self._completed: "queue.Queue[Outcome]" = queue.Queue()
        self._post = post or self._completed.put
        self._futures: List[Future] = []

    def run(self, func, on_success, on_failure) -> None:
        def _work():
            try:
                result = func()
            except Exception as e:
                logger.debug(f"Background count failed: {e}")
                self._post(lambda: on_failure(e))
                return
            self._post(lambda: on_success(result))

        self._futures = [f for f in self._futures if not f.done()]
        self._futures.append(self._executor.submit(_work))

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until every submitted count has finished (results still need draining)."""
        for future in list(self._futures):
            future.result(timeout=timeout)

    def drain(self) -> int:
        """
        Deliver queued outcomes on the calling (owner) thread.

        Returns:
            Number of outcomes delivered
        """
        delivered = 0
        while True:
            try:
                outcome = self._completed.get_nowait()
            except queue.Empty:
                return delivered
            outcome()
            delivered += 1

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
