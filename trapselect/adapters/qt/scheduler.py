"""
Qt Scheduler Adapters.

QTimer-based SchedulerPort and QThreadPool-based CountRunnerPort for the
selection dialog. Count results travel back to the GUI thread through a
queued pyqtSignal.
"""
from typing import Any, Callable, Optional

from PyQt5.QtCore import QObject, QRunnable, QThreadPool, QTimer, pyqtSignal

from ...core.ports.scheduler_port import CountRunnerPort, SchedulerPort, TimerHandle
from ...infrastructure.logging import get_logger

logger = get_logger('TrapSelect.Adapters.Qt')


class QtTimerHandle(TimerHandle):
    """Single-shot QTimer wrapper."""

    def __init__(self, timer: QTimer):
        self._timer = timer

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def _fired(self) -> None:
        if self._timer is not None:
            self._timer.deleteLater()
            self._timer = None


class QtTimerScheduler(SchedulerPort):
    """
    SchedulerPort running callbacks from the Qt event loop.

    Args:
        parent: Optional parent QObject owning the timers
    """

    def __init__(self, parent: Optional[QObject] = None):
        self._parent = parent

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        handle = QtTimerHandle(timer)

        def _on_timeout():
            handle._fired()
            callback()

        timer.timeout.connect(_on_timeout)
        timer.start(max(0, int(delay_ms)))
        return handle


class _CountTask(QRunnable):
    """Runs one count call on a pool thread and reports through the runner's signal."""

    def __init__(self, runner: 'QtCountRunner', func, on_success, on_failure):
        super().__init__()
        self._runner = runner
        self._func = func
        self._on_success = on_success
        self._on_failure = on_failure

    def run(self):
        try:
            result = self._func()
        except Exception as e:
            self._runner.finished.emit((self._on_failure, e))
            return
        self._runner.finished.emit((self._on_success, result))


class QtCountRunner(QObject):
    """
    CountRunnerPort on QThreadPool.

    Create it on the GUI thread: the ``finished`` signal is then delivered
    there through a queued connection, and so are on_success / on_failure.
    """

    finished = pyqtSignal(object)

    def __init__(self, pool: Optional[QThreadPool] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        self.finished.connect(self._deliver)

    def run(self, func, on_success, on_failure) -> None:
        task = _CountTask(self, func, on_success, on_failure)
        self._pool.start(task)

    def _deliver(self, outcome: Any) -> None:
        callback, value = outcome
        callback(value)

    def wait_for_done(self, msecs: int = -1) -> bool:
        """Block until every pool task finished (results are still delivered via the event loop)."""
        return self._pool.waitForDone(msecs)


CountRunnerPort.register(QtCountRunner)
