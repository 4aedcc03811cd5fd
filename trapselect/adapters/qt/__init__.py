"""
TrapSelect Qt adapters (PyQt5).

- QtTimerScheduler: QTimer-backed SchedulerPort
- QtCountRunner: QThreadPool-backed CountRunnerPort
"""
from .scheduler import QtTimerHandle, QtTimerScheduler, QtCountRunner

__all__ = [
    'QtTimerHandle',
    'QtTimerScheduler',
    'QtCountRunner',
]
