"""
TrapSelect Infrastructure Scheduling Module.

Timers and count execution independent of any GUI toolkit:
- Debouncer: restartable single-shot call over a SchedulerPort
- VirtualClockScheduler: deterministic SchedulerPort for tests
- InlineCountRunner / ThreadedCountRunner: CountRunnerPort implementations
"""
from .debouncer import Debouncer
from .virtual_clock import VirtualClockScheduler, VirtualTimerHandle
from .runners import InlineCountRunner, ThreadedCountRunner

__all__ = [
    'Debouncer',
    'VirtualClockScheduler',
    'VirtualTimerHandle',
    'InlineCountRunner',
    'ThreadedCountRunner',
]
