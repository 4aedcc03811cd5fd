"""
TrapSelect Core Ports Module.

Abstract interfaces (ports) for dependency inversion.
Defines contracts that adapters must implement.

Ports:
- FileStorePort: Catalog store counting and fetching matching files
- EpisodeOraclePort: Episode membership of catalog rows
- SchedulerPort / TimerHandle: Single-shot timers on the owner thread
- CountRunnerPort: Synchronous or background execution of count calls
"""
from .store_port import FileStorePort
from .episode_port import EpisodeOraclePort
from .scheduler_port import (
    SchedulerPort,
    TimerHandle,
    CountRunnerPort,
)

__all__ = [
    'FileStorePort',
    'EpisodeOraclePort',
    'SchedulerPort',
    'TimerHandle',
    'CountRunnerPort',
]
