"""
TrapSelect Core Services.

- CountScheduler: debounced, non-reentrant counting of matching files
- SelectionSession: the selection dialog's boundary over all models
"""
from .count_scheduler import (
    CountScheduler,
    CountState,
    CountStatus,
    DEFAULT_DEBOUNCE_MS,
)
from .selection_service import (
    QuickSelection,
    SelectionSession,
)

__all__ = [
    'CountScheduler',
    'CountState',
    'CountStatus',
    'DEFAULT_DEBOUNCE_MS',
    'QuickSelection',
    'SelectionSession',
]
