"""
TrapSelect Infrastructure State Module.

Flags coordinating event handling during bulk state changes.
"""
from .suppression_flag import (
    FlagState,
    FlagStats,
    SuppressionFlag,
)

__all__ = [
    'FlagState',
    'FlagStats',
    'SuppressionFlag',
]
