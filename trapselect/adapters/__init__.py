"""
TrapSelect Adapters.

Concrete implementations of the core ports:
- memory_store: In-memory FileStorePort and list-based EpisodeOraclePort
- qt: PyQt5 timer scheduler and background count runner (imported explicitly)
"""
from .memory_store import InMemoryFileStore, ListEpisodeOracle

__all__ = [
    'InMemoryFileStore',
    'ListEpisodeOracle',
]
