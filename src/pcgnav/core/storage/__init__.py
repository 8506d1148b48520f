"""
Storage for persisted view state.

Provides pluggable key/value backends:
- SQLiteBackend: Durable local persistence
- MemoryBackend: Ephemeral storage for testing
"""

from .base import KeyValueBackend, StoredEntry
from .memory import MemoryBackend
from .sqlite import SQLiteBackend
from .versioned import VersionedStorage
from .view_state import PersistedViewState, ViewStateKey

__all__ = [
    "KeyValueBackend",
    "StoredEntry",
    "MemoryBackend",
    "SQLiteBackend",
    "VersionedStorage",
    "PersistedViewState",
    "ViewStateKey",
]
