"""
Abstract key/value backend for the persisted view state.

Backends store raw strings together with the time of last access; the
versioning and time-to-live rules live above them in `VersionedStorage`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class StoredEntry:
    value: str
    accessed_at: float


class KeyValueBackend(ABC):
    """
    Interface for durable key/value stores.

    Implementations must be safe to reopen: entries written by one
    instance are visible to the next instance over the same location.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[StoredEntry]:
        """Load an entry, or None if absent."""

    @abstractmethod
    def put(self, key: str, value: str, accessed_at: float) -> None:
        """Insert or replace an entry."""

    @abstractmethod
    def touch(self, key: str, accessed_at: float) -> None:
        """Update the access time of an existing entry."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove an entry; absent keys are ignored."""

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """All stored keys starting with `prefix`."""

    def delete_many(self, keys: List[str]) -> int:
        for key in keys:
            self.delete(key)
        return len(keys)

    def close(self) -> None:
        """Release any held resources."""
