"""In-memory backend, for tests and throwaway sessions."""

from typing import Dict, List, Optional

from .base import KeyValueBackend, StoredEntry


class MemoryBackend(KeyValueBackend):
    def __init__(self):
        self._entries: Dict[str, StoredEntry] = {}

    def get(self, key: str) -> Optional[StoredEntry]:
        return self._entries.get(key)

    def put(self, key: str, value: str, accessed_at: float) -> None:
        self._entries[key] = StoredEntry(value, accessed_at)

    def touch(self, key: str, accessed_at: float) -> None:
        entry = self._entries.get(key)
        if entry is not None:
            self._entries[key] = StoredEntry(entry.value, accessed_at)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return [k for k in self._entries if k.startswith(prefix)]
