"""
Versioned key/value store with a time-to-live from last access.

Every key is written under a `<version>:` namespace. Opening the store
deletes all keys outside the current namespace, so bumping the version
invalidates older state wholesale. An entry not read or written for
longer than the TTL reads as absent and is deleted on that read.
"""

import logging
import time
from typing import Callable, Optional

from ...config import DEFAULT_TTL_HOURS, STORAGE_VERSION
from .base import KeyValueBackend

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class VersionedStorage:
    def __init__(
        self,
        backend: KeyValueBackend,
        version: str = STORAGE_VERSION,
        ttl_seconds: float = DEFAULT_TTL_HOURS * 3600.0,
        clock: Clock = time.time,
    ):
        self.backend = backend
        self.version = version
        self.prefix = f"{version}:"
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self.purge_other_versions()

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def purge_other_versions(self) -> int:
        stale = [k for k in self.backend.keys() if not k.startswith(self.prefix)]
        if stale:
            logger.info(f"Dropping {len(stale)} persisted entries from older versions")
        return self.backend.delete_many(stale)

    def get_item(self, key: str) -> Optional[str]:
        full_key = self._key(key)
        entry = self.backend.get(full_key)
        if entry is None:
            return None
        now = self._clock()
        if now - entry.accessed_at > self.ttl_seconds:
            logger.debug(f"Persisted entry {key} expired")
            self.backend.delete(full_key)
            return None
        self.backend.touch(full_key, now)
        return entry.value

    def set_item(self, key: str, value: str) -> None:
        self.backend.put(self._key(key), value, self._clock())

    def remove_item(self, key: str) -> None:
        self.backend.delete(self._key(key))

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.get_item(key)
        if value is None:
            return default
        return value == "true"

    def set_bool(self, key: str, value: bool) -> None:
        self.set_item(key, "true" if value else "false")

    def get_number(self, key: str, default: float) -> float:
        value = self.get_item(key)
        if value is None:
            return default
        try:
            number = float(value)
        except ValueError:
            return default
        return int(number) if number.is_integer() else number

    def set_number(self, key: str, value: float) -> None:
        self.set_item(key, str(value))

    def keys(self) -> list[str]:
        """Unprefixed keys in the current namespace, expired or not."""
        return [k[len(self.prefix):] for k in self.backend.keys(self.prefix)]

    def clear(self) -> int:
        """Remove every key in the current namespace."""
        return self.backend.delete_many(self.backend.keys(self.prefix))
