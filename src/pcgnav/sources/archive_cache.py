"""Durable copy of the last archive that was loaded from a URL."""

import logging
from typing import Optional

from ..config import CACHED_ARCHIVE_KEY
from ..core.errors import MalformedArchiveEntry
from ..core.storage import VersionedStorage
from .archive import ArchiveDataSource

logger = logging.getLogger(__name__)


def cache_archive(storage: VersionedStorage, archive: ArchiveDataSource) -> None:
    storage.set_item(CACHED_ARCHIVE_KEY, archive.to_base64())
    logger.info("Cached archive for offline use")


def load_cached_archive(storage: VersionedStorage) -> Optional[ArchiveDataSource]:
    """The cached archive, or None. A corrupt entry is logged and evicted."""
    encoded = storage.get_item(CACHED_ARCHIVE_KEY)
    if encoded is None:
        return None
    try:
        return ArchiveDataSource.from_base64(encoded)
    except MalformedArchiveEntry as e:
        logger.error(f"Failed to load cached archive: {e.message}")
        storage.remove_item(CACHED_ARCHIVE_KEY)
        return None


def clear_cached_archive(storage: VersionedStorage) -> None:
    storage.remove_item(CACHED_ARCHIVE_KEY)
