"""
Data-source selection.

Fallback chain, each step attempted exactly once:
1. The live endpoint, probed by fetching the function index.
2. `data.zip` next to the data root; cached durably on success.
3. The previously cached archive.

If all three fail, `DataSourceUnavailable` is raised.
"""

import logging
from typing import List, Optional

from ..config import ARCHIVE_NAME, DATA_DIR
from ..core.errors import DataSourceUnavailable, PcgNavError
from ..core.result import Err, Ok, Result
from ..core.storage import VersionedStorage
from .archive import ArchiveDataSource
from .archive_cache import cache_archive, load_cached_archive
from .base import DataSource
from .live import LiveDataSource, normalize_root

logger = logging.getLogger(__name__)


def archive_url(datasrc: Optional[str]) -> str:
    return f"{normalize_root(datasrc)}{ARCHIVE_NAME}"


async def try_live(datasrc: Optional[str]) -> Result[DataSource, str]:
    live = LiveDataSource(datasrc)
    try:
        await live.fetch_json(f"{DATA_DIR}/functions.json")
    except PcgNavError as e:
        return Err(f"live endpoint: {e.message}")
    return Ok(live)


async def try_remote_archive(datasrc: Optional[str], storage: Optional[VersionedStorage]) -> Result[DataSource, str]:
    url = archive_url(datasrc)
    try:
        archive = await ArchiveDataSource.from_url(url)
    except PcgNavError as e:
        return Err(f"{url}: {e.message}")
    if storage is not None:
        cache_archive(storage, archive)
    return Ok(archive)


def try_cached_archive(storage: Optional[VersionedStorage]) -> Result[DataSource, str]:
    if storage is None:
        return Err("cached archive: no durable storage")
    archive = load_cached_archive(storage)
    if archive is None:
        return Err("cached archive: none available")
    return Ok(archive)


async def select_data_source(
    datasrc: Optional[str] = None,
    storage: Optional[VersionedStorage] = None,
) -> DataSource:
    """
    Pick the first data source in the fallback chain that works.

    Raises:
        DataSourceUnavailable: If every step failed.
    """
    attempts: List[str] = []

    result = await try_live(datasrc)
    if result.is_ok():
        return result.unwrap()
    attempts.append(result.error)
    logger.info(f"Failed to load {DATA_DIR}/functions.json, trying {ARCHIVE_NAME}")

    result = await try_remote_archive(datasrc, storage)
    if result.is_ok():
        return result.unwrap()
    attempts.append(result.error)
    logger.info(f"Failed to load {ARCHIVE_NAME}, trying cached archive")

    result = try_cached_archive(storage)
    if result.is_ok():
        return result.unwrap()
    attempts.append(result.error)

    raise DataSourceUnavailable(attempts)
