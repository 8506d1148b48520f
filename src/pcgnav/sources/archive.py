"""
Archive data source: the same artifact tree, read from an in-memory zip.

Used when no live endpoint is reachable: a `data.zip` fetched next to
the data root, a previously cached copy, or a file supplied by the user.
"""

import asyncio
import base64
import binascii
import io
import json
import logging
import zipfile
import zlib
from pathlib import Path
from typing import Any

import requests

from ..config import HTTP_TIMEOUT_SECONDS
from ..core.errors import MalformedArchiveEntry, NotFound
from .base import DataSource
from .live import is_url

logger = logging.getLogger(__name__)

# Raised by zipfile when entry data is truncated or corrupt.
ZIP_DATA_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError)


class ArchiveDataSource(DataSource):
    name = "archive"

    def __init__(self, data: bytes):
        """
        Open and check an archive.

        Raises:
            MalformedArchiveEntry: If the bytes are not a zip, or an entry
                fails to decompress or its CRC does not match.
        """
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(data))
            bad_entry = self._zip.testzip()
        except ZIP_DATA_ERRORS as e:
            raise MalformedArchiveEntry(f"Unreadable zip archive: {e}") from e
        if bad_entry is not None:
            raise MalformedArchiveEntry(f"Corrupt archive entry {bad_entry}")
        self._data = data
        self._names = set(self._zip.namelist())

    @classmethod
    def from_bytes(cls, data: bytes) -> "ArchiveDataSource":
        return cls(data)

    @classmethod
    def from_file(cls, path: Path) -> "ArchiveDataSource":
        return cls(Path(path).read_bytes())

    @classmethod
    def from_base64(cls, encoded: str) -> "ArchiveDataSource":
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedArchiveEntry(f"Archive is not valid base64: {e}") from e
        return cls(data)

    @classmethod
    async def from_url(cls, url: str) -> "ArchiveDataSource":
        """
        Download and open a remote archive (or read a local one).

        Raises:
            NotFound: If the download fails.
            MalformedArchiveEntry: If the body is not a zip.
        """
        def download() -> bytes:
            if not is_url(url):
                try:
                    return Path(url).read_bytes()
                except OSError as e:
                    raise NotFound(url, e.strerror or str(e)) from e
            try:
                resp = requests.get(url, timeout=HTTP_TIMEOUT_SECONDS)
            except requests.RequestException as e:
                raise NotFound(url, str(e)) from e
            if not resp.ok:
                raise NotFound(url, f"HTTP {resp.status_code}")
            return resp.content

        logger.debug(f"Fetching archive from {url}")
        return cls(await asyncio.to_thread(download))

    def to_base64(self) -> str:
        return base64.b64encode(self._data).decode("ascii")

    def has(self, path: str) -> bool:
        return path in self._names

    def _read(self, path: str) -> bytes:
        if path not in self._names:
            raise NotFound(path, "not in archive")
        try:
            return self._zip.read(path)
        except ZIP_DATA_ERRORS as e:
            raise MalformedArchiveEntry(f"Corrupt archive entry {path}: {e}") from e

    async def fetch_text(self, path: str) -> str:
        try:
            return self._read(path).decode("utf-8")
        except UnicodeDecodeError as e:
            raise NotFound(path, "not UTF-8") from e

    async def fetch_json(self, path: str) -> Any:
        try:
            return json.loads(self._read(path))
        except json.JSONDecodeError as e:
            raise NotFound(path, f"not JSON: {e.msg}") from e
        except UnicodeDecodeError as e:
            raise NotFound(path, "not UTF-8") from e
