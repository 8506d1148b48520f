"""
Live data source: artifacts served by the analysis output server.

The root is an HTTP(S) URL, or a local directory when it has no URL
scheme (the output tree written straight to disk). Every failure to
obtain an artifact, including a body that is not JSON, surfaces as
`NotFound`.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

import requests

from ..config import HTTP_TIMEOUT_SECONDS
from ..core.errors import NotFound
from .base import DataSource

logger = logging.getLogger(__name__)


def normalize_root(datasrc: Optional[str]) -> str:
    """Ensure a non-empty root ends with exactly one `/`."""
    if not datasrc:
        return ""
    return datasrc if datasrc.endswith("/") else f"{datasrc}/"


def is_url(root: str) -> bool:
    return urlparse(root).scheme in ("http", "https")


class LiveDataSource(DataSource):
    name = "live endpoint"

    def __init__(self, datasrc: Optional[str] = None, session: Optional[requests.Session] = None):
        self.root = normalize_root(datasrc)
        self._session = session or requests.Session()

    def resolve(self, path: str) -> str:
        return f"{self.root}{path}"

    def _get_remote(self, url: str) -> str:
        try:
            resp = self._session.get(url, timeout=HTTP_TIMEOUT_SECONDS)
        except requests.RequestException as e:
            raise NotFound(url, str(e)) from e
        if not resp.ok:
            raise NotFound(url, f"HTTP {resp.status_code}")
        return resp.text

    def _get_local(self, location: str) -> str:
        try:
            return Path(location).read_text(encoding="utf-8")
        except OSError as e:
            raise NotFound(location, e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise NotFound(location, "not UTF-8") from e

    def _get(self, path: str) -> str:
        location = self.resolve(path)
        if is_url(location):
            return self._get_remote(location)
        return self._get_local(location)

    async def fetch_text(self, path: str) -> str:
        logger.debug(f"GET {self.resolve(path)}")
        return await asyncio.to_thread(self._get, path)

    async def fetch_json(self, path: str) -> Any:
        text = await self.fetch_text(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise NotFound(self.resolve(path), f"not JSON: {e.msg}") from e
