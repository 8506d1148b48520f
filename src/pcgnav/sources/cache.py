"""
Per-session artifact cache with request coalescing.

The per-function payloads (CFG and visualization data) and the per-block
iteration listings are fetched at most once per session. Concurrent
requests for the same artifact share one in-flight task. A failed fetch
leaves no entry, so a later request tries again; every request waiting
on the failed task sees the failure.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from ..core.types import BlockVisualizationData, MirGraph, StmtGraphs
from .base import AnalysisApi

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]

MIR_GRAPH = "mir"
PCG_DATA = "pcg_data"
ITERATIONS = "iterations"


class ArtifactCache:
    def __init__(self, api: AnalysisApi):
        self.api = api
        self._values: Dict[CacheKey, Any] = {}
        self._in_flight: Dict[CacheKey, asyncio.Task] = {}
        self.fetch_count = 0

    async def _get(self, key: CacheKey, fetch: Callable[[], Awaitable[Any]]) -> Any:
        if key in self._values:
            return self._values[key]

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, fetch))
            self._in_flight[key] = task
        return await asyncio.shield(task)

    async def _run(self, key: CacheKey, fetch: Callable[[], Awaitable[Any]]) -> Any:
        self.fetch_count += 1
        logger.debug(f"Fetching {key[0]} for {key[1]}")
        try:
            value = await fetch()
        finally:
            self._in_flight.pop(key, None)
        self._values[key] = value
        return value

    async def get_mir_graph(self, function: str) -> MirGraph:
        return await self._get((MIR_GRAPH, function), lambda: self.api.get_mir_graph(function))

    async def get_pcg_data(self, function: str) -> Dict[int, BlockVisualizationData]:
        return await self._get((PCG_DATA, function), lambda: self.api.get_pcg_function_data(function))

    async def get_iterations(self, function: str, block: int) -> List[StmtGraphs]:
        return await self._get(
            (ITERATIONS, f"{function}/bb{block}"),
            lambda: self.api.get_iterations(function, block),
        )

    def peek(self, artifact: str, function: str) -> Optional[Any]:
        return self._values.get((artifact, function))

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._values
