"""
Data sources and the artifact path convention.

A DataSource resolves artifact paths (relative to the data root) to JSON
values or text. `AnalysisApi` knows where the analysis writes each
artifact and parses the payloads into typed models.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from ..config import DATA_DIR
from ..core.errors import NotFound
from ..core.types import (
    BlockVisualizationData,
    FunctionMetadata,
    GraphMetadata,
    MirGraph,
    StmtGraphs,
    parse_block_ref,
    parse_graph_metadata,
    parse_pcg_function_data,
    to_block_ref,
)

logger = logging.getLogger(__name__)


class DataSource(ABC):
    """Async access to the artifact tree. Both methods raise `NotFound`."""

    name: str = "data source"

    @abstractmethod
    async def fetch_json(self, path: str) -> Any:
        ...

    @abstractmethod
    async def fetch_text(self, path: str) -> str:
        ...


def function_dir(function: str) -> str:
    return f"{DATA_DIR}/{function}"


def graph_path(function: str, filename: str) -> str:
    return f"{function_dir(function)}/{filename}"


def path_data_path(function: str, path: Sequence[int], stmt: Optional[int] = None,
                   terminator: Optional[int] = None) -> str:
    """
    Path of the per-path analysis result.

    Exactly one of `stmt` or `terminator` (the block transitioned into)
    names the final component.
    """
    if (stmt is None) == (terminator is None):
        raise ValueError("Exactly one of stmt or terminator must be given")
    last = f"stmt_{stmt}" if stmt is not None else f"bb{terminator}_transition"
    blocks = "_".join(to_block_ref(b) for b in path)
    return f"{function_dir(function)}/path_{blocks}_{last}.json"


class AnalysisApi:
    """Typed access to the analysis artifacts over any DataSource."""

    def __init__(self, source: DataSource):
        self.source = source

    async def get_functions(self) -> Dict[str, FunctionMetadata]:
        payload = await self.source.fetch_json(f"{DATA_DIR}/functions.json")
        return {name: FunctionMetadata.model_validate(meta) for name, meta in payload.items()}

    async def get_mir_graph(self, function: str) -> MirGraph:
        payload = await self.source.fetch_json(f"{function_dir(function)}/mir.json")
        return MirGraph.model_validate(payload)

    async def get_pcg_function_data(self, function: str) -> Dict[int, BlockVisualizationData]:
        payload = await self.source.fetch_json(f"{function_dir(function)}/pcg_data.json")
        return parse_pcg_function_data(payload)

    async def get_iterations(self, function: str, block: int) -> List[StmtGraphs]:
        """
        Per-statement iteration graphs of a block.

        Reads `block_<N>_iterations.json`, falling back to the combined
        `all_iterations.json`. Missing in both raises `NotFound`.
        """
        try:
            payload = await self.source.fetch_json(
                f"{function_dir(function)}/block_{block}_iterations.json"
            )
        except NotFound:
            combined = await self.source.fetch_json(f"{function_dir(function)}/all_iterations.json")
            payload = self._block_from_combined(combined, block, function)
        return [StmtGraphs.model_validate(stmt) for stmt in payload]

    @staticmethod
    def _block_from_combined(combined: Any, block: int, function: str) -> list:
        if isinstance(combined, dict):
            for ref, stmts in combined.items():
                if parse_block_ref(ref) == block:
                    return stmts
        raise NotFound(f"{function_dir(function)}/all_iterations.json", f"no entry for bb{block}")

    async def get_paths(self, function: str) -> List[List[int]]:
        try:
            payload = await self.source.fetch_json(f"{function_dir(function)}/paths.json")
        except NotFound:
            return []
        return [[int(b) for b in path] for path in payload]

    async def get_assertions(self, function: str) -> List[Any]:
        try:
            return await self.source.fetch_json(f"{function_dir(function)}/assertions.json")
        except NotFound:
            return []

    async def get_path_data(self, function: str, path: Sequence[int], stmt: Optional[int] = None,
                            terminator: Optional[int] = None) -> Optional[Any]:
        try:
            return await self.source.fetch_json(path_data_path(function, path, stmt, terminator))
        except NotFound:
            return None

    async def fetch_dot_file(self, path: str) -> str:
        return await self.source.fetch_text(path)

    async def get_graph_metadata(self, path: str) -> GraphMetadata:
        """Branch-choice metadata of a graph file, from its `.json` sidecar."""
        stem = path.rsplit(".", 1)[0] if "." in path.rsplit("/", 1)[-1] else path
        try:
            payload = await self.source.fetch_json(f"{stem}.json")
        except NotFound:
            return {}
        return parse_graph_metadata(payload)
