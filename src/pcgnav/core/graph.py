"""
CFG graph backed by rustworkx, plus the filtering pipeline.

It manages:
- The bimap between string node ids and rustworkx integer indices.
- Reachability from the entry block.
- Filtering in a fixed order: unwind removal, path restriction,
  reachability from block 0, dangling-edge removal.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

import rustworkx as rx

from .types import MirEdge, MirGraph, MirNode

logger = logging.getLogger(__name__)

ENTRY_BLOCK = 0
UNWIND_LABEL = "unwind"


@dataclass(frozen=True)
class FilterOptions:
    """
    Attributes:
        show_unwind_edges: Keep `resume` blocks and `unwind` edges.
        path: Restrict to these blocks (and edges between them), if set.
    """

    show_unwind_edges: bool = False
    path: Optional[Tuple[int, ...]] = None


class CfgGraph:
    """
    Directed CFG over `MirNode` payloads.

    Features:
    - O(1) node lookup via id-to-index bimap
    - Parallel edges kept (a switch can target one block twice)
    """

    def __init__(self):
        self._graph = rx.PyDiGraph(multigraph=True)
        self._id_to_idx: Dict[str, int] = {}
        self._idx_to_id: Dict[int, str] = {}

    @classmethod
    def from_parts(cls, nodes: Sequence[MirNode], edges: Sequence[MirEdge]) -> "CfgGraph":
        graph = cls()
        for node in nodes:
            graph.add_node(node)
        for edge in edges:
            graph.add_edge(edge)
        return graph

    def add_node(self, node: MirNode) -> None:
        """Add or replace a block."""
        if node.id in self._id_to_idx:
            self._graph[self._id_to_idx[node.id]] = node
            return
        idx = self._graph.add_node(node)
        self._id_to_idx[node.id] = idx
        self._idx_to_id[idx] = node.id

    def add_edge(self, edge: MirEdge) -> None:
        """Add a directed edge; edges with an unknown endpoint are ignored."""
        if edge.source not in self._id_to_idx or edge.target not in self._id_to_idx:
            return
        self._graph.add_edge(self._id_to_idx[edge.source], self._id_to_idx[edge.target], edge)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._id_to_idx

    def successors(self, node_id: str) -> List[str]:
        idx = self._id_to_idx.get(node_id)
        if idx is None:
            return []
        return [self._idx_to_id[i] for i in self._graph.successor_indices(idx)]

    def reachable_from(self, node_id: str) -> Set[str]:
        """All node ids reachable from `node_id`, itself included."""
        idx = self._id_to_idx.get(node_id)
        if idx is None:
            return set()
        reached = {node_id}
        reached.update(self._idx_to_id[i] for i in rx.descendants(self._graph, idx))
        return reached

    @property
    def node_count(self) -> int:
        return self._graph.num_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.num_edges()


def filter_nodes_and_edges(
    graph: MirGraph,
    options: FilterOptions = FilterOptions(),
) -> Tuple[List[MirNode], List[MirEdge]]:
    """
    Apply the display filters to a CFG.

    Steps, in order:
    1. Unless unwind edges are shown, drop `resume` blocks and `unwind` edges.
    2. With a path restriction, keep path blocks and edges whose endpoints
       (looked up in the unfiltered node list) are both on the path.
    3. Keep only blocks reachable from block 0 over the surviving edges;
       nothing survives if block 0 was dropped.
    4. Drop edges with a dropped endpoint.

    Node and edge order follow the payload.
    """
    nodes = list(graph.nodes)
    edges = list(graph.edges)

    if not options.show_unwind_edges:
        nodes = [n for n in nodes if not n.is_resume]
        edges = [e for e in edges if e.label != UNWIND_LABEL]

    if options.path is not None:
        on_path = set(options.path)
        block_of = {n.id: n.block for n in graph.nodes}
        nodes = [n for n in nodes if n.block in on_path]
        edges = [
            e for e in edges
            if block_of.get(e.source) in on_path and block_of.get(e.target) in on_path
        ]

    cfg = CfgGraph.from_parts(nodes, edges)
    entry = next((n for n in nodes if n.block == ENTRY_BLOCK), None)
    reachable = cfg.reachable_from(entry.id) if entry else set()
    nodes = [n for n in nodes if n.id in reachable]

    edges = [e for e in edges if e.source in reachable and e.target in reachable]

    logger.debug(
        f"Filtered CFG to {len(nodes)}/{len(graph.nodes)} blocks, "
        f"{len(edges)}/{len(graph.edges)} edges"
    )
    return nodes, edges


def filtered_blocks(graph: MirGraph, options: FilterOptions = FilterOptions()) -> List[int]:
    """Block numbers surviving the filters, in payload order."""
    nodes, _ = filter_nodes_and_edges(graph, options)
    return [n.block for n in nodes]
