"""
Layered top-to-bottom layout of the filtered CFG.

Blocks are drawn as statement tables of fixed width and an estimated
height. Placement is delegated to Graphviz `dot` (rankdir TB) and read
back from its `plain` output. Without a `dot` executable the view is
still built, with no coordinates and the reason in `layout_error`.

The engine memoizes on the filtered node/edge set and the node heights,
so moving the selection never triggers a relayout.
"""

import logging
import math
import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import graphviz

from ..config import (
    INLINE_ACTION_LINE_HEIGHT,
    INLINE_ACTION_MARGIN,
    MARGIN_Y,
    NODE_SEPARATION,
    NODE_WIDTH,
    RANK_SEPARATION,
    TABLE_BORDER,
    TABLE_ROW_HEIGHT,
)
from .errors import LayoutUnavailable
from .formatting import describe_action
from .graph import FilterOptions, filter_nodes_and_edges
from .types import EVAL_PHASES, BlockVisualizationData, MirEdge, MirGraph, MirNode

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72.0


@dataclass(frozen=True)
class SizedNode:
    id: str
    width: float
    height: float


@dataclass(frozen=True)
class PlacedNode:
    """A block with its centroid in layout coordinates (None when unplaced)."""
    node: MirNode
    x: Optional[float]
    y: Optional[float]
    width: float
    height: float


@dataclass(frozen=True)
class RenderEdge:
    id: str
    source: str
    target: str
    label: str


@dataclass
class LayoutResult:
    """
    Attributes:
        positions: Node id -> centroid (x, y).
        height: Overall drawing height; None when not finite (empty graph).
    """

    positions: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    width: float = 0.0
    height: Optional[float] = None


@dataclass
class CfgView:
    """Everything a renderer needs for the current filter and toggles."""
    nodes: List[PlacedNode]
    edges: List[RenderEdge]
    height: Optional[float]
    layout_error: Optional[str] = None

    @property
    def blocks(self) -> List[int]:
        return [p.node.block for p in self.nodes]


def inline_actions(block_data: Optional[BlockVisualizationData], stmt_index: int) -> List[str]:
    """Action lines shown under a statement row when actions are inlined."""
    if block_data is None:
        return []
    stmt = block_data.statement(stmt_index)
    if stmt is None:
        return []
    return [describe_action(a) for phase in EVAL_PHASES for a in stmt.actions.for_phase(phase)]


def estimate_table_height(
    node: MirNode,
    block_data: Optional[BlockVisualizationData] = None,
    show_actions_inline: bool = False,
) -> float:
    """
    Estimated rendered height of a block's statement table.

    One header row, one row per statement, one terminator row, and, with
    actions inlined, one line per action under each row that has any.
    """
    height = (len(node.stmts) + 2) * TABLE_ROW_HEIGHT + TABLE_BORDER
    if show_actions_inline:
        for idx in range(len(node.stmts) + 1):
            count = len(inline_actions(block_data, idx))
            if count:
                height += count * INLINE_ACTION_LINE_HEIGHT + INLINE_ACTION_MARGIN
    return float(height)


def _inches(points: float) -> str:
    return f"{points / POINTS_PER_INCH:.4f}"


def build_digraph(nodes: Sequence[SizedNode], edges: Sequence[Tuple[str, str]]) -> graphviz.Digraph:
    """Top-to-bottom digraph of fixed-size, unlabelled boxes."""
    dot = graphviz.Digraph(
        "cfg",
        graph_attr={
            "rankdir": "TB",
            "ranksep": _inches(RANK_SEPARATION),
            "nodesep": _inches(NODE_SEPARATION),
        },
        node_attr={"shape": "box", "fixedsize": "true", "label": ""},
    )
    for node in nodes:
        dot.node(node.id, width=_inches(node.width), height=_inches(node.height))
    for source, target in edges:
        dot.edge(source, target)
    return dot


def parse_plain(text: str) -> LayoutResult:
    """
    Read centroids and extent from Graphviz `plain` output.

    Plain output is in inches with the origin at the bottom left; results
    are flipped to a top-left origin in points and padded by MARGIN_Y
    above and below.
    """
    graph_height: Optional[float] = None
    graph_width = 0.0
    raw: Dict[str, Tuple[float, float]] = {}

    for line in text.splitlines():
        parts = shlex.split(line)
        if not parts:
            continue
        if parts[0] == "graph":
            graph_width = float(parts[2])
            graph_height = float(parts[3])
        elif parts[0] == "node":
            raw[parts[1]] = (float(parts[2]), float(parts[3]))
        elif parts[0] == "stop":
            break

    if graph_height is None:
        return LayoutResult()

    positions = {
        nid: (x * POINTS_PER_INCH, (graph_height - y) * POINTS_PER_INCH + MARGIN_Y)
        for nid, (x, y) in raw.items()
    }
    height = graph_height * POINTS_PER_INCH + 2 * MARGIN_Y
    return LayoutResult(
        positions=positions,
        width=graph_width * POINTS_PER_INCH,
        height=height if math.isfinite(height) else None,
    )


def layered_layout(nodes: Sequence[SizedNode], edges: Sequence[Tuple[str, str]]) -> LayoutResult:
    """
    Lay out sized nodes top to bottom with Graphviz `dot`.

    Edges with an unknown endpoint are ignored. Returns centroids and the
    overall extent; the height is None when it is not finite.

    Raises:
        LayoutUnavailable: `dot` is not installed or failed.
    """
    if not nodes:
        return LayoutResult()

    known = {n.id for n in nodes}
    dot = build_digraph(nodes, [(s, t) for s, t in edges if s in known and t in known])
    try:
        plain = dot.pipe(format="plain", encoding="utf-8")
    except graphviz.ExecutableNotFound as e:
        raise LayoutUnavailable("Graphviz 'dot' executable not found; install Graphviz") from e
    except graphviz.CalledProcessError as e:
        raise LayoutUnavailable(f"Graphviz failed: {e}") from e
    return parse_plain(plain)



def to_render_edges(edges: Sequence[MirEdge]) -> List[RenderEdge]:
    """Edges with ids unique per payload position."""
    return [
        RenderEdge(id=f"{e.source}-{e.target}-{idx}", source=e.source, target=e.target, label=e.label)
        for idx, e in enumerate(edges)
    ]


class CfgLayoutEngine:
    """
    Filters and lays out a CFG, memoizing on the layout inputs.

    The cache key is the filtered node ids, edges and node heights, so
    a change of selection alone always reuses the previous result.
    """

    def __init__(self):
        self._signature: Optional[tuple] = None
        self._result: Optional[LayoutResult] = None
        self._error: Optional[str] = None
        self.layout_count = 0

    def layout(
        self,
        graph: MirGraph,
        options: FilterOptions = FilterOptions(),
        pcg_data: Optional[Dict[int, BlockVisualizationData]] = None,
        show_actions_inline: bool = False,
    ) -> CfgView:
        nodes, edges = filter_nodes_and_edges(graph, options)
        sized = [
            SizedNode(
                id=n.id,
                width=NODE_WIDTH,
                height=estimate_table_height(
                    n, (pcg_data or {}).get(n.block), show_actions_inline
                ),
            )
            for n in nodes
        ]
        pairs = [(e.source, e.target) for e in edges]

        signature = (tuple((s.id, s.height) for s in sized), tuple(pairs))
        if signature != self._signature or self._result is None:
            logger.debug(f"Laying out {len(sized)} blocks")
            try:
                self._result = layered_layout(sized, pairs)
                self._error = None
            except LayoutUnavailable as e:
                logger.warning(f"CFG layout unavailable: {e.message}")
                self._result = LayoutResult()
                self._error = e.message
            self._signature = signature
            self.layout_count += 1

        result = self._result
        placed = []
        for node, size in zip(nodes, sized):
            x, y = result.positions.get(node.id, (None, None))
            placed.append(PlacedNode(node, x, y, size.width, size.height))
        return CfgView(
            nodes=placed,
            edges=to_render_edges(edges),
            height=result.height,
            layout_error=self._error,
        )
