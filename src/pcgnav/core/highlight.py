"""
Hover correlation between an action graph and the CFG.

Elements of a rendered action graph may carry branch-choice metadata
(`{from: "bbN", chosen: ["bbM", ...]}`). Hovering such an element
highlights the corresponding CFG edges. The two graphs are laid out
independently; the bridge only exchanges `(from_block, to_block)` keys.

The bridge owns at most one highlighted element at a time. The hovered
element's stroke is mutated in place and the originals are remembered
so they can be restored on hover-exit, on the next hover, or on teardown.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from .addressing import EdgePoint, ProgramPointAddress
from .layout import RenderEdge
from .types import BranchChoice, GraphMetadata, MirGraph, parse_block_ref

logger = logging.getLogger(__name__)

HighlightKey = Tuple[int, int]
HighlightListener = Callable[[FrozenSet[HighlightKey]], None]

HOVER_STROKE = "#ff6b00"
HOVER_STROKE_WIDTH = 3.0

SELECTED_EDGE_STROKE = "green"
HIGHLIGHTED_EDGE_STROKE = "#ff6b00"
DEFAULT_EDGE_STROKE = "black"
HIGHLIGHTED_EDGE_WIDTH = 4
DEFAULT_EDGE_WIDTH = 2


@dataclass
class StyledElement:
    """A hoverable element of the rendered action graph."""
    id: str
    stroke: str = "black"
    stroke_width: float = 1.0


def highlight_keys(choices: Iterable[BranchChoice]) -> FrozenSet[HighlightKey]:
    """One key per `(from, chosen[i])` pair."""
    keys = set()
    for choice in choices:
        source = parse_block_ref(choice.from_block)
        for target in choice.chosen:
            keys.add((source, parse_block_ref(target)))
    return frozenset(keys)


class HighlightBridge:
    """
    Publishes the CFG edge keys related to the hovered action-graph element.

    Subscribers register with `subscribe()` and receive every published
    key set, including the empty set when the highlight is cleared.
    """

    def __init__(self, metadata: Optional[GraphMetadata] = None):
        self._metadata: GraphMetadata = metadata or {}
        self._listeners: List[HighlightListener] = []
        self._owner: Optional[StyledElement] = None
        self._saved_style: Optional[Tuple[str, float]] = None
        self._keys: FrozenSet[HighlightKey] = frozenset()

    @property
    def keys(self) -> FrozenSet[HighlightKey]:
        return self._keys

    @property
    def owner(self) -> Optional[StyledElement]:
        return self._owner

    def set_metadata(self, metadata: Optional[GraphMetadata]) -> None:
        """Switch to a newly loaded action graph."""
        self.teardown()
        self._metadata = metadata or {}

    def subscribe(self, listener: HighlightListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def hover_enter(self, element: StyledElement) -> FrozenSet[HighlightKey]:
        self._release()
        choices = self._metadata.get(element.id)
        if not choices:
            self._publish(frozenset())
            return self._keys

        self._owner = element
        self._saved_style = (element.stroke, element.stroke_width)
        element.stroke = HOVER_STROKE
        element.stroke_width = HOVER_STROKE_WIDTH
        self._publish(highlight_keys(choices))
        return self._keys

    def hover_exit(self, element: StyledElement) -> None:
        """Clear the highlight if `element` owns it; stray exits are ignored."""
        if self._owner is not element:
            return
        self._release()
        self._publish(frozenset())

    def teardown(self) -> None:
        had_highlight = self._owner is not None or bool(self._keys)
        self._release()
        if had_highlight:
            self._publish(frozenset())

    def _release(self) -> None:
        if self._owner is not None and self._saved_style is not None:
            self._owner.stroke, self._owner.stroke_width = self._saved_style
        self._owner = None
        self._saved_style = None

    def _publish(self, keys: FrozenSet[HighlightKey]) -> None:
        self._keys = keys
        logger.debug(f"Publishing {len(keys)} highlighted CFG edges")
        for listener in list(self._listeners):
            listener(keys)


@dataclass(frozen=True)
class EdgeStyle:
    stroke: str
    width: int


class CfgEdgeEmphasis:
    """CFG-side subscriber turning published keys into per-edge strokes."""

    def __init__(self, bridge: HighlightBridge):
        self.highlighted: FrozenSet[HighlightKey] = bridge.keys
        self._unsubscribe = bridge.subscribe(self._on_keys)

    def _on_keys(self, keys: FrozenSet[HighlightKey]) -> None:
        self.highlighted = keys

    def close(self) -> None:
        self._unsubscribe()

    def style_for(
        self,
        edge: RenderEdge,
        graph: MirGraph,
        selected: Optional[ProgramPointAddress] = None,
    ) -> EdgeStyle:
        source = graph.node_by_id(edge.source)
        target = graph.node_by_id(edge.target)
        key = (source.block, target.block) if source and target else None

        highlighted = key is not None and key in self.highlighted
        is_selected = (
            key is not None
            and isinstance(selected, EdgePoint)
            and key == (selected.from_block, selected.to_block)
        )
        width = HIGHLIGHTED_EDGE_WIDTH if highlighted else DEFAULT_EDGE_WIDTH
        if is_selected:
            return EdgeStyle(SELECTED_EDGE_STROKE, width)
        if highlighted:
            return EdgeStyle(HIGHLIGHTED_EDGE_STROKE, width)
        return EdgeStyle(DEFAULT_EDGE_STROKE, width)

    def styles(
        self,
        edges: Iterable[RenderEdge],
        graph: MirGraph,
        selected: Optional[ProgramPointAddress] = None,
    ) -> Dict[str, EdgeStyle]:
        return {edge.id: self.style_for(edge, graph, selected) for edge in edges}
