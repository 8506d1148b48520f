"""
Explorer session: the glue between selection, data and views.

An address change flows through here: the cached per-function payloads
are looked up, the iteration listing for the block is loaded, the
sequencer is rebuilt for the new point, and the highlight bridge is
pointed at the graph shown for the current position.

Every load captures a ticket from the session's `SelectionToken` before
awaiting and applies its result only if the ticket is still current, so
a slow response for an abandoned selection can never overwrite a newer
one.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Optional

from ..sources.base import AnalysisApi, graph_path
from ..sources.cache import ArtifactCache
from .addressing import (
    INITIAL_POSITION,
    CurrentPoint,
    EdgePoint,
    StatementPoint,
    validate_address,
    validate_position,
)
from .errors import InvalidAddress, NotFound
from .graph import FilterOptions, filtered_blocks
from .highlight import CfgEdgeEmphasis, HighlightBridge
from .layout import CfgLayoutEngine, CfgView
from .navigation import (
    Direction,
    NavigationSequencer,
    graph_filename_for,
    jump_to_block,
    move_statement,
    step_point,
)
from .source_map import ClickCycle, SourceMap
from .storage import PersistedViewState, ViewStateKey
from .types import (
    BlockVisualizationData,
    FunctionMetadata,
    GraphMetadata,
    MirGraph,
    SourcePos,
    StmtGraphs,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionTicket:
    generation: int
    key: Hashable


class SelectionToken:
    """Generation counter identifying the one authoritative selection."""

    def __init__(self):
        self._generation = 0
        self._key: Hashable = None

    def advance(self, key: Hashable) -> SelectionTicket:
        self._generation += 1
        self._key = key
        return SelectionTicket(self._generation, key)

    def is_current(self, ticket: SelectionTicket) -> bool:
        return ticket.generation == self._generation and ticket.key == self._key

    @property
    def key(self) -> Hashable:
        return self._key


@dataclass
class PointView:
    """Everything assembled for the selected point."""
    point: CurrentPoint
    sequencer: NavigationSequencer
    graphs: Optional[StmtGraphs] = None
    graph_file: Optional[str] = None
    metadata: GraphMetadata = field(default_factory=dict)


class ExplorerSession:
    def __init__(
        self,
        api: AnalysisApi,
        view_state: PersistedViewState,
        cache: Optional[ArtifactCache] = None,
    ):
        self.api = api
        self.view_state = view_state
        self.cache = cache or ArtifactCache(api)
        self.token = SelectionToken()
        self.layout_engine = CfgLayoutEngine()
        self.bridge = HighlightBridge()
        self.emphasis = CfgEdgeEmphasis(self.bridge)

        self.functions: Dict[str, FunctionMetadata] = {}
        self.function: Optional[str] = None
        self.graph: Optional[MirGraph] = None
        self.pcg_data: Dict[int, BlockVisualizationData] = {}
        self.view: Optional[PointView] = None
        self.click_cycle: Optional[ClickCycle] = None

    # --- Function selection ---

    async def load_functions(self) -> Dict[str, FunctionMetadata]:
        self.functions = await self.api.get_functions()
        return self.functions

    def initial_function(self) -> Optional[str]:
        """The persisted function if it still exists, else the first one."""
        stored = self.view_state.get_string(ViewStateKey.SELECTED_FUNCTION)
        if stored in self.functions:
            return stored
        return next(iter(sorted(self.functions)), None)

    async def select_function(self, name: str, restore_point: bool = True) -> bool:
        """
        Load a function's payloads and select its entry point.

        Returns False if a newer selection superseded this one while loading.
        """
        ticket = self.token.advance(("function", name))
        graph = await self.cache.get_mir_graph(name)
        try:
            pcg_data = await self.cache.get_pcg_data(name)
        except NotFound:
            logger.info(f"No visualization data for {name}")
            pcg_data = {}
        if not self.token.is_current(ticket):
            logger.debug(f"Discarding stale load of {name}")
            return False

        previous = self.view_state.get_string(ViewStateKey.SELECTED_FUNCTION)
        self.function = name
        self.graph = graph
        self.pcg_data = pcg_data
        self.view_state.set_string(ViewStateKey.SELECTED_FUNCTION, name)
        if name in self.functions:
            self.click_cycle = ClickCycle(SourceMap(graph, self.functions[name]))

        point = self.view_state.get_point() if restore_point and previous == name else None
        if point is None or not self._is_valid(point):
            if not graph.nodes:
                self.view = None
                return True
            entry = graph.node_for_block(0) or graph.nodes[0]
            point = CurrentPoint(StatementPoint(entry.block, 0), INITIAL_POSITION)
        await self.select_point(point)
        return True

    # --- Filtering and layout ---

    @property
    def filter_options(self) -> FilterOptions:
        path = self.view_state.get_path()
        path_only = self.view_state.get_bool(ViewStateKey.SHOW_PATH_BLOCKS_ONLY, False)
        return FilterOptions(
            show_unwind_edges=self.view_state.get_bool(ViewStateKey.SHOW_UNWIND_EDGES, False),
            path=tuple(path) if path and path_only else None,
        )

    def filtered_blocks(self) -> List[int]:
        if self.graph is None:
            return []
        return filtered_blocks(self.graph, self.filter_options)

    def cfg_view(self) -> Optional[CfgView]:
        if self.graph is None:
            return None
        return self.layout_engine.layout(
            self.graph,
            self.filter_options,
            self.pcg_data,
            self.view_state.get_bool(ViewStateKey.SHOW_ACTIONS_IN_CODE, False),
        )

    # --- Point selection ---

    def _is_valid(self, point: CurrentPoint) -> bool:
        if self.graph is None:
            return False
        try:
            validate_address(point.address, self.graph)
            validate_position(point.address, point.position)
        except InvalidAddress as e:
            logger.debug(f"Ignoring invalid point {point}: {e.message}")
            return False
        return True

    async def select_point(self, point: CurrentPoint) -> Optional[PointView]:
        """
        Make `point` the current selection and assemble its view.

        Raises:
            InvalidAddress: If the point does not exist in the current CFG.

        Returns:
            The new view, or None if a newer selection superseded this one.
        """
        if self.graph is None or self.function is None:
            return None
        validate_address(point.address, self.graph)
        validate_position(point.address, point.position)

        function = self.function
        ticket = self.token.advance(("point", function, point.address))
        view = await self._assemble(function, point)
        if not self.token.is_current(ticket):
            logger.debug(f"Discarding stale view of {point}")
            return None

        self.view = view
        self.view_state.set_point(point)
        self.bridge.set_metadata(view.metadata)
        return view

    async def _assemble(self, function: str, point: CurrentPoint) -> PointView:
        address = point.address
        if isinstance(address, EdgePoint):
            block = self.pcg_data.get(address.from_block)
            successor = block.successor(address.to_block) if block else None
            return PointView(point, NavigationSequencer.for_successor(successor))

        try:
            iterations = await self.cache.get_iterations(function, address.block)
        except NotFound:
            iterations = []
        graphs = iterations[address.stmt] if address.stmt < len(iterations) else None
        block = self.pcg_data.get(address.block)
        stmt_data = block.statement(address.stmt) if block else None
        view = PointView(point, NavigationSequencer.for_statement(graphs, stmt_data), graphs)
        await self._attach_graph(function, view)
        return view

    async def _attach_graph(self, function: str, view: PointView) -> None:
        filename = graph_filename_for(view.graphs, view.point.position)
        if filename is None:
            view.graph_file = None
            view.metadata = {}
            return
        view.graph_file = graph_path(function, filename)
        view.metadata = await self.api.get_graph_metadata(view.graph_file)

    async def set_position(self, point: CurrentPoint) -> Optional[PointView]:
        """Change the position within the current point without reloading it."""
        if self.view is None or point.address != self.view.point.address:
            return await self.select_point(point)
        ticket = self.token.advance(("position", point))
        view = PointView(point, self.view.sequencer, self.view.graphs)
        await self._attach_graph(self.function, view)
        if not self.token.is_current(ticket):
            return None
        self.view = view
        self.view_state.set_point(point)
        self.bridge.set_metadata(view.metadata)
        return view

    # --- Keyboard and mouse ---

    async def step(self, direction: Direction) -> Optional[PointView]:
        """Action keys: step the navigator, crossing statements at the ends."""
        if self.view is None or self.graph is None:
            return None
        target = step_point(
            self.view.point, self.view.sequencer, direction, self.graph, self.filtered_blocks()
        )
        return await self.set_position(target)

    async def move(self, direction: Direction) -> Optional[PointView]:
        """Statement keys."""
        if self.view is None or self.graph is None:
            return None
        target = move_statement(self.view.point, direction, self.graph, self.filtered_blocks())
        if target == self.view.point:
            return self.view
        return await self.select_point(target)

    async def jump(self, block: int) -> Optional[PointView]:
        """Digit keys."""
        if self.graph is None:
            return None
        target = jump_to_block(block, self.graph)
        if target is None:
            return self.view
        return await self.select_point(target)

    async def click(self, position: SourcePos) -> Optional[PointView]:
        """Click in the source view at a function-relative position."""
        if self.click_cycle is None:
            return None
        target = self.click_cycle.click(position)
        if target is None:
            return self.view
        return await self.select_point(target)
