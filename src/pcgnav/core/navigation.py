"""
Phase/action sequencing and statement stepping.

The sequencer flattens one program point's iteration phases and actions
into a single ordered list of navigation items and steps through it.
Stepping past either end of the list is reported as a boundary crossing,
which the caller resolves by moving to the neighbouring statement of the
filtered block list.

Order of items for a statement:
1. Iteration phases reported before the first canonical phase, in
   encounter order.
2. For each canonical phase: its visible actions (original indices kept),
   then its own phase marker if the analysis reported one.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import List, Optional, Sequence, Union, assert_never

from .addressing import (
    DEFAULT_POSITION,
    INITIAL_POSITION,
    SUCCESSOR_PHASE,
    ActionPosition,
    CurrentPoint,
    EdgePoint,
    IterationPosition,
    NavigatorPosition,
    StatementPoint,
)
from .types import (
    EVAL_PHASES,
    MirGraph,
    PcgAction,
    StmtGraphs,
    StmtVisualizationData,
    SuccessorVisualizationData,
)

logger = logging.getLogger(__name__)


class Direction(StrEnum):
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True)
class PhaseItem:
    """An iteration phase; `index` is its position in `at_phase`."""
    index: int
    name: str
    filename: str

    @property
    def position(self) -> NavigatorPosition:
        return IterationPosition(self.name)


@dataclass(frozen=True)
class ActionItem:
    """One visible action; `index` is its index in the unfiltered list."""
    phase: str
    index: int
    action: PcgAction

    @property
    def position(self) -> NavigatorPosition:
        return ActionPosition(self.phase, self.index)


NavigationItem = Union[PhaseItem, ActionItem]


@dataclass(frozen=True)
class Moved:
    position: NavigatorPosition


@dataclass(frozen=True)
class BoundaryCrossing:
    direction: Direction


StepOutcome = Union[Moved, BoundaryCrossing]


def build_statement_items(
    graphs: Optional[StmtGraphs],
    data: Optional[StmtVisualizationData],
) -> List[NavigationItem]:
    """Interleave iteration phases and actions for a statement."""
    items: List[NavigationItem] = []
    at_phase = graphs.at_phase if graphs else []

    for idx, phase in enumerate(at_phase):
        if phase.phase in EVAL_PHASES:
            break
        if not phase.phase:
            continue
        items.append(PhaseItem(idx, phase.phase, phase.filename))

    for phase in EVAL_PHASES:
        actions = data.actions.for_phase(phase) if data else []
        for idx, action in enumerate(actions):
            if not action.is_hidden:
                items.append(ActionItem(phase.value, idx, action))
        phase_idx = graphs.phase_index(phase) if graphs else -1
        if phase_idx >= 0:
            items.append(PhaseItem(phase_idx, phase.value, at_phase[phase_idx].filename))

    return items


def build_successor_items(data: Optional[SuccessorVisualizationData]) -> List[NavigationItem]:
    """Actions along a CFG edge, in order."""
    if data is None:
        return []
    return [
        ActionItem(SUCCESSOR_PHASE, idx, action)
        for idx, action in enumerate(data.actions)
        if not action.is_hidden
    ]


class NavigationSequencer:
    """
    Ordered, steppable list of navigation items for one program point.

    Rebuilt whenever the selected point changes; holds no selection itself.
    """

    def __init__(self, items: Sequence[NavigationItem]):
        self._items: List[NavigationItem] = list(items)

    @classmethod
    def for_statement(
        cls,
        graphs: Optional[StmtGraphs],
        data: Optional[StmtVisualizationData],
    ) -> "NavigationSequencer":
        return cls(build_statement_items(graphs, data))

    @classmethod
    def for_successor(cls, data: Optional[SuccessorVisualizationData]) -> "NavigationSequencer":
        return cls(build_successor_items(data))

    @property
    def items(self) -> List[NavigationItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def positions(self) -> List[NavigatorPosition]:
        return [item.position for item in self._items]

    def index_of(self, position: Optional[NavigatorPosition]) -> int:
        """Index of the item at `position`, or -1 if nothing there is selectable."""
        if position is None:
            return -1
        for idx, item in enumerate(self._items):
            if item.position == position:
                return idx
        return -1

    def item_at(self, position: Optional[NavigatorPosition]) -> Optional[NavigationItem]:
        idx = self.index_of(position)
        return self._items[idx] if idx >= 0 else None

    def first_position(self) -> Optional[NavigatorPosition]:
        return self._items[0].position if self._items else None

    def step(
        self,
        direction: Direction,
        position: Optional[NavigatorPosition],
        *,
        has_block_context: bool,
    ) -> StepOutcome:
        """
        Move one item forward or backward from `position`.

        With no current item, forward selects the first item and backward
        the last. Stepping off either end is a boundary crossing when the
        caller has a filtered block list to cross into; otherwise the
        sequence wraps around.
        """
        count = len(self._items)
        if count == 0:
            if has_block_context:
                return BoundaryCrossing(direction)
            return Moved(position if position is not None else INITIAL_POSITION)

        current = self.index_of(position)
        if current == -1:
            target = 0 if direction == Direction.FORWARD else count - 1
            return Moved(self._items[target].position)

        if direction == Direction.FORWARD:
            target = current + 1
        elif direction == Direction.BACKWARD:
            target = current - 1
        else:
            assert_never(direction)

        if 0 <= target < count:
            return Moved(self._items[target].position)
        if has_block_context:
            return BoundaryCrossing(direction)
        return Moved(self._items[target % count].position)


def _neighbour_block(blocks: Sequence[int], block: int, direction: Direction) -> Optional[int]:
    if block not in blocks:
        return None
    idx = blocks.index(block)
    offset = 1 if direction == Direction.FORWARD else -1
    return blocks[(idx + offset) % len(blocks)]


def next_statement(
    address: StatementPoint,
    direction: Direction,
    graph: MirGraph,
    filtered_blocks: Sequence[int],
) -> StatementPoint:
    """
    The statement before or after `address`, crossing into neighbouring
    blocks of `filtered_blocks` (wrapping at either end).

    Forward from a terminator lands on statement 0 of the next block;
    backward from statement 0 lands on the terminator of the previous one.
    A block outside `filtered_blocks` has no neighbours, so crossing out of
    it leaves the address unchanged.
    """
    node = graph.node_for_block(address.block)
    if node is None or not filtered_blocks:
        return address

    if direction == Direction.FORWARD:
        if address.stmt < len(node.stmts):
            return StatementPoint(address.block, address.stmt + 1)
        next_block = _neighbour_block(filtered_blocks, address.block, direction)
        return address if next_block is None else StatementPoint(next_block, 0)

    if address.stmt > 0:
        return StatementPoint(address.block, address.stmt - 1)
    prev_block = _neighbour_block(filtered_blocks, address.block, direction)
    if prev_block is None:
        return address
    prev_node = graph.node_for_block(prev_block)
    return StatementPoint(prev_block, len(prev_node.stmts) if prev_node else 0)


def cross_boundary(
    point: CurrentPoint,
    direction: Direction,
    graph: MirGraph,
    filtered_blocks: Sequence[int],
) -> CurrentPoint:
    """Resolve a boundary crossing into the neighbouring statement."""
    if isinstance(point.address, EdgePoint):
        return point
    target = next_statement(point.address, direction, graph, filtered_blocks)
    logger.debug(f"Crossing {direction} from {point.address} to {target}")
    return CurrentPoint(target, INITIAL_POSITION)


def has_block_context(point: CurrentPoint, filtered_blocks: Sequence[int]) -> bool:
    return isinstance(point.address, StatementPoint) and point.address.block in filtered_blocks


def step_point(
    point: CurrentPoint,
    sequencer: NavigationSequencer,
    direction: Direction,
    graph: MirGraph,
    filtered_blocks: Sequence[int],
) -> CurrentPoint:
    """Step the navigator once, crossing into a neighbouring statement if needed."""
    outcome = sequencer.step(
        direction,
        point.position,
        has_block_context=has_block_context(point, filtered_blocks),
    )
    if isinstance(outcome, Moved):
        return point.with_position(outcome.position)
    elif isinstance(outcome, BoundaryCrossing):
        return cross_boundary(point, outcome.direction, graph, filtered_blocks)
    else:
        assert_never(outcome)


def move_statement(
    point: CurrentPoint,
    direction: Direction,
    graph: MirGraph,
    filtered_blocks: Sequence[int],
) -> CurrentPoint:
    """Statement keys: move one statement and show its final state. No-op on edges."""
    if isinstance(point.address, EdgePoint):
        return point
    target = next_statement(point.address, direction, graph, filtered_blocks)
    if target == point.address:
        return point
    return CurrentPoint(target, DEFAULT_POSITION)


def jump_to_block(block: int, graph: MirGraph) -> Optional[CurrentPoint]:
    """First statement of `block`, or None if the CFG has no such block."""
    if graph.node_for_block(block) is None:
        return None
    return CurrentPoint(StatementPoint(block, 0), DEFAULT_POSITION)


def graph_filename_for(
    graphs: Optional[StmtGraphs],
    position: Optional[NavigatorPosition],
) -> Optional[str]:
    """
    Filename of the graph rendered for `position` within a statement.

    Successor actions and phases the analysis never reported have no graph.
    """
    if graphs is None or position is None:
        return None
    if isinstance(position, ActionPosition):
        if position.phase == SUCCESSOR_PHASE:
            return None
        filenames = graphs.actions.for_phase(position.phase)
        if 0 <= position.index < len(filenames):
            return filenames[position.index]
        return None
    elif isinstance(position, IterationPosition):
        for phase in graphs.at_phase:
            if phase.phase == position.phase:
                return phase.filename
        return None
    else:
        assert_never(position)
