"""
Program-point and navigator-position addressing.

A program point is either a statement inside a block (the terminator is
addressed as index `len(stmts)`) or a CFG edge between two blocks. Within
a point, the navigator position is either a whole iteration phase or a
single action of a phase.

Both are closed unions of frozen dataclasses. Every value has a lossless
string form used for persistence:

    StatementPoint(3, 2)            bb3[2]
    EdgePoint(3, 5)                 bb3->bb5
    IterationPosition("pre_main")   iteration:pre_main
    ActionPosition("pre_main", 1)   action:pre_main:1
    CurrentPoint(a, p)              <address>@<position>
"""

import re
from dataclasses import dataclass
from typing import Optional, Union, assert_never

from .errors import InvalidAddress
from .types import MirGraph, MirNode

SUCCESSOR_PHASE = "successor"

_STATEMENT_RE = re.compile(r"^bb(\d+)\[(\d+)\]$")
_EDGE_RE = re.compile(r"^bb(\d+)->bb(\d+)$")


@dataclass(frozen=True)
class StatementPoint:
    """A statement (or terminator) of a basic block."""
    block: int
    stmt: int

    def __post_init__(self):
        if self.block < 0 or self.stmt < 0:
            raise InvalidAddress(f"Negative component in bb{self.block}[{self.stmt}]")

    def is_terminator_of(self, node: MirNode) -> bool:
        return self.stmt == len(node.stmts)


@dataclass(frozen=True)
class EdgePoint:
    """A directed CFG edge, i.e. the transition between two blocks."""
    from_block: int
    to_block: int

    def __post_init__(self):
        if self.from_block < 0 or self.to_block < 0:
            raise InvalidAddress(f"Negative block in bb{self.from_block}->bb{self.to_block}")


ProgramPointAddress = Union[StatementPoint, EdgePoint]


@dataclass(frozen=True)
class IterationPosition:
    """A whole fixpoint iteration phase, named by the analysis output."""
    phase: str

    def __post_init__(self):
        if not self.phase:
            raise InvalidAddress("Empty phase name")


@dataclass(frozen=True)
class ActionPosition:
    """The action at `index` within the action list of `phase`."""
    phase: str
    index: int

    def __post_init__(self):
        if not self.phase:
            raise InvalidAddress("Empty phase name")
        if self.index < 0:
            raise InvalidAddress(f"Negative action index {self.index}")


NavigatorPosition = Union[IterationPosition, ActionPosition]

# Entry into a statement by boundary crossing or function change.
INITIAL_POSITION = IterationPosition("initial")
# Entry by clicking a statement or moving with the statement keys.
DEFAULT_POSITION = IterationPosition("post_main")


@dataclass(frozen=True)
class CurrentPoint:
    """The navigator's selection: where we are and what we are looking at."""
    address: ProgramPointAddress
    position: NavigatorPosition = DEFAULT_POSITION

    def with_position(self, position: NavigatorPosition) -> "CurrentPoint":
        return CurrentPoint(self.address, position)

    def __str__(self) -> str:
        return format_point(self)


def validate_address(address: ProgramPointAddress, graph: MirGraph) -> None:
    """
    Check an address against the CFG it is meant to index.

    Raises:
        InvalidAddress: If a block is missing, a statement index resolves to
            neither a statement nor the terminator, or an edge does not exist.
    """
    if isinstance(address, StatementPoint):
        node = graph.node_for_block(address.block)
        if node is None:
            raise InvalidAddress(f"No block bb{address.block}")
        if node.statement_at(address.stmt) is None:
            raise InvalidAddress(
                f"bb{address.block} has {len(node.stmts)} statements; "
                f"index {address.stmt} is out of range"
            )
    elif isinstance(address, EdgePoint):
        if not graph.has_successor_edge(address.from_block, address.to_block):
            raise InvalidAddress(f"No edge bb{address.from_block}->bb{address.to_block}")
    else:
        assert_never(address)


def validate_position(address: ProgramPointAddress, position: NavigatorPosition) -> None:
    """
    Check that a position is meaningful for the given address.

    Raises:
        InvalidAddress: For an edge with anything other than a successor action.
    """
    if isinstance(address, EdgePoint):
        if not (isinstance(position, ActionPosition) and position.phase == SUCCESSOR_PHASE):
            raise InvalidAddress(f"Edge points only take successor actions, got {position}")
    elif isinstance(address, StatementPoint):
        if isinstance(position, ActionPosition) and position.phase == SUCCESSOR_PHASE:
            raise InvalidAddress("Successor actions only exist on edges")
    else:
        assert_never(address)


def format_address(address: ProgramPointAddress) -> str:
    if isinstance(address, StatementPoint):
        return f"bb{address.block}[{address.stmt}]"
    elif isinstance(address, EdgePoint):
        return f"bb{address.from_block}->bb{address.to_block}"
    else:
        assert_never(address)


def parse_address(text: str) -> ProgramPointAddress:
    """
    Parse `bbN[S]` or `bbN->bbM`.

    Raises:
        InvalidAddress: On anything else.
    """
    text = text.strip()
    match = _STATEMENT_RE.match(text)
    if match:
        return StatementPoint(int(match.group(1)), int(match.group(2)))
    match = _EDGE_RE.match(text)
    if match:
        return EdgePoint(int(match.group(1)), int(match.group(2)))
    raise InvalidAddress(f"Unrecognized program point: {text!r}")


def format_position(position: NavigatorPosition) -> str:
    if isinstance(position, IterationPosition):
        return f"iteration:{position.phase}"
    elif isinstance(position, ActionPosition):
        return f"action:{position.phase}:{position.index}"
    else:
        assert_never(position)


def parse_position(text: str) -> NavigatorPosition:
    """
    Parse `iteration:<phase>` or `action:<phase>:<index>`.

    Raises:
        InvalidAddress: On anything else.
    """
    kind, _, rest = text.partition(":")
    if kind == "iteration" and rest:
        return IterationPosition(rest)
    if kind == "action":
        phase, _, index = rest.rpartition(":")
        if phase and index.isdigit():
            return ActionPosition(phase, int(index))
    raise InvalidAddress(f"Unrecognized navigator position: {text!r}")


def format_point(point: CurrentPoint) -> str:
    return f"{format_address(point.address)}@{format_position(point.position)}"


def parse_point(text: str) -> CurrentPoint:
    """
    Parse `<address>@<position>`; a bare address gets the default position.

    Raises:
        InvalidAddress: If either half does not parse.
    """
    address_text, sep, position_text = text.partition("@")
    address = parse_address(address_text)
    if not sep:
        return CurrentPoint(address, DEFAULT_POSITION)
    return CurrentPoint(address, parse_position(position_text))


def try_parse_point(text: Optional[str]) -> Optional[CurrentPoint]:
    """Lenient variant of `parse_point` for values read back from storage."""
    if not text:
        return None
    try:
        return parse_point(text)
    except InvalidAddress:
        return None
