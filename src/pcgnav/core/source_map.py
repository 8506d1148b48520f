"""
Mapping between source positions and program points.

Source positions arriving from a code view are relative to the start of
the selected function; statement spans in the CFG payload are absolute.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .addressing import DEFAULT_POSITION, CurrentPoint, StatementPoint
from .types import FunctionMetadata, MirGraph, SourcePos, Span


def to_absolute(position: SourcePos, function: FunctionMetadata) -> SourcePos:
    return SourcePos(
        line=position.line + function.start.line,
        column=position.column + function.start.column,
    )


def relative_span(span: Span, function: FunctionMetadata) -> Span:
    """Shift an absolute statement span into function-relative coordinates."""
    start = function.start
    return Span(
        low=SourcePos(line=span.low.line - start.line, column=span.low.column - start.column),
        high=SourcePos(line=span.high.line - start.line, column=span.high.column - start.column),
    )


def span_contains(span: Span, pos: SourcePos) -> bool:
    """Half-open containment: `low <= pos < high`."""
    after_low = pos.line > span.low.line or (
        pos.line == span.low.line and pos.column >= span.low.column
    )
    before_high = pos.line < span.high.line or (
        pos.line == span.high.line and pos.column < span.high.column
    )
    return after_low and before_high


class SourceMap:
    """Statement lookup by source position for one function's CFG."""

    def __init__(self, graph: MirGraph, function: FunctionMetadata):
        self.graph = graph
        self.function = function

    def statements_at(self, position: SourcePos) -> List[StatementPoint]:
        """
        Statements overlapping a function-relative position.

        Only single-line spans are considered. Results follow declaration
        order: blocks in payload order, statements, then the terminator.
        """
        absolute = to_absolute(position, self.function)
        found: List[StatementPoint] = []
        for node in self.graph.nodes:
            candidates = list(enumerate(node.stmts)) + [(len(node.stmts), node.terminator)]
            for idx, stmt in candidates:
                if stmt.span.is_single_line and span_contains(stmt.span, absolute):
                    found.append(StatementPoint(node.block, idx))
        return found

    def span_of(self, address: StatementPoint) -> Optional[Span]:
        """Function-relative span of a statement, for highlighting in code."""
        node = self.graph.node_for_block(address.block)
        if node is None:
            return None
        stmt = node.statement_at(address.stmt)
        if stmt is None:
            return None
        return relative_span(stmt.span, self.function)


@dataclass
class ClickCycle:
    """
    Cycles through overlapping statements on repeated clicks.

    A click at a new position selects the first overlapping statement;
    clicking the same position again advances to the next one, wrapping.
    """

    source_map: SourceMap
    position: Optional[SourcePos] = None
    index: int = 0

    def click(self, position: SourcePos) -> Optional[CurrentPoint]:
        overlapping = self.source_map.statements_at(position)
        if not overlapping:
            return None
        if self.position == position:
            self.index = (self.index + 1) % len(overlapping)
        else:
            self.position = position
            self.index = 0
        return CurrentPoint(overlapping[self.index], DEFAULT_POSITION)

    def indicator(self, current: CurrentPoint) -> Optional[Tuple[int, int]]:
        """`(1-based index, total)` of the current statement among overlaps, if ambiguous."""
        if self.position is None or not isinstance(current.address, StatementPoint):
            return None
        overlapping = self.source_map.statements_at(self.position)
        if len(overlapping) <= 1 or current.address not in overlapping:
            return None
        return overlapping.index(current.address) + 1, len(overlapping)
