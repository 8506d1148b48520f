"""Unit tests for source position lookup."""

import pytest

from pcgnav.core.addressing import DEFAULT_POSITION, CurrentPoint, StatementPoint
from pcgnav.core.source_map import ClickCycle, SourceMap, relative_span, span_contains
from pcgnav.core.types import MirGraph, SourcePos, Span


def _pos(line, column):
    return SourcePos(line=line, column=column)


@pytest.fixture
def source_map(mir_graph, function_meta):
    return SourceMap(mir_graph, function_meta)


class TestSpans:
    def test_half_open(self):
        span = Span(low=_pos(3, 4), high=_pos(3, 8))
        assert span_contains(span, _pos(3, 4))
        assert span_contains(span, _pos(3, 7))
        assert not span_contains(span, _pos(3, 8))
        assert not span_contains(span, _pos(2, 5))

    def test_relative_span(self, function_meta):
        span = Span(low=_pos(11, 4), high=_pos(11, 20))
        assert relative_span(span, function_meta) == Span(low=_pos(1, 4), high=_pos(1, 20))


class TestStatementsAt:
    def test_overlaps_in_declaration_order(self, source_map):
        assert source_map.statements_at(_pos(1, 10)) == [StatementPoint(0, 0), StatementPoint(0, 1)]

    def test_single_match(self, source_map):
        assert source_map.statements_at(_pos(1, 5)) == [StatementPoint(0, 0)]

    def test_terminator_matches(self, source_map):
        assert source_map.statements_at(_pos(5, 16)) == [StatementPoint(3, 1)]

    def test_no_match(self, source_map):
        assert source_map.statements_at(_pos(1, 20)) == []

    def test_multi_line_spans_ignored(self, mir_payload, function_meta):
        mir_payload["nodes"][1]["stmts"][0]["span"]["high"]["line"] = 14
        source_map = SourceMap(MirGraph.model_validate(mir_payload), function_meta)
        assert source_map.statements_at(_pos(3, 5)) == []

    def test_span_of(self, source_map):
        assert source_map.span_of(StatementPoint(0, 2)) == Span(low=_pos(2, 4), high=_pos(2, 30))
        assert source_map.span_of(StatementPoint(0, 3)) is None
        assert source_map.span_of(StatementPoint(8, 0)) is None


class TestClickCycle:
    def test_repeated_clicks_cycle(self, source_map):
        cycle = ClickCycle(source_map)
        pos = _pos(1, 10)
        assert cycle.click(pos) == CurrentPoint(StatementPoint(0, 0), DEFAULT_POSITION)
        assert cycle.click(pos) == CurrentPoint(StatementPoint(0, 1), DEFAULT_POSITION)
        assert cycle.click(pos) == CurrentPoint(StatementPoint(0, 0), DEFAULT_POSITION)

    def test_new_position_restarts(self, source_map):
        cycle = ClickCycle(source_map)
        cycle.click(_pos(1, 10))
        cycle.click(_pos(1, 10))
        assert cycle.click(_pos(1, 5)).address == StatementPoint(0, 0)
        assert cycle.index == 0

    def test_click_on_nothing(self, source_map):
        cycle = ClickCycle(source_map)
        assert cycle.click(_pos(40, 0)) is None
        assert cycle.position is None

    def test_indicator(self, source_map):
        cycle = ClickCycle(source_map)
        pos = _pos(1, 10)
        cycle.click(pos)
        current = cycle.click(pos)
        assert cycle.indicator(current) == (2, 2)
        assert cycle.indicator(CurrentPoint(StatementPoint(3, 0))) is None

    def test_no_indicator_for_unambiguous(self, source_map):
        cycle = ClickCycle(source_map)
        current = cycle.click(_pos(1, 5))
        assert cycle.indicator(current) is None
