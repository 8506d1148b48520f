"""Unit tests for program-point addressing."""

import pytest

from pcgnav.core.addressing import (
    DEFAULT_POSITION,
    INITIAL_POSITION,
    ActionPosition,
    CurrentPoint,
    EdgePoint,
    IterationPosition,
    StatementPoint,
    format_address,
    format_point,
    format_position,
    parse_address,
    parse_point,
    parse_position,
    try_parse_point,
    validate_address,
    validate_position,
)
from pcgnav.core.errors import InvalidAddress


class TestSerialization:
    @pytest.mark.parametrize("address,text", [
        (StatementPoint(3, 2), "bb3[2]"),
        (StatementPoint(0, 0), "bb0[0]"),
        (EdgePoint(3, 5), "bb3->bb5"),
        (EdgePoint(12, 12), "bb12->bb12"),
    ])
    def test_address_round_trip(self, address, text):
        assert format_address(address) == text
        assert parse_address(text) == address

    @pytest.mark.parametrize("position,text", [
        (IterationPosition("pre_main"), "iteration:pre_main"),
        (IterationPosition("initial"), "iteration:initial"),
        (ActionPosition("pre_main", 1), "action:pre_main:1"),
        (ActionPosition("successor", 0), "action:successor:0"),
    ])
    def test_position_round_trip(self, position, text):
        assert format_position(position) == text
        assert parse_position(text) == position

    def test_point_round_trip(self):
        point = CurrentPoint(EdgePoint(1, 4), ActionPosition("successor", 2))
        text = format_point(point)
        assert text == "bb1->bb4@action:successor:2"
        assert parse_point(text) == point
        assert str(point) == text

    def test_bare_address_gets_default_position(self):
        assert parse_point("bb2[1]") == CurrentPoint(StatementPoint(2, 1), DEFAULT_POSITION)

    @pytest.mark.parametrize("text", ["bb3", "3[2]", "bb3->", "bbx[1]", "bb1[-1]", ""])
    def test_rejects_malformed_addresses(self, text):
        with pytest.raises(InvalidAddress):
            parse_address(text)

    @pytest.mark.parametrize("text", ["iteration:", "action:pre_main", "action:pre_main:x", "phase:pre_main"])
    def test_rejects_malformed_positions(self, text):
        with pytest.raises(InvalidAddress):
            parse_position(text)

    @pytest.mark.parametrize("position", [
        IterationPosition(" spaced phase "),
        IterationPosition("phase:with:colons"),
        ActionPosition("a:b", 3),
        ActionPosition(" post_main", 0),
    ])
    def test_unusual_phase_names_round_trip(self, position):
        assert parse_position(format_position(position)) == position
        point = CurrentPoint(StatementPoint(1, 0), position)
        assert parse_point(format_point(point)) == point

    def test_empty_phase_names_rejected(self):
        with pytest.raises(InvalidAddress):
            IterationPosition("")
        with pytest.raises(InvalidAddress):
            ActionPosition("", 0)

    def test_lenient_parse(self):
        assert try_parse_point(None) is None
        assert try_parse_point("garbage") is None
        assert try_parse_point("bb0[0]@iteration:initial") == CurrentPoint(StatementPoint(0, 0), INITIAL_POSITION)


class TestInvariants:
    def test_negative_components_rejected(self):
        with pytest.raises(InvalidAddress):
            StatementPoint(-1, 0)
        with pytest.raises(InvalidAddress):
            EdgePoint(0, -2)
        with pytest.raises(InvalidAddress):
            ActionPosition("pre_main", -1)

    def test_terminator_index_is_valid(self, mir_graph):
        # bb0 has two statements; index 2 is its terminator
        validate_address(StatementPoint(0, 2), mir_graph)

    def test_index_past_terminator_is_invalid(self, mir_graph):
        with pytest.raises(InvalidAddress):
            validate_address(StatementPoint(0, 3), mir_graph)

    def test_unknown_block_is_invalid(self, mir_graph):
        with pytest.raises(InvalidAddress):
            validate_address(StatementPoint(9, 0), mir_graph)

    def test_edges_must_exist(self, mir_graph):
        validate_address(EdgePoint(0, 1), mir_graph)
        with pytest.raises(InvalidAddress):
            validate_address(EdgePoint(1, 0), mir_graph)

    def test_edges_only_take_successor_actions(self):
        validate_position(EdgePoint(0, 1), ActionPosition("successor", 0))
        with pytest.raises(InvalidAddress):
            validate_position(EdgePoint(0, 1), IterationPosition("post_main"))
        with pytest.raises(InvalidAddress):
            validate_position(EdgePoint(0, 1), ActionPosition("pre_main", 0))

    def test_statements_reject_successor_actions(self):
        validate_position(StatementPoint(0, 0), INITIAL_POSITION)
        with pytest.raises(InvalidAddress):
            validate_position(StatementPoint(0, 0), ActionPosition("successor", 0))
