"""Unit tests for CFG layout."""

import shutil
from unittest.mock import patch

import graphviz
import pytest

from pcgnav.core.errors import LayoutUnavailable
from pcgnav.core.graph import FilterOptions
from pcgnav.core.layout import (
    CfgLayoutEngine,
    SizedNode,
    build_digraph,
    estimate_table_height,
    inline_actions,
    layered_layout,
    parse_plain,
    to_render_edges,
)
from pcgnav.core.types import MirEdge, MirGraph, parse_pcg_function_data


@pytest.fixture
def pcg_data(pcg_payload):
    return parse_pcg_function_data(pcg_payload)


class TestTableHeight:
    def test_rows_only(self, mir_graph):
        # header + 2 statements + terminator
        assert estimate_table_height(mir_graph.node_for_block(0)) == 4 * 25 + 2

    def test_inline_actions_add_lines(self, mir_graph, pcg_data):
        node = mir_graph.node_for_block(0)
        height = estimate_table_height(node, pcg_data[0], show_actions_inline=True)
        assert height == 4 * 25 + 2 + 3 * (15 + 4)

    def test_inline_flag_off_ignores_actions(self, mir_graph, pcg_data):
        node = mir_graph.node_for_block(0)
        assert estimate_table_height(node, pcg_data[0], show_actions_inline=False) == 102

    def test_inline_action_lines(self, pcg_data):
        assert inline_actions(pcg_data[0], 0) == ["Unpack x"]
        assert inline_actions(pcg_data[0], 9) == []
        assert inline_actions(None, 0) == []


requires_dot = pytest.mark.skipif(shutil.which("dot") is None, reason="Graphviz dot not installed")

PLAIN = """graph 1 4.1667 4.1667
node a 2.0833 3.4722 4.1667 1.3889 "" solid box black lightgrey
node "bb 1" 2.0833 0.69444 4.1667 1.3889 "" solid box black lightgrey
edge a "bb 1" 4 2.0833 2.7778 2.0833 2.3611 2.0833 1.9444 2.0833 1.5278 solid black
stop
"""


class TestPlainOutput:
    def test_flips_to_top_left_origin(self):
        result = parse_plain(PLAIN)
        ax, ay = result.positions["a"]
        bx, by = result.positions["bb 1"]
        assert ax == pytest.approx(150, abs=0.1)
        assert ay == pytest.approx(150, abs=0.1)
        assert by == pytest.approx(350, abs=0.1)
        assert ay < by
        assert bx == ax

    def test_extent_includes_vertical_margins(self):
        result = parse_plain(PLAIN)
        assert result.width == pytest.approx(300, abs=0.1)
        assert result.height == pytest.approx(300 + 2 * 100, abs=0.1)

    def test_no_graph_line(self):
        result = parse_plain("")
        assert result.positions == {}
        assert result.height is None


class TestDigraph:
    def test_top_to_bottom_fixed_size_boxes(self):
        dot = build_digraph([SizedNode("a", 300, 72), SizedNode("b", 300, 36)], [("a", "b")])
        assert "rankdir=TB" in dot.source
        assert "fixedsize=true" in dot.source
        assert "a -> b" in dot.source
        assert "height=0.5000" in dot.source


class TestLayeredLayout:
    def test_empty_graph_has_no_height(self):
        result = layered_layout([], [])
        assert result.positions == {}
        assert result.height is None

    def test_unknown_edge_endpoints_not_sent_to_dot(self):
        with patch("pcgnav.core.layout.graphviz.Digraph.pipe", return_value=PLAIN) as pipe:
            result = layered_layout([SizedNode("a", 300, 100), SizedNode("bb 1", 300, 100)], [("a", "zz")])
        pipe.assert_called_once_with(format="plain", encoding="utf-8")
        assert set(result.positions) == {"a", "bb 1"}

    def test_missing_dot_raises_layout_unavailable(self):
        with patch("pcgnav.core.layout.graphviz.Digraph.pipe",
                   side_effect=graphviz.ExecutableNotFound(["dot"])):
            with pytest.raises(LayoutUnavailable, match="not found"):
                layered_layout([SizedNode("a", 300, 50)], [])

    @requires_dot
    def test_ranks_go_downwards(self):
        nodes = [SizedNode(nid, 300, 100) for nid in ("a", "b", "c", "d")]
        result = layered_layout(nodes, [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
        y = {nid: pos[1] for nid, pos in result.positions.items()}
        assert y["a"] < y["b"] < y["d"]
        assert y["b"] == pytest.approx(y["c"])
        assert result.positions["b"][0] != result.positions["c"][0]
        assert result.height > 0

    @requires_dot
    def test_cycles_are_laid_out(self):
        nodes = [SizedNode(nid, 300, 50) for nid in ("a", "b", "c")]
        result = layered_layout(nodes, [("a", "b"), ("b", "c"), ("c", "a"), ("b", "b")])
        assert set(result.positions) == {"a", "b", "c"}
        assert result.positions["a"][1] < result.positions["b"][1] < result.positions["c"][1]

    @requires_dot
    def test_single_node_extent(self):
        result = layered_layout([SizedNode("a", 300, 50)], [("a", "zz")])
        assert list(result.positions) == ["a"]
        assert result.width == pytest.approx(300, abs=1)


class TestRenderEdges:
    def test_ids_unique_per_position(self):
        edges = [MirEdge(source="n0", target="n1", label="0"), MirEdge(source="n0", target="n1", label="1")]
        rendered = to_render_edges(edges)
        assert [e.id for e in rendered] == ["n0-n1-0", "n0-n1-1"]
        assert rendered[1].label == "1"


class TestCfgLayoutEngine:
    def test_view_follows_filter(self, mir_graph):
        view = CfgLayoutEngine().layout(mir_graph, FilterOptions(path=(0, 1, 3)))
        assert view.blocks == [0, 1, 3]
        assert [e.id for e in view.edges] == ["n0-n1-0", "n1-n3-1"]

    @requires_dot
    def test_view_is_positioned(self, mir_graph):
        view = CfgLayoutEngine().layout(mir_graph, FilterOptions(path=(0, 1, 3)))
        assert view.layout_error is None
        assert view.height is not None
        ys = [p.y for p in view.nodes]
        assert ys == sorted(ys)

    def test_missing_dot_gives_unplaced_view(self, mir_graph):
        engine = CfgLayoutEngine()
        with patch("pcgnav.core.layout.graphviz.Digraph.pipe",
                   side_effect=graphviz.ExecutableNotFound(["dot"])):
            view = engine.layout(mir_graph)
            engine.layout(mir_graph)
        assert view.blocks == [0, 1, 2, 3]
        assert all(p.x is None and p.y is None for p in view.nodes)
        assert view.height is None
        assert "dot" in view.layout_error
        assert engine.layout_count == 1

    def test_memoized_for_same_inputs(self, mir_graph):
        engine = CfgLayoutEngine()
        first = engine.layout(mir_graph)
        second = engine.layout(mir_graph)
        assert engine.layout_count == 1
        assert first == second

    def test_relayout_on_filter_change(self, mir_graph):
        engine = CfgLayoutEngine()
        engine.layout(mir_graph)
        engine.layout(mir_graph, FilterOptions(show_unwind_edges=True))
        assert engine.layout_count == 2

    def test_relayout_when_heights_change(self, mir_graph, pcg_data):
        engine = CfgLayoutEngine()
        engine.layout(mir_graph, pcg_data=pcg_data, show_actions_inline=False)
        engine.layout(mir_graph, pcg_data=pcg_data, show_actions_inline=True)
        assert engine.layout_count == 2

    def test_empty_filtered_graph(self, mir_graph):
        view = CfgLayoutEngine().layout(mir_graph, FilterOptions(path=(5,)))
        assert view.nodes == []
        assert view.height is None

    def test_empty_payload(self):
        view = CfgLayoutEngine().layout(MirGraph())
        assert view.blocks == []
