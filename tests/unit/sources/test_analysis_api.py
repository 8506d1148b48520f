"""Unit tests for typed artifact access."""

import asyncio
import io
import json
import zipfile

import pytest

from pcgnav.core.errors import NotFound
from pcgnav.sources.archive import ArchiveDataSource
from pcgnav.sources.base import AnalysisApi, graph_path, path_data_path


@pytest.fixture
def api(archive_bytes):
    return AnalysisApi(ArchiveDataSource(archive_bytes))


def _api_with(files):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, payload in files.items():
            zf.writestr(name, json.dumps(payload))
    return AnalysisApi(ArchiveDataSource(buf.getvalue()))


class TestPaths:
    def test_graph_path(self):
        assert graph_path("demo", "bb0_s0_initial.dot") == "data/demo/bb0_s0_initial.dot"

    def test_path_data_for_statement(self):
        assert path_data_path("demo", [0, 1], stmt=2) == "data/demo/path_bb0_bb1_stmt_2.json"

    def test_path_data_for_transition(self):
        assert path_data_path("demo", [0, 2], terminator=3) == "data/demo/path_bb0_bb2_bb3_transition.json"

    def test_path_data_needs_one_target(self):
        with pytest.raises(ValueError):
            path_data_path("demo", [0])
        with pytest.raises(ValueError):
            path_data_path("demo", [0], stmt=1, terminator=2)


class TestArtifacts:
    def test_functions(self, api):
        functions = asyncio.run(api.get_functions())
        assert list(functions) == ["demo"]
        assert functions["demo"].start.line == 10

    def test_mir_graph(self, api):
        graph = asyncio.run(api.get_mir_graph("demo"))
        assert [n.block for n in graph.nodes] == [0, 1, 2, 3, 4]

    def test_missing_function(self, api):
        with pytest.raises(NotFound):
            asyncio.run(api.get_mir_graph("other"))

    def test_pcg_data(self, api):
        data = asyncio.run(api.get_pcg_function_data("demo"))
        assert data[0].successor(1) is not None

    def test_iterations(self, api):
        iterations = asyncio.run(api.get_iterations("demo", 0))
        assert len(iterations) == 3
        assert iterations[0].phase_names()[0] == "initial"

    def test_iterations_missing_everywhere(self, api):
        with pytest.raises(NotFound):
            asyncio.run(api.get_iterations("demo", 1))

    def test_iterations_from_combined_file(self):
        api = _api_with({
            "data/demo/all_iterations.json": {"bb2": [{"at_phase": [["initial", "x.dot"]]}]},
        })
        iterations = asyncio.run(api.get_iterations("demo", 2))
        assert iterations[0].at_phase[0].filename == "x.dot"
        with pytest.raises(NotFound):
            asyncio.run(api.get_iterations("demo", 3))

    def test_optional_artifacts_default_empty(self, api):
        assert asyncio.run(api.get_paths("demo")) == []
        assert asyncio.run(api.get_assertions("demo")) == []
        assert asyncio.run(api.get_path_data("demo", [0, 1], stmt=0)) is None

    def test_paths_and_path_data(self):
        api = _api_with({
            "data/demo/paths.json": [[0, 1, 3], [0, 2, 3]],
            "data/demo/path_bb0_bb1_stmt_0.json": {"ok": True},
        })
        assert asyncio.run(api.get_paths("demo")) == [[0, 1, 3], [0, 2, 3]]
        assert asyncio.run(api.get_path_data("demo", [0, 1], stmt=0)) == {"ok": True}


class TestGraphFiles:
    def test_dot_file(self, api):
        dot = asyncio.run(api.fetch_dot_file("data/demo/bb0_s0_pre_operands_0.dot"))
        assert "a -> b" in dot

    def test_sidecar_metadata(self, api):
        metadata = asyncio.run(api.get_graph_metadata("data/demo/bb0_s0_pre_operands_0.dot"))
        assert metadata["edge_7"][0].chosen == ["bb1", "bb2"]

    def test_missing_sidecar(self, api):
        assert asyncio.run(api.get_graph_metadata("data/demo/bb0_s0_initial.dot")) == {}
