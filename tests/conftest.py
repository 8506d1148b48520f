"""Shared fixtures: a small CFG with a branch, an unwind path and a loop-free join."""

import io
import json
import zipfile

import pytest

from pcgnav.core.types import FunctionMetadata, MirGraph


def _stmt(text, line, low, high):
    return {
        "stmt": text,
        "debug_stmt": f"debug {text}",
        "span": {"low": {"line": line, "column": low}, "high": {"line": line, "column": high}},
    }


def _action(kind_type, data=None):
    return {"type": "Borrow", "data": {"kind": {"type": kind_type, "data": data}, "debug_context": None}}


@pytest.fixture
def mir_payload():
    """
    bb0 -> bb1, bb0 -> bb2, bb1 -> bb3, bb2 -> bb3, bb2 -unwind-> bb4 (resume).
    Function starts at line 10, column 0.
    """
    return {
        "nodes": [
            {"id": "n0", "block": 0, "stmts": [_stmt("_1 = const 1", 11, 4, 20), _stmt("_2 = &_1", 11, 8, 14)],
             "terminator": _stmt("switchInt(_1)", 12, 4, 30)},
            {"id": "n1", "block": 1, "stmts": [_stmt("_3 = _2", 13, 4, 12)],
             "terminator": _stmt("goto", 13, 12, 16)},
            {"id": "n2", "block": 2, "stmts": [],
             "terminator": _stmt("call f()", 14, 4, 10)},
            {"id": "n3", "block": 3, "stmts": [_stmt("_0 = move _3", 15, 4, 16)],
             "terminator": _stmt("return", 15, 16, 22)},
            {"id": "n4", "block": 4, "stmts": [],
             "terminator": _stmt("resume", 16, 0, 6)},
        ],
        "edges": [
            {"source": "n0", "target": "n1", "label": "0"},
            {"source": "n0", "target": "n2", "label": "otherwise"},
            {"source": "n1", "target": "n3", "label": ""},
            {"source": "n2", "target": "n3", "label": "return"},
            {"source": "n2", "target": "n4", "label": "unwind"},
        ],
    }


@pytest.fixture
def mir_graph(mir_payload):
    return MirGraph.model_validate(mir_payload)


@pytest.fixture
def function_meta():
    return FunctionMetadata.model_validate(
        {"name": "demo", "source": "fn demo() {}", "start": {"line": 10, "column": 0}}
    )


@pytest.fixture
def iterations_payload():
    """Iteration listing of bb0: two statements and the terminator."""
    def stmt_graphs(prefix):
        return {
            "at_phase": [
                {"phase": "initial", "filename": f"{prefix}_initial.dot"},
                {"phase": "pre_operands", "filename": f"{prefix}_pre_operands.dot"},
                {"phase": "post_operands", "filename": f"{prefix}_post_operands.dot"},
                {"phase": "pre_main", "filename": f"{prefix}_pre_main.dot"},
                {"phase": "post_main", "filename": f"{prefix}_post_main.dot"},
            ],
            "actions": {
                "pre_operands": [f"{prefix}_pre_operands_0.dot"],
                "post_operands": [],
                "pre_main": [],
                "post_main": [],
            },
        }
    return [stmt_graphs("bb0_s0"), stmt_graphs("bb0_s1"), stmt_graphs("bb0_s2")]


@pytest.fixture
def pcg_payload():
    def stmt_data():
        return {"actions": {
            "pre_operands": [_action("Expand", {"from": "x", "to": "x.f"})],
            "post_operands": [],
            "pre_main": [],
            "post_main": [],
        }}
    return {
        "bb0": {
            "statements": [stmt_data(), stmt_data(), stmt_data()],
            "successors": {"bb1": {"actions": [_action("Collapse", {"to": "x"})]}},
        },
    }


@pytest.fixture
def functions_payload():
    return {"demo": {"name": "demo", "source": "fn demo() {}", "start": {"line": 10, "column": 0}}}


@pytest.fixture
def archive_bytes(functions_payload, mir_payload, pcg_payload, iterations_payload):
    """A data.zip holding the whole fixture tree."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("data/functions.json", json.dumps(functions_payload))
        zf.writestr("data/demo/mir.json", json.dumps(mir_payload))
        zf.writestr("data/demo/pcg_data.json", json.dumps(pcg_payload))
        zf.writestr("data/demo/block_0_iterations.json", json.dumps(iterations_payload))
        zf.writestr("data/demo/bb0_s0_pre_operands_0.dot", "digraph { a -> b }")
        zf.writestr(
            "data/demo/bb0_s0_pre_operands_0.json",
            json.dumps({"edge_7": [{"from": "bb0", "chosen": ["bb1", "bb2"]}]}),
        )
    return buf.getvalue()
