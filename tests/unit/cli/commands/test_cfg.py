"""
Unit tests for the 'cfg' command.
"""

from unittest.mock import patch

import graphviz
from click.testing import CliRunner

from pcgnav.cli.main import main
from pcgnav.config import DEFAULT_TTL_HOURS
from pcgnav.core.storage import PersistedViewState, ViewStateKey


def _state(state_db):
    return PersistedViewState.open(state_db, DEFAULT_TTL_HOURS * 3600)


def test_cfg_default_hides_unwind(global_args):
    """The resume block is hidden until unwind edges are enabled."""
    runner = CliRunner()
    result = runner.invoke(main, global_args + ["cfg", "demo"])

    assert result.exit_code == 0
    assert "CFG (4 blocks" in result.output
    assert "resume" not in result.output


def test_cfg_unwind_toggle_is_remembered(global_args, state_db):
    runner = CliRunner()
    result = runner.invoke(main, global_args + ["cfg", "demo", "--unwind"])

    assert result.exit_code == 0
    assert "CFG (5 blocks" in result.output
    assert _state(state_db).get_bool(ViewStateKey.SHOW_UNWIND_EDGES) is True

    result = runner.invoke(main, global_args + ["cfg", "demo"])
    assert "CFG (5 blocks" in result.output


def test_cfg_path_restriction(global_args, state_db):
    runner = CliRunner()
    result = runner.invoke(main, global_args + ["cfg", "demo", "--path", "0,1,3"])

    assert result.exit_code == 0
    assert "CFG (3 blocks" in result.output
    state = _state(state_db)
    assert state.get_path() == [0, 1, 3]
    assert state.get_bool(ViewStateKey.SHOW_PATH_BLOCKS_ONLY) is True


def test_cfg_clearing_path(global_args, state_db):
    runner = CliRunner()
    runner.invoke(main, global_args + ["cfg", "demo", "--path", "0,1,3"])
    result = runner.invoke(main, global_args + ["cfg", "demo", "--path", ""])

    assert "CFG (4 blocks" in result.output
    assert _state(state_db).get_path() is None


def test_cfg_inline_actions(global_args):
    runner = CliRunner()
    result = runner.invoke(main, global_args + ["cfg", "demo", "--inline-actions"])

    assert result.exit_code == 0
    assert "Unpack x" in result.output


def test_cfg_path_without_entry(global_args):
    runner = CliRunner()
    result = runner.invoke(main, global_args + ["cfg", "demo", "--path", "1,3"])

    assert "no blocks reachable from bb0" in result.output


def test_cfg_bad_path(global_args):
    runner = CliRunner()
    result = runner.invoke(main, global_args + ["cfg", "demo", "--path", "0,x"])

    assert result.exit_code == 2


def test_cfg_without_graphviz_still_lists_blocks(global_args):
    """A missing dot executable leaves blocks unplaced and says why."""
    runner = CliRunner()
    with patch("pcgnav.core.layout.graphviz.Digraph.pipe",
               side_effect=graphviz.ExecutableNotFound(["dot"])):
        result = runner.invoke(main, global_args + ["cfg", "demo"])

    assert result.exit_code == 0
    assert "CFG (4 blocks, height auto)" in result.output
    assert "Layout unavailable" in result.output
