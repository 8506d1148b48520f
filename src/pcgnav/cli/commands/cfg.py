"""
CFG Command - Show the filtered, laid-out control-flow graph.
"""

import asyncio
import sys
from typing import List, Optional

import click
from rich.console import Console

from ...core.errors import DataSourceUnavailable, NotFound
from ...core.session import ExplorerSession
from ...core.storage import ViewStateKey
from ..render import cfg_table, edges_table
from ..utils import (
    CliContext,
    echo_error,
    exit_unavailable,
    open_session,
    open_view_state,
    parse_path_option,
)

console = Console()


def apply_toggles(
    session: ExplorerSession,
    unwind: Optional[bool],
    path: Optional[List[int]],
    inline_actions: Optional[bool],
) -> None:
    """Persist display toggles given on the command line. An empty path clears it."""
    state = session.view_state
    if unwind is not None:
        state.set_bool(ViewStateKey.SHOW_UNWIND_EDGES, unwind)
    if inline_actions is not None:
        state.set_bool(ViewStateKey.SHOW_ACTIONS_IN_CODE, inline_actions)
    if path is not None:
        state.set_path(path)
        state.set_bool(ViewStateKey.SHOW_PATH_BLOCKS_ONLY, bool(path))


async def _load(ctx: CliContext, function: str, unwind, path, inline_actions) -> ExplorerSession:
    session = await open_session(ctx, open_view_state(ctx))
    apply_toggles(session, unwind, path, inline_actions)
    await session.select_function(function)
    return session


@click.command()
@click.argument("function")
@click.option("--unwind/--no-unwind", default=None, help="Show unwind edges and resume blocks")
@click.option("--path", "path", default=None, help="Restrict to blocks on a path, e.g. 0,1,3 ('' clears)")
@click.option("--inline-actions/--no-inline-actions", default=None,
              help="Show each statement's actions under it")
@click.pass_obj
def cfg(ctx: CliContext, function: str, unwind: Optional[bool], path: Optional[str],
        inline_actions: Optional[bool]) -> None:
    """
    Show the control-flow graph of FUNCTION.

    Display toggles are remembered between runs.
    """
    blocks = None if path is None else (parse_path_option(path) or [])
    try:
        session = asyncio.run(_load(ctx, function, unwind, blocks, inline_actions))
    except DataSourceUnavailable as e:
        exit_unavailable(e)
        return
    except NotFound as e:
        echo_error(f"No CFG for {function}: {e.message}")
        sys.exit(1)

    view = session.cfg_view()
    if view is None or not view.nodes:
        echo_error(f"{function} has no blocks reachable from bb0 under the current filters")
        return

    current = session.view.point if session.view else None
    show_inline = session.view_state.get_bool(ViewStateKey.SHOW_ACTIONS_IN_CODE, False)
    console.print(cfg_table(view, current, session.pcg_data, show_inline))
    styles = session.emphasis.styles(view.edges, session.graph, current.address if current else None)
    console.print(edges_table(view, styles))
