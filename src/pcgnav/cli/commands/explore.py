"""
Explore Command - Interactive keyboard-driven navigator.
"""

import asyncio
import sys

import click
from rich.console import Console

from ...core.errors import DataSourceUnavailable, NotFound, PopupBlocked
from ...core.session import ExplorerSession
from ...core.storage import ViewStateKey
from ...viewer import default_output_dir, open_dot_graph
from ..keys import apply_key, is_bound
from ..render import cfg_table, navigator_table
from ..utils import CliContext, echo_error, exit_unavailable, open_session, open_view_state

console = Console()

QUIT_KEYS = {"x", "\x1b", "\x03"}
OPEN_KEY = "o"
HELP = "[dim]a/q step · j/k statement · 0-9 block · o open graph · x quit[/dim]"


def _render(session: ExplorerSession) -> None:
    console.clear()
    view = session.cfg_view()
    current = session.view.point if session.view else None
    if view is not None:
        show_inline = session.view_state.get_bool(ViewStateKey.SHOW_ACTIONS_IN_CODE, False)
        console.print(cfg_table(view, current, session.pcg_data, show_inline))
    if session.view is not None:
        console.print(navigator_table(session.view))
    console.print(HELP)


async def _open_current(ctx: CliContext, session: ExplorerSession) -> None:
    if session.view is None or not session.view.graph_file:
        console.print("[yellow]No graph for this position[/yellow]")
        return
    try:
        await open_dot_graph(session.api, session.view.graph_file, default_output_dir(ctx.settings.state_db))
    except (PopupBlocked, NotFound) as e:
        console.print(f"[red]Error:[/red] {e.message}")


async def _explore(ctx: CliContext, function: str) -> None:
    session = await open_session(ctx, open_view_state(ctx))
    await session.select_function(function)
    while True:
        _render(session)
        key = click.getchar()
        if key in QUIT_KEYS:
            return
        if key == OPEN_KEY:
            await _open_current(ctx, session)
            click.pause()
        elif is_bound(key):
            await apply_key(session, key)


@click.command()
@click.argument("function")
@click.pass_obj
def explore(ctx: CliContext, function: str) -> None:
    """Explore FUNCTION interactively with the keyboard."""
    try:
        asyncio.run(_explore(ctx, function))
    except DataSourceUnavailable as e:
        exit_unavailable(e)
    except NotFound as e:
        echo_error(e.message)
        sys.exit(1)
