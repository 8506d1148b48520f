"""
Open Command - Show the analysis graph for a point in the browser.
"""

import asyncio
import sys
from typing import Optional

import click

from ...core.addressing import CurrentPoint
from ...core.errors import DataSourceUnavailable, InvalidAddress, NotFound, PopupBlocked
from ...viewer import default_output_dir, open_dot_graph
from ..utils import (
    CliContext,
    echo_error,
    echo_success,
    echo_warning,
    exit_unavailable,
    open_session,
    open_view_state,
    parse_point_option,
)


async def _open(ctx: CliContext, function: str, point: Optional[CurrentPoint], launch: bool):
    session = await open_session(ctx, open_view_state(ctx))
    await session.select_function(function)
    if point is not None:
        await session.select_point(point)
    if session.view is None or not session.view.graph_file:
        return None
    return await open_dot_graph(
        session.api,
        session.view.graph_file,
        default_output_dir(ctx.settings.state_db),
        launch=launch,
    )


@click.command("open")
@click.argument("function")
@click.option("--at", "at", default=None, help="Point to show, defaults to the remembered one")
@click.option("--no-browser", is_flag=True, help="Only write the viewer page")
@click.pass_obj
def open_graph(ctx: CliContext, function: str, at: Optional[str], no_browser: bool) -> None:
    """Open the graph of FUNCTION's current point in a browser window."""
    point = parse_point_option(at)
    try:
        page = asyncio.run(_open(ctx, function, point, launch=not no_browser))
    except DataSourceUnavailable as e:
        exit_unavailable(e)
        return
    except (InvalidAddress, NotFound, PopupBlocked) as e:
        echo_error(e.message)
        sys.exit(1)

    if page is None:
        echo_warning("No graph was rendered for this position")
        return
    echo_success(f"Graph page: {page}")
