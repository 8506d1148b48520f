"""
Highlight Command - Show which CFG edges an action-graph element relates to.
"""

import asyncio
import sys
from typing import Optional

import click
from rich.console import Console

from ...core.addressing import CurrentPoint
from ...core.errors import DataSourceUnavailable, InvalidAddress, NotFound
from ...core.highlight import StyledElement
from ...core.session import ExplorerSession
from ..render import edges_table
from ..utils import (
    CliContext,
    echo_error,
    echo_info,
    echo_warning,
    exit_unavailable,
    open_session,
    open_view_state,
    parse_point_option,
)

console = Console()


async def _load(ctx: CliContext, function: str, point: Optional[CurrentPoint]) -> ExplorerSession:
    session = await open_session(ctx, open_view_state(ctx))
    await session.select_function(function)
    if point is not None:
        await session.select_point(point)
    return session


@click.command()
@click.argument("function")
@click.argument("element", required=False)
@click.option("--at", "at", default=None, help="Point whose graph to inspect")
@click.pass_obj
def highlight(ctx: CliContext, function: str, element: Optional[str], at: Optional[str]) -> None:
    """
    Hover ELEMENT of the current graph and show the highlighted CFG edges.

    Without ELEMENT, lists the elements that carry branch choices.
    """
    point = parse_point_option(at)
    try:
        session = asyncio.run(_load(ctx, function, point))
    except DataSourceUnavailable as e:
        exit_unavailable(e)
        return
    except (InvalidAddress, NotFound) as e:
        echo_error(e.message)
        sys.exit(1)

    if session.view is None or not session.view.metadata:
        echo_warning("The graph for this position has no branch-choice metadata")
        return

    if element is None:
        for element_id, choices in sorted(session.view.metadata.items()):
            targets = ", ".join(f"{c.from_block} -> {'|'.join(c.chosen)}" for c in choices)
            click.echo(f"{element_id}: {targets}")
        return

    keys = session.bridge.hover_enter(StyledElement(element))
    if not keys:
        echo_warning(f"{element} relates to no CFG edges")
        return
    echo_info(f"Highlighted: {', '.join(f'bb{a} -> bb{b}' for a, b in sorted(keys))}")

    view = session.cfg_view()
    if view is not None:
        styles = session.emphasis.styles(view.edges, session.graph, session.view.point.address)
        console.print(edges_table(view, styles))
