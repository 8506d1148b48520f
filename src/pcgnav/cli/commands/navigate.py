"""
Navigate Command - Scrub through program points non-interactively.
"""

import asyncio
import sys
from typing import Optional

import click
from rich.console import Console

from ...core.addressing import CurrentPoint, format_point
from ...core.errors import DataSourceUnavailable, InvalidAddress, NotFound
from ...core.session import ExplorerSession
from ..keys import apply_key, is_bound
from ..render import navigator_table
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


async def _navigate(
    ctx: CliContext,
    function: str,
    start: Optional[CurrentPoint],
    keys: str,
) -> ExplorerSession:
    session = await open_session(ctx, open_view_state(ctx))
    await session.select_function(function)
    if start is not None:
        await session.select_point(start)
    for key in keys:
        await apply_key(session, key)
    return session


@click.command()
@click.argument("function")
@click.option("--at", "at", default=None, help="Start point, e.g. bb1[0] or bb1->bb2@action:successor:0")
@click.option("-k", "--keys", default="", help="Keys to apply: a/q step, j/k statement, 0-9 block")
@click.pass_obj
def navigate(ctx: CliContext, function: str, at: Optional[str], keys: str) -> None:
    """
    Step through FUNCTION's program points.

    Starts from --at, or from the remembered point, applies --keys in
    order, and prints the resulting navigator state.

    \b
    Examples:
      pcgnav navigate my_fn --at 'bb0[0]' --keys aaa
      pcgnav navigate my_fn --keys jjq
    """
    start = parse_point_option(at)
    unbound = sorted({k for k in keys if not is_bound(k)})
    if unbound:
        echo_warning(f"Ignoring unbound keys: {''.join(unbound)}")

    try:
        session = asyncio.run(_navigate(ctx, function, start, keys))
    except DataSourceUnavailable as e:
        exit_unavailable(e)
        return
    except (InvalidAddress, NotFound) as e:
        echo_error(e.message)
        sys.exit(1)

    if session.view is None:
        echo_error(f"{function} has no program points")
        return

    console.print(navigator_table(session.view))
    click.echo(f"Point: {format_point(session.view.point)}")
    if session.view.graph_file:
        echo_info(f"Graph: {session.view.graph_file}")
