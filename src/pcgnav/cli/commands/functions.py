"""
Functions Command - List the analysed functions.
"""

import asyncio

import click
from rich.console import Console

from ...core.errors import DataSourceUnavailable
from ..render import functions_table
from ..utils import CliContext, echo_warning, exit_unavailable, open_session, open_view_state

console = Console()


@click.command()
@click.pass_obj
def functions(ctx: CliContext) -> None:
    """List the functions in the analysis output."""
    view_state = open_view_state(ctx)
    try:
        session = asyncio.run(open_session(ctx, view_state))
    except DataSourceUnavailable as e:
        exit_unavailable(e)
        return

    if not session.functions:
        echo_warning("The analysis output contains no functions")
        return
    console.print(functions_table(session.functions))
