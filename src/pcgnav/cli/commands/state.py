"""
State Commands - Inspect and reset the persisted view state.
"""

import click
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from ...config import CACHED_ARCHIVE_KEY
from ...sources.archive_cache import clear_cached_archive
from ..utils import CliContext, echo_success, open_view_state

console = Console()


@click.group()
def state():
    """Inspect or reset remembered selections and toggles."""
    pass


@state.command("show")
@click.pass_obj
def state_show(ctx: CliContext) -> None:
    """Show the remembered view state."""
    view_state = open_view_state(ctx)
    table = Table(title=f"View state ({view_state.storage.version})", show_header=True, header_style="bold")
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    for key in sorted(view_state.storage.keys()):
        value = view_state.get_string(key)
        if value is None:
            continue
        if key == CACHED_ARCHIVE_KEY:
            value = f"<archive, {len(value)} base64 chars>"
        table.add_row(key, value)
    console.print(table)


@state.command("clear")
@click.option("--archive-only", is_flag=True, help="Only drop the cached archive")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def state_clear(ctx: CliContext, archive_only: bool, yes: bool) -> None:
    """Forget remembered selections, toggles and the cached archive."""
    view_state = open_view_state(ctx)
    if archive_only:
        clear_cached_archive(view_state.storage)
        echo_success("Cached archive removed")
        return
    if not yes and not Confirm.ask("Clear all remembered view state?"):
        return
    removed = view_state.clear()
    echo_success(f"Removed {removed} entries")
