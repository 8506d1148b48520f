"""
CLI Utilities - Shared helper functions for command line operations.

This module provides formatted printing, logging setup, and the logic
that turns the global options into a data source, an API and a
persisted view state.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from ..config import Settings
from ..core.addressing import CurrentPoint, parse_point
from ..core.errors import DataSourceUnavailable, InvalidAddress, MalformedArchiveEntry
from ..core.session import ExplorerSession
from ..core.storage import PersistedViewState
from ..sources import AnalysisApi, ArchiveDataSource, DataSource, select_data_source


@dataclass
class CliContext:
    """Global options shared by every command."""
    settings: Settings
    zip_path: Optional[Path] = None
    verbose: bool = False


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    click.echo(click.style(f"   {message}", dim=True))


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )


def open_view_state(ctx: CliContext) -> PersistedViewState:
    return PersistedViewState.open(ctx.settings.state_db, ctx.settings.ttl_seconds)


async def resolve_source(ctx: CliContext, view_state: PersistedViewState) -> DataSource:
    """
    An uploaded archive when `--zip` was given, else the fallback chain.

    Raises:
        DataSourceUnavailable: If nothing could be loaded.
    """
    if ctx.zip_path is not None:
        try:
            return ArchiveDataSource.from_file(ctx.zip_path)
        except (OSError, MalformedArchiveEntry) as e:
            raise DataSourceUnavailable([f"{ctx.zip_path}: {e}"]) from e
    return await select_data_source(ctx.settings.datasrc, view_state.storage)


async def open_session(ctx: CliContext, view_state: PersistedViewState) -> ExplorerSession:
    source = await resolve_source(ctx, view_state)
    session = ExplorerSession(AnalysisApi(source), view_state)
    await session.load_functions()
    return session


def exit_unavailable(error: DataSourceUnavailable) -> None:
    echo_error(error.message)
    click.echo("Upload the analysis output with --zip path/to/data.zip,")
    click.echo("or point --datasrc at a directory or URL serving data/functions.json.")
    sys.exit(1)


def parse_point_option(value: Optional[str]) -> Optional[CurrentPoint]:
    """Parse a point given on the command line, exiting on bad input."""
    if value is None:
        return None
    try:
        return parse_point(value)
    except InvalidAddress as e:
        echo_error(e.message)
        click.echo("Expected e.g. bb3[2], bb3->bb5 or bb3[2]@action:pre_main:0")
        sys.exit(2)


def parse_path_option(value: Optional[str]) -> Optional[list[int]]:
    """Parse `0,1,3` into a block path."""
    if not value:
        return None
    try:
        return [int(b.strip().removeprefix("bb")) for b in value.split(",") if b.strip()]
    except ValueError:
        echo_error(f"Invalid block path: {value}")
        sys.exit(2)
