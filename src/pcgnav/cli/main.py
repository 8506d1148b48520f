"""
pcgnav CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

from pathlib import Path
from typing import Optional

import click

from ..config import load_settings
from .commands import cfg, explore, functions, highlight, navigate, open_graph, state
from .utils import CliContext, configure_logging


@click.group()
@click.version_option(package_name="pcgnav")
@click.option("--datasrc", default=None,
              help="Data root: URL or directory containing data/functions.json")
@click.option("--zip", "zip_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Load the analysis output from a data.zip file")
@click.option("--state-db", default=None, help="SQLite file for remembered view state")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Settings file (default .pcgnav/config.yaml)")
@click.option("-v", "--verbose", is_flag=True, help="Log data-source selection and fetches")
@click.pass_context
def main(ctx: click.Context, datasrc: Optional[str], zip_path: Optional[Path],
         state_db: Optional[str], config_path: Optional[Path], verbose: bool):
    """pcgnav: Program-point navigator for PCG analysis output.

    Steps through the analysis one statement, phase and action at a
    time, with the CFG laid out alongside.

    \b
    Quick Start:
      pcgnav --datasrc ./out functions
      pcgnav cfg my_fn --no-unwind
      pcgnav navigate my_fn --at 'bb0[0]' --keys aaa
      pcgnav explore my_fn
    """
    configure_logging(verbose)
    settings = load_settings(config_path=config_path, datasrc=datasrc, state_db=state_db)
    ctx.obj = CliContext(settings=settings, zip_path=zip_path, verbose=verbose)


# Register commands
main.add_command(functions.functions)
main.add_command(cfg.cfg)
main.add_command(navigate.navigate)
main.add_command(explore.explore)
main.add_command(open_graph.open_graph)
main.add_command(highlight.highlight)
main.add_command(state.state)

if __name__ == "__main__":
    main()
