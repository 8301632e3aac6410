"""
routeopt CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import typer
from rich.console import Console

from routeopt import __version__
from routeopt.cli import batches, callback, diff, pricing, run
from routeopt.cli.errors import setup_logging
from routeopt.core.config import load_layered_env

PANEL_KEY = "Key Commands"
PANEL_INSPECT = "Inspect"

app = typer.Typer(
    name="routeopt",
    help="Weekly cost/quality optimizer for SOUL.md model routing",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    routeopt - keep SOUL.md model routing cheap without losing quality.

    Quick Start:
        routeopt run                 # Dry run: report + summary, no writes
        routeopt run --apply         # Open an approval batch
        routeopt callback <data>     # Record a button press
        routeopt batches list        # See batch states
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug)
    ctx.obj = {"debug": debug}


app.command(name="run", rich_help_panel=PANEL_KEY)(run.run)
app.command(name="callback", rich_help_panel=PANEL_KEY)(callback.callback)
app.command(name="diff", rich_help_panel=PANEL_KEY)(diff.diff)
app.add_typer(batches.app, name="batches", rich_help_panel=PANEL_INSPECT)
app.command(name="pricing", rich_help_panel=PANEL_INSPECT)(pricing.pricing)


@app.command(rich_help_panel=PANEL_INSPECT)
def version() -> None:
    """Show routeopt version and exit."""
    console.print(f"routeopt version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
