"""
routeopt CLI - diff command.

Previews the routing edits the optimizer would propose, without writing
anything or notifying anyone.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markdown import Markdown

from routeopt.cli.errors import ExitCode, handle_error
from routeopt.core.config import load_config
from routeopt.core.optimizer import RecommendationEngine
from routeopt.core.pricing import PricingService
from routeopt.core.routing import read_document, update_routing_config
from routeopt.core.routing.parser import resolve_home_path
from routeopt.core.services import wiring

console = Console()


def diff(
    soul: Annotated[
        Path | None,
        typer.Option("--soul", help="Routing document (defaults to the configured SOUL.md)"),
    ] = None,
) -> None:
    """
    Show the proposed SOUL.md routing diff.

    Examples:
        routeopt diff
        routeopt diff --soul ./SOUL.md
    """
    try:
        config = load_config()
        tables = wiring.build_tables(config)
        path = resolve_home_path(soul) if soul else config.soul_file

        models = PricingService.flatten(wiring.build_pricing_service(config).fetch_all_pricing())
        engine = RecommendationEngine(tables, wiring.build_constraints(config))
        result = engine.optimize(read_document(path, tables), models)
        preview = update_routing_config(result.recommendations, path, tables, dry_run=True)
    except Exception as e:
        handle_error(e, "diff")
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    console.print(Markdown(preview.diff))
