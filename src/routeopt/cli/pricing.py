"""
routeopt CLI - pricing command.

Shows the price lists the optimizer works from.
"""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from routeopt.cli.errors import ExitCode, handle_error
from routeopt.core.config import load_config
from routeopt.core.pricing import PricingService
from routeopt.core.services.wiring import build_pricing_service

console = Console()


def pricing(
    provider: Annotated[
        list[str] | None,
        typer.Option("--provider", "-p", help="Only this provider (repeatable)"),
    ] = None,
) -> None:
    """
    Fetch and show current model prices per 1M tokens.

    Examples:
        routeopt pricing
        routeopt pricing --provider deepseek
    """
    try:
        service = build_pricing_service(load_config(), providers=provider or None)
        prices = service.fetch_all_pricing()
    except Exception as e:
        handle_error(e, "pricing")
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    table = Table(title="Model Pricing (USD per 1M tokens)", border_style="cyan")
    table.add_column("Provider", style="cyan", no_wrap=True)
    table.add_column("Model", no_wrap=True)
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Context", justify="right")
    table.add_column("Vision", justify="center")
    for entry in PricingService.flatten(prices):
        table.add_row(
            entry.provider_name,
            entry.model,
            f"${entry.input_per_m:.2f}",
            f"${entry.output_per_m:.2f}",
            f"{entry.context_window:,}" if entry.context_window else "-",
            "✓" if entry.vision else "",
        )
    console.print(table)

    summary = PricingService.summarize(prices)
    console.print(f"[dim]{summary.total} model(s): {', '.join(summary.parts)}[/dim]")
