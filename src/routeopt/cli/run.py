"""
routeopt CLI - run command.

Runs the weekly optimization: pricing, discovery, optimization, report,
and (with --apply) a new approval batch sent to the operator.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from routeopt.cli.errors import ExitCode, handle_error, print_error
from routeopt.core.config import load_config
from routeopt.core.services import RunMode, WeeklyRunResult, WeeklyRunService

console = Console()


def _render(result: WeeklyRunResult) -> None:
    table = Table(title=f"Weekly run ({result.mode.value})", border_style="cyan", show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")
    table.add_row("SOUL path", result.soul_path)
    table.add_row("Branch", result.branch)
    table.add_row("Models analyzed", f"{result.models_analyzed} [{', '.join(result.providers)}]")
    table.add_row(
        "Tasks",
        f"known={result.known_tasks} unknown={result.unknown_tasks} new={result.newly_discovered}",
    )
    table.add_row("Recommendations", str(result.recommendation_count))
    table.add_row("Actionable changes", str(result.modified_count))
    table.add_row("Report", result.report_path)
    table.add_row("Summary sent", "yes" if result.summary_sent else "no")
    if result.batch_id:
        table.add_row("Batch", result.batch_id)
        table.add_row("Approval items sent", f"{result.items_sent}/{result.items_sent + result.items_failed}")
    if result.expired_batches:
        table.add_row("Expired batches", str(result.expired_batches))
    console.print(table)

    if result.mode is RunMode.DRY_RUN:
        console.print("[green]Dry run complete.[/green] No SOUL.md changes were applied.")
    elif result.modified_count == 0:
        console.print("No routing changes proposed. Nothing to approve or apply.")
    else:
        console.print(
            "No changes were applied by this run. Approve, reject or keep each item, "
            "then finalize with Apply Approved."
        )


def run(
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Report and notify only (default)"),
    ] = False,
    apply: Annotated[
        bool,
        typer.Option("--apply", help="Open an approval batch and send per-item approvals"),
    ] = False,
    soul: Annotated[
        Path | None,
        typer.Option("--soul", help="Routing document (defaults to the configured SOUL.md)"),
    ] = None,
) -> None:
    """
    Run the weekly routing optimization.

    Examples:
        routeopt run
        routeopt run --apply
        routeopt run --dry-run --soul ./SOUL.md
    """
    if dry_run and apply:
        print_error("--dry-run and --apply are mutually exclusive", solution="routeopt run --apply")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    mode = RunMode.APPLY if apply else RunMode.DRY_RUN
    try:
        config = load_config()
        service = WeeklyRunService.from_config(
            config,
            soul_path=soul,
            on_step=lambda step: console.print(f"[dim]→ {step}[/dim]"),
        )
        result = service.run(mode)
    except Exception as e:
        handle_error(e, "run")
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    _render(result)
