"""
routeopt CLI - batches command.

Inspect stored approval batches.
"""

from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from routeopt.cli.errors import ExitCode, print_error
from routeopt.core.approval import ApprovalBatchStore
from routeopt.core.config import load_config
from routeopt.core.services.wiring import build_store

console = Console()
app = typer.Typer(
    name="batches",
    help="Inspect approval batches",
    no_args_is_help=True,
)

STATUS_STYLES = {
    "pending": "yellow",
    "approved": "green",
    "applied": "green",
    "rejected": "red",
    "cancelled": "red",
    "kept": "blue",
    "expired": "dim",
    "completed-noop": "dim",
}


def _styled(status: str) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/{style}]"


@app.command(name="list")
def list_batches(
    pending_only: Annotated[
        bool,
        typer.Option("--pending", help="Only show batches still awaiting decisions"),
    ] = False,
) -> None:
    """
    List approval batches, oldest first.

    Examples:
        routeopt batches list
        routeopt batches list --pending
    """
    store = build_store(load_config())
    batches = store.list_batches()
    if pending_only:
        batches = [batch for batch in batches if batch.status.value == "pending"]

    if not batches:
        console.print("[dim]No approval batches.[/dim]")
        return

    table = Table(title="Approval Batches", border_style="cyan")
    table.add_column("Batch", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Items", justify="right")
    table.add_column("Approved", justify="right")
    table.add_column("Pending", justify="right")
    table.add_column("Created")
    for batch in batches:
        summary = ApprovalBatchStore.summarize(batch)
        table.add_row(
            batch.batch_id,
            _styled(batch.status.value),
            str(summary.total),
            str(summary.approved),
            str(summary.pending),
            batch.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@app.command()
def show(
    batch_id: Annotated[str, typer.Argument(help="Batch id")],
) -> None:
    """
    Show one batch and its items.

    Examples:
        routeopt batches show weekly-2026-02-01T09-00-00-000Z
    """
    store = build_store(load_config())
    resolved = store.resolve_batch_id(batch_id)
    batch = store.get_batch(resolved) if resolved else None
    if batch is None:
        print_error(f"Approval batch not found: {batch_id}", solution="routeopt batches list")
        raise typer.Exit(ExitCode.USER_ERROR)

    summary = ApprovalBatchStore.summarize(batch)
    console.print(f"[bold]{batch.batch_id}[/bold]  {_styled(batch.status.value)}")
    console.print(f"SOUL: {batch.soul_path}")
    if batch.report_path:
        console.print(f"Report: {batch.report_path}")
    console.print(
        f"approved={summary.approved} rejected={summary.rejected} kept={summary.kept} "
        f"pending={summary.pending} expired={summary.expired}"
    )
    if batch.expire_reason:
        console.print(f"[dim]Expired: {batch.expire_reason}[/dim]")
    if batch.apply_result:
        console.print(
            f"Applied {batch.apply_result.modified_lines} line(s); "
            f"backup: {batch.apply_result.backup_path or 'none'}"
        )

    if not batch.items:
        return
    table = Table(border_style="cyan")
    table.add_column("#", justify="right")
    table.add_column("Line", justify="right")
    table.add_column("Status")
    table.add_column("Current")
    table.add_column("Suggested")
    for item in batch.items:
        table.add_row(
            str(item.item_index),
            str(item.line_number),
            _styled(item.status.value),
            escape(item.before),
            escape(item.after),
        )
    console.print(table)
