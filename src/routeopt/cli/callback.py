"""
routeopt CLI - callback command.

Processes one button press from the approval chat:
    opt:item:(approve|reject|keep):<batchId>:<n>
    opt:final:(apply|cancel):<batchId>
"""

from typing import Annotated

import typer
from rich.console import Console

from routeopt.cli.errors import ExitCode, handle_error
from routeopt.core.config import load_config
from routeopt.core.services import CallbackService

console = Console()


def callback(
    data: Annotated[str, typer.Argument(help="Callback data, e.g. opt:item:approve:<batchId>:1")],
) -> None:
    """
    Record an approval decision or finalize a batch.

    Examples:
        routeopt callback "opt:item:approve:weekly-2026-02-01T09-00-00-000Z:1"
        routeopt callback "opt:final:apply:weekly-2026-02-01T09-00-00-000Z"
    """
    try:
        service = CallbackService.from_config(load_config())
        outcome = service.handle(data)
    except Exception as e:
        handle_error(e, "callback")
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    console.print(outcome.message)
    if outcome.final_request_sent:
        console.print("Final confirmation request sent.")
