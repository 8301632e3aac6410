"""
Standardized error handling and exit codes for the routeopt CLI.

Provides consistent error messages with actionable guidance, the logging
setup shared by every command, and standard exit codes.
"""

import logging
import sys
import traceback
from enum import IntEnum

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from routeopt.core.exceptions import RouteoptError

console = Console()
err_console = Console(stderr=True)

_debug_mode = False


class ExitCode(IntEnum):
    """Standard exit codes for routeopt CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Pipeline error or any uncaught failure."""

    USER_ERROR = 2
    """User configuration or input error (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging and full tracebacks
    """
    global _debug_mode
    _debug_mode = debug

    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Telegram target not configured",
        ...     solution="export MODEL_OPTIMIZER_TELEGRAM_TARGET=<chat id>",
        ... )
    """
    err_console.print(f"[red]Error:[/red] {problem}")

    if reason:
        err_console.print(f"[dim]{reason}[/dim]")

    if solution:
        err_console.print(f"[cyan]→ Try:[/cyan] {solution}")


def handle_error(error: Exception, command_name: str) -> None:
    """
    Display an error panel; routeopt errors include their context.

    Args:
        error: The exception that was raised
        command_name: Name of the command that failed
    """
    error_text = Text()
    error_text.append("Error in ", style="bold red")
    error_text.append(command_name, style="bold yellow")
    error_text.append(": ", style="bold red")
    error_text.append(str(error))

    if isinstance(error, RouteoptError):
        for key, value in error.context.items():
            error_text.append(f"\n  {key}: ", style="dim")
            error_text.append(str(value))
        errors = getattr(error, "errors", None)
        if errors:
            for message in errors:
                error_text.append(f"\n  - {message}")
    else:
        error_text.append(f"\n  ({type(error).__name__})", style="dim")

    err_console.print()
    err_console.print(
        Panel(
            error_text,
            title="[bold red]Error[/bold red]",
            border_style="red",
            expand=False,
        )
    )

    if _debug_mode:
        err_console.print("\n[dim]Full traceback:[/dim]")
        err_console.print(traceback.format_exc())
    else:
        err_console.print("[dim]Run with --debug for full traceback[/dim]")
    err_console.print()
