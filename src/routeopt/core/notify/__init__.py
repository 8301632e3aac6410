"""
Operator notifications.

Formats reports for chat and delivers messages (with inline decision
buttons) through the OpenClaw messaging CLI.
"""

from routeopt.core.exceptions import NotificationError
from routeopt.core.notify.formatting import escape_markdown, format_for_chat
from routeopt.core.notify.messages import (
    business_summary,
    final_confirmation,
    item_approval,
    stage_report_attachment,
)
from routeopt.core.notify.messenger import (
    Button,
    CliNotifier,
    Notifier,
    RecordingNotifier,
    resolve_target,
)

__all__ = [
    "Button",
    "CliNotifier",
    "NotificationError",
    "Notifier",
    "RecordingNotifier",
    "business_summary",
    "escape_markdown",
    "final_confirmation",
    "format_for_chat",
    "item_approval",
    "resolve_target",
    "stage_report_attachment",
]
