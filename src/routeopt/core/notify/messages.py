"""
Operator messages for the weekly run and the approval flow.
"""

import shutil
from pathlib import Path

from routeopt.core.approval.callbacks import CALLBACK_LIMIT, NAMESPACE, build_final_token, build_item_token
from routeopt.core.approval.models import ApprovalItem, BatchSummary
from routeopt.core.notify.messenger import Button

ITEM_BUTTONS = (("approve", "Approve"), ("reject", "Reject"), ("keep", "Keep Current"))
FINAL_BUTTONS = (("apply", "Apply Approved"), ("cancel", "Cancel Batch"))


def business_summary(
    mode: str,
    report_path: str,
    models_analyzed: int,
    actionable_count: int,
    scored_count: int,
    sent_items: int,
) -> str:
    return "\n".join(
        [
            "Model Optimizer Weekly Summary",
            "",
            f"Mode: {mode}",
            f"Models analyzed: {models_analyzed}",
            f"Actionable changes (need approval): {actionable_count}",
            f"Scored suggestions (reference only): {scored_count}",
            f"Approval items sent: {sent_items}",
            "",
            f"Report file: {report_path}",
        ]
    )


def item_approval(
    batch_id: str,
    item: ApprovalItem,
    total_items: int,
    namespace: str = NAMESPACE,
    limit: int = CALLBACK_LIMIT,
) -> tuple[str, list[Button]]:
    """Text and Approve / Reject / Keep Current buttons for one item."""
    text = "\n".join(
        [
            f"Approval Item {item.item_index}/{total_items}",
            "",
            f"Batch: {batch_id}",
            f"Line: {item.line_number}",
            "",
            f"Current: {item.before}",
            f"Suggested: {item.after}",
        ]
    )
    buttons = [
        Button(label=label, callback_token=build_item_token(action, batch_id, item.item_index, namespace, limit))
        for action, label in ITEM_BUTTONS
    ]
    return text, buttons


def final_confirmation(
    batch_id: str,
    summary: BatchSummary,
    namespace: str = NAMESPACE,
    limit: int = CALLBACK_LIMIT,
) -> tuple[str, list[Button]]:
    """Text and Apply Approved / Cancel Batch buttons once every item is decided."""
    text = "\n".join(
        [
            "Final Confirmation Required",
            "",
            f"Batch: {batch_id}",
            f"Approved: {summary.approved}",
            f"Kept current: {summary.kept}",
            f"Rejected: {summary.rejected}",
            "",
            "Apply only approved items now?",
        ]
    )
    buttons = [
        Button(label=label, callback_token=build_final_token(action, batch_id, namespace, limit))
        for action, label in FINAL_BUTTONS
    ]
    return text, buttons


def outbound_media_dir(home: Path | None = None) -> Path:
    return (home or Path.home()) / ".openclaw" / "media" / "outbound"


def stage_report_attachment(report_path: Path, home: Path | None = None) -> Path:
    """Copy a report into OpenClaw's outbound media directory so it can be attached."""
    media_dir = outbound_media_dir(home)
    media_dir.mkdir(parents=True, exist_ok=True)
    staged = media_dir / Path(report_path).name
    shutil.copyfile(report_path, staged)
    return staged
