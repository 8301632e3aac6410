"""Markdown rendering of proposed routing changes."""

from collections.abc import Mapping

from routeopt.core.routing.models import ChangeSet, RoutingDocument
from routeopt.core.routing.rewriter import apply_recommendations_to_document
from routeopt.core.routing.sections import section_from_name

DIFF_TITLE = "## SOUL.md Routing Diff"
NO_CHANGES = f"{DIFF_TITLE}\n\nNo model routing changes proposed."


def render_change_set(change_set: ChangeSet) -> str:
    """Render a ChangeSet as a markdown table of current vs. proposed lines."""
    if not change_set.modified_lines:
        return NO_CHANGES

    rows = [
        f"Proposed changes: **{len(change_set.modified_lines)}**",
        "",
        "| Section | Line | Current | Proposed |",
        "|---|---:|---|---|",
    ]
    for line in change_set.modified_lines:
        kind = section_from_name(line.section)
        label = kind.label if kind else line.section
        rows.append(f"| {label} | {line.line_number} | `{line.before.strip()}` | `{line.after.strip()}` |")

    return f"{DIFF_TITLE}\n\n" + "\n".join(rows) + "\n"


def generate_diff(document: RoutingDocument, labels_by_task_type: Mapping[str, str]) -> str:
    """Diff the document against a task type -> label map."""
    return render_change_set(apply_recommendations_to_document(document, labels_by_task_type))
