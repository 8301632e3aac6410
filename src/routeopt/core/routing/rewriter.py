"""
Line-preserving rewrites of routing rules.

Only the model span that follows a matched task phrase is replaced; the
rest of the line (bullet, emoji, phrase, trailing notes) is kept byte for
byte. When no replacement pattern fits a match, the line is left as it is.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from routeopt.core.routing.labels import ModelLabeler
from routeopt.core.routing.models import ChangeSet, ModifiedLine, RoutingDocument
from routeopt.core.routing.parser import join_lines, split_line_ending, split_lines

logger = logging.getLogger(__name__)

# A period only ends the model span when it is not part of a version number
_SPAN_END = r"(?=$|,|;|\.(?!\d))"

_CHEAP_EDITS = re.compile(r"(cheap/simple edits use\s+)([^,\n]+)", re.IGNORECASE)
_HIGH_RISK_EDITS = re.compile(r"(higher risk edits use\s+)([^,\n]+)", re.IGNORECASE)


def replace_model_for_task(line: str, task_type: str, description: str, label: str) -> str:
    """
    Replace the model named for one task type on a rule line.

    Args:
        line: Full rule line
        task_type: Task type id of the match
        description: Phrase that matched on this line
        label: Model label to write

    Returns:
        The rewritten line, or the line unchanged when no pattern applies.
        A trailing "\\r" is never part of the replaced span.

    Example:
        >>> replace_model_for_task("- Debugging: Claude Haiku", "debugging", "Debugging", "DeepSeek Reasoner")
        '- Debugging: DeepSeek Reasoner'
        >>> replace_model_for_task("- Code changes: Claude Haiku first, then review", "code-changes",
        ...                        "Code changes", "Claude Sonnet")
        '- Code changes: Claude Sonnet first, then review'
    """
    body, ending = split_line_ending(line)
    return _rewrite_body(body, task_type, description, label) + ending


def _rewrite_body(body: str, task_type: str, description: str, label: str) -> str:
    if task_type == "file-edits-cheap":
        return _CHEAP_EDITS.sub(lambda m: m.group(1) + label, body, count=1)

    if task_type == "file-edits-high-risk":
        return _HIGH_RISK_EDITS.sub(lambda m: m.group(1) + label, body, count=1)

    escaped = re.escape(description)

    if task_type == "code-changes":
        pattern = re.compile(
            rf"({escaped}\s*:\s*)([^,\n]+?)(\s+first\b)?{_SPAN_END}",
            re.IGNORECASE,
        )
        return pattern.sub(lambda m: m.group(1) + label + (m.group(3) or ""), body, count=1)

    pattern = re.compile(rf"({escaped}\s*(?::|→)\s*)([^,\n]+?){_SPAN_END}", re.IGNORECASE)
    return pattern.sub(lambda m: m.group(1) + label, body, count=1)


def recommendation_field(rec: Any, *names: str) -> str | None:
    for name in names:
        value = rec.get(name) if isinstance(rec, Mapping) else getattr(rec, name, None)
        if value:
            return value
    return None


def recommendations_to_label_map(
    recommendations: Iterable[Any],
    labeler: ModelLabeler,
) -> dict[str, str]:
    """
    Map task type -> model label from recommendation records.

    Accepts Recommendation models or plain dicts (camelCase or snake_case
    keys). Records without a task type or model are skipped; a later
    record for the same task type wins.
    """
    labels: dict[str, str] = {}
    for rec in recommendations or []:
        if not rec:
            continue
        task_type = recommendation_field(rec, "task_type", "taskType")
        model_id = recommendation_field(rec, "recommended_model", "recommendedModel", "model")
        if not task_type or not model_id:
            continue
        labels[task_type] = labeler.label(model_id)
    return labels


def apply_recommendations_to_document(
    document: RoutingDocument,
    labels_by_task_type: Mapping[str, str],
) -> ChangeSet:
    """
    Build a ChangeSet rewriting every rule whose task type has a new label.

    Lines whose rewritten text equals the original are omitted, so a
    recommendation set that keeps every current model yields no
    modified lines.
    """
    new_lines = list(document.lines)
    modified: list[ModifiedLine] = []

    for kind, rule in document.iter_rules():
        updated = rule.text
        for match in rule.matches:
            label = labels_by_task_type.get(match.task_type)
            if not label:
                continue
            updated = replace_model_for_task(updated, match.task_type, match.description, label)

        if updated == rule.text:
            continue

        new_lines[rule.line_number - 1] = updated
        modified.append(
            ModifiedLine(
                line_number=rule.line_number,
                section=kind.value,
                before=rule.text,
                after=updated,
                task_types=[m.task_type for m in rule.matches],
            )
        )

    logger.debug(f"Rewrote {len(modified)} routing line(s)")
    return ChangeSet(
        path=document.path,
        resolved_path=document.resolved_path,
        original_content=document.content,
        proposed_content=join_lines(new_lines),
        modified_lines=modified,
    )


def build_single_item_change_set(change_set: ChangeSet, modified_line: ModifiedLine) -> ChangeSet:
    """A ChangeSet with the same original content but only one line edited."""
    lines = split_lines(change_set.original_content)
    lines[modified_line.line_number - 1] = modified_line.after
    return ChangeSet(
        path=change_set.path,
        resolved_path=change_set.resolved_path,
        original_content=change_set.original_content,
        proposed_content=join_lines(lines),
        modified_lines=[modified_line.model_copy()],
    )
