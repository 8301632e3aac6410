"""
Structural validation of change sets.

A change set is safe to apply only when it is a pure substitution of
declared bullet rule lines:

1. original and proposed content are strings
2. modified lines form a list
3. both contents have the same number of lines
4. every modified line names a known section
5. every modified line number exists in both contents
6. before and after are both bullet lines
7. before/after equal the original/proposed line at that number
8. the number of differing lines equals the number of declared lines

Every failed check adds a message; the change set is valid only when there
are none.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from routeopt.core.routing.models import ChangeSet, ModifiedLine, ValidationResult, is_bullet_line
from routeopt.core.routing.parser import split_lines
from routeopt.core.routing.sections import section_from_name


def _pick(payload: Mapping[str, Any], camel: str, snake: str) -> Any:
    return payload[camel] if camel in payload else payload.get(snake)


def _coerce(change_set: ChangeSet | Mapping[str, Any] | None) -> tuple[Any, Any, Any]:
    if isinstance(change_set, ChangeSet):
        return change_set.original_content, change_set.proposed_content, change_set.modified_lines
    return (
        _pick(change_set, "originalContent", "original_content"),
        _pick(change_set, "proposedContent", "proposed_content"),
        _pick(change_set, "modifiedLines", "modified_lines"),
    )


def validate_change_set(change_set: ChangeSet | Mapping[str, Any] | None) -> ValidationResult:
    """
    Validate a change set.

    Accepts a ChangeSet or a raw mapping (as read back from JSON), so that
    payloads with missing or mistyped fields are reported instead of
    failing model construction.

    Args:
        change_set: ChangeSet model or mapping with camelCase/snake_case keys

    Returns:
        ValidationResult with valid flag and every violation found
    """
    if not isinstance(change_set, (ChangeSet, Mapping)):
        return ValidationResult(valid=False, errors=["Changes payload is required."])

    original, proposed, raw_lines = _coerce(change_set)

    errors: list[str] = []
    if not isinstance(original, str) or not isinstance(proposed, str):
        errors.append("Changes must include originalContent and proposedContent strings.")
    if not isinstance(raw_lines, list):
        errors.append("Changes must include modifiedLines array.")
    if errors:
        return ValidationResult(valid=False, errors=errors)

    modified: list[ModifiedLine] = []
    for position, entry in enumerate(raw_lines, start=1):
        if isinstance(entry, ModifiedLine):
            modified.append(entry)
            continue
        try:
            modified.append(ModifiedLine.model_validate(entry))
        except PydanticValidationError:
            errors.append(f"Malformed modifiedLines entry {position}.")

    original_lines = split_lines(original)
    proposed_lines = split_lines(proposed)

    if len(original_lines) != len(proposed_lines):
        errors.append("Line count changed; destructive edits are not allowed.")

    for change in modified:
        number = change.line_number
        if section_from_name(change.section) is None:
            errors.append(f"Invalid section on line {number}: {change.section}")
            continue

        if not (1 <= number <= len(original_lines) and number <= len(proposed_lines)):
            errors.append(f"Invalid line reference: {number}")
            continue

        if not is_bullet_line(change.before) or not is_bullet_line(change.after):
            errors.append(f"Only bullet routing rules may be updated (line {number}).")

        if original_lines[number - 1] != change.before:
            errors.append(f"Before snapshot mismatch on line {number}.")

        if proposed_lines[number - 1] != change.after:
            errors.append(f"After snapshot mismatch on line {number}.")

    differing = sum(
        1 for before, after in zip(original_lines, proposed_lines) if before != after
    ) + abs(len(original_lines) - len(proposed_lines))
    if differing != len(raw_lines):
        errors.append("Detected diff count does not match modifiedLines; possible out-of-scope edits.")

    return ValidationResult(valid=not errors, errors=errors)
