"""
Committing change sets to the live routing document.

apply_change_set() validates first and never writes an invalid change set.
A real apply then follows a fixed sequence:

    1. re-read the live document; stop with StaleDocumentError on drift
    2. write a timestamped backup next to it
    3. write the proposed content
    4. re-read and compare byte for byte
    5. re-parse and check that every routing section is still present

Any failure after step 2 restores the document from the backup and
re-raises the original error.
"""

import logging
from collections.abc import Collection, Iterable
from pathlib import Path
from typing import Any

from pydantic import Field

from routeopt.core.catalog import RoutingTables
from routeopt.core.fileio import filesystem_stamp, read_text_exact, write_text_exact
from routeopt.core.routing.diff import render_change_set
from routeopt.core.routing.exceptions import (
    PostWriteVerificationError,
    StaleDocumentError,
    ValidationError,
)
from routeopt.core.routing.labels import ModelLabeler
from routeopt.core.routing.models import ApplyResult, ChangeSet, RoutingModel
from routeopt.core.routing.parser import parse_document, read_document, resolve_home_path
from routeopt.core.routing.rewriter import (
    apply_recommendations_to_document,
    recommendation_field,
    recommendations_to_label_map,
)
from routeopt.core.routing.sections import SECTION_ORDER
from routeopt.core.routing.validator import validate_change_set

logger = logging.getLogger(__name__)


def backup_path_for(path: Path) -> Path:
    """Timestamped backup location next to the document."""
    return path.with_name(f"{path.name}.bak.{filesystem_stamp()}")


def _verify_written(path: Path, change_set: ChangeSet, tables: RoutingTables) -> None:
    written = read_text_exact(path)
    if written != change_set.proposed_content:
        raise PostWriteVerificationError(
            "Post-write validation failed: written content mismatch.", path=str(path)
        )

    reparsed = parse_document(written, tables, path=str(path), resolved_path=str(path))
    for kind in SECTION_ORDER:
        if not reparsed.sections[kind].present:
            raise PostWriteVerificationError(
                f"Post-write validation failed: missing section {kind.value}.",
                path=str(path),
                section=kind.value,
            )


def apply_change_set(
    path: str | Path,
    change_set: ChangeSet,
    dry_run: bool = True,
    tables: RoutingTables | None = None,
) -> ApplyResult:
    """
    Apply a change set to the document at path.

    Args:
        path: Routing document path ('~' allowed)
        change_set: Change set computed against the document
        dry_run: When True, only validate and describe the result
        tables: Tables used for the post-write structural check

    Returns:
        ApplyResult describing what was (or would be) written

    Raises:
        ValidationError: Change set failed validation (nothing written)
        StaleDocumentError: Live document no longer matches the change set
        PostWriteVerificationError: Written content failed verification
            (document restored from backup)
        OSError: File system failures after the backup (document restored)
    """
    resolved = resolve_home_path(path)
    validation = validate_change_set(change_set)
    if not validation.valid:
        raise ValidationError(validation.errors)

    if dry_run:
        return ApplyResult(
            applied=False,
            dry_run=True,
            path=str(resolved),
            modified_lines=change_set.modified_lines,
            proposed_content=change_set.proposed_content,
        )

    existing = read_text_exact(resolved)
    if existing != change_set.original_content:
        raise StaleDocumentError(str(resolved))

    backup = backup_path_for(resolved)
    write_text_exact(backup, existing)
    logger.info(f"Backed up {resolved} to {backup}")

    try:
        write_text_exact(resolved, change_set.proposed_content)
        _verify_written(resolved, change_set, tables or RoutingTables.default())
    except Exception:
        logger.warning(f"Apply failed, restoring {resolved} from {backup}")
        write_text_exact(resolved, read_text_exact(backup))
        raise

    logger.info(f"Applied {len(change_set.modified_lines)} routing change(s) to {resolved}")
    return ApplyResult(
        applied=True,
        dry_run=False,
        path=str(resolved),
        backup_path=str(backup),
        modified_lines=change_set.modified_lines,
    )


class RoutingUpdate(RoutingModel):
    """Result of update_routing_config()."""

    dry_run: bool
    path: str
    recommendations_considered: int
    modified_count: int
    diff: str
    changes: ChangeSet
    result: ApplyResult
    labels: dict[str, str] = Field(default_factory=dict)


def update_routing_config(
    recommendations: Iterable[Any],
    path: str | Path,
    tables: RoutingTables,
    dry_run: bool = True,
    known_task_ids: Collection[str] | None = None,
) -> RoutingUpdate:
    """
    Parse, rewrite, validate, diff and (dry-)apply in one call.

    When known_task_ids is non-empty, only recommendations for those task
    types are considered.

    Raises:
        ParseError: Document cannot be read
        ValidationError: Rewritten change set is not structurally safe
    """
    considered = []
    for rec in recommendations or []:
        task_type = recommendation_field(rec, "task_type", "taskType") if rec else None
        if not task_type:
            continue
        if known_task_ids and task_type not in known_task_ids:
            continue
        considered.append(rec)

    document = read_document(path, tables)
    labels = recommendations_to_label_map(considered, ModelLabeler(tables.model_labels))
    changes = apply_recommendations_to_document(document, labels)

    validation = validate_change_set(changes)
    if not validation.valid:
        raise ValidationError(validation.errors, message="Invalid SOUL.md update set")

    result = apply_change_set(document.resolved_path, changes, dry_run=dry_run, tables=tables)
    return RoutingUpdate(
        dry_run=dry_run,
        path=document.resolved_path,
        recommendations_considered=len(considered),
        modified_count=len(changes.modified_lines),
        diff=render_change_set(changes),
        changes=changes,
        result=result,
        labels=labels,
    )
