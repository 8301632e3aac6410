"""
File-backed approval batch store.

One JSON record per batch at <data_dir>/pending/batch-<safe id>.json,
where the safe id replaces every character outside [A-Za-z0-9._-] with
an underscore. Records are read, mutated and written back whole; writes
go through a temp file and rename so a crash never leaves a half-written
record. Concurrent decisions on the same batch are last-write-wins.

Batch lifecycle:
    pending -> applied | completed-noop   (final apply)
    pending -> cancelled                  (final cancel)
    pending -> expired                    (superseded by a new run)

Example:
    >>> store = ApprovalBatchStore(Path("data"))
    >>> batch = store.create_batch("weekly-1", "SOUL.md", None, items)
    >>> store.set_item_decision("weekly-1", 1, ApprovalStatus.APPROVED)
    >>> store.is_ready_for_final_confirmation(store.get_batch("weekly-1"))
    True
"""

import json
import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from routeopt.core.approval.callbacks import hash_batch_id, sanitize_batch_id
from routeopt.core.approval.exceptions import (
    BatchExistsError,
    BatchNotFoundError,
    BatchNotPendingError,
    EmptyBatchError,
    InvalidIndexError,
)
from routeopt.core.approval.models import (
    ApplyOutcome,
    ApprovalBatch,
    ApprovalItem,
    ApprovalStatus,
    BatchStatus,
    BatchSummary,
)
from routeopt.core.fileio import utc_now, write_json_atomic
from routeopt.core.routing.models import ChangeSet
from routeopt.core.routing.parser import join_lines, split_lines
from routeopt.core.routing.rewriter import build_single_item_change_set

logger = logging.getLogger(__name__)

PENDING_DIR = "pending"
DECISIONS = (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.KEPT)


class ApprovalBatchStore:
    """
    Persists approval batches and enforces their state machine.

    Attributes:
        directory: Directory holding the batch records
    """

    def __init__(self, data_dir: Path, clock: Callable[[], datetime] = utc_now) -> None:
        """
        Args:
            data_dir: Data root; records live in its pending/ subdirectory
            clock: Returns the current UTC time (decision and state timestamps)
        """
        self.directory = Path(data_dir) / PENDING_DIR
        self.clock = clock

    def path_for(self, batch_id: str) -> Path:
        return self.directory / f"batch-{sanitize_batch_id(batch_id)}.json"

    # Persistence

    def get_batch(self, batch_id: str) -> ApprovalBatch | None:
        """Load a batch, or None if it has no record."""
        path = self.path_for(batch_id)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return ApprovalBatch.model_validate(json.load(f))

    def save_batch(self, batch: ApprovalBatch) -> Path:
        return write_json_atomic(self.path_for(batch.batch_id), batch.to_json_dict())

    def list_batches(self) -> list[ApprovalBatch]:
        """Every readable batch, oldest first. Unreadable records are skipped."""
        if not self.directory.exists():
            return []

        batches: list[ApprovalBatch] = []
        for path in sorted(self.directory.glob("batch-*.json")):
            try:
                with open(path, encoding="utf-8") as f:
                    batches.append(ApprovalBatch.model_validate(json.load(f)))
            except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
                logger.warning(f"Skipping unreadable approval batch {path.name}: {e}")
        batches.sort(key=lambda batch: batch.created_at)
        return batches

    def list_batch_ids(self) -> list[str]:
        return [batch.batch_id for batch in self.list_batches()]

    def resolve_batch_id(self, token_id: str) -> str | None:
        """
        Map the batch id carried by a callback token back to a stored batch.

        Tokens carry either the sanitized id or, when that made the token
        too long, a short digest of it.
        """
        if self.path_for(token_id).exists():
            batch = self.get_batch(token_id)
            return batch.batch_id if batch else token_id
        for batch_id in self.list_batch_ids():
            safe = sanitize_batch_id(batch_id)
            if token_id in (safe, hash_batch_id(safe)):
                return batch_id
        return None

    def _require(self, batch_id: str) -> ApprovalBatch:
        batch = self.get_batch(batch_id)
        if batch is None:
            raise BatchNotFoundError(batch_id)
        return batch

    def _require_pending(self, batch_id: str) -> ApprovalBatch:
        batch = self._require(batch_id)
        if batch.status.is_terminal:
            raise BatchNotPendingError(batch_id, batch.status.value)
        return batch

    # Lifecycle

    def create_batch(
        self,
        batch_id: str,
        soul_path: str,
        report_path: str | None,
        items: Sequence[ApprovalItem],
        metadata: dict[str, Any] | None = None,
    ) -> ApprovalBatch:
        """
        Persist a new pending batch; every item starts pending.

        Raises:
            BatchExistsError: If a record already uses the (sanitized) id
        """
        path = self.path_for(batch_id)
        if path.exists():
            raise BatchExistsError(batch_id, str(path))

        batch = ApprovalBatch(
            batch_id=batch_id,
            soul_path=soul_path,
            report_path=report_path,
            created_at=self.clock(),
            status=BatchStatus.PENDING,
            final_request_sent=False,
            items=[
                item.model_copy(update={"status": ApprovalStatus.PENDING, "decided_at": None})
                for item in items
            ],
            metadata=dict(metadata or {}),
        )
        self.save_batch(batch)
        logger.info(f"Created approval batch {batch_id} with {len(batch.items)} item(s)")
        return batch

    def set_item_decision(
        self,
        batch_id: str,
        item_index: int,
        decision: ApprovalStatus | str,
    ) -> ApprovalBatch:
        """
        Record the operator's decision for one item.

        Re-deciding an item is allowed; the last decision wins.

        Raises:
            BatchNotFoundError: If the batch has no record
            BatchNotPendingError: If the batch is terminal
            InvalidIndexError: If item_index is outside 1..len(items)
            ValueError: If decision is not approved, rejected or kept
        """
        decision = ApprovalStatus(decision)
        if decision not in DECISIONS:
            raise ValueError(f"Not a decision: {decision.value}")

        batch = self._require_pending(batch_id)
        item = batch.item(item_index)
        if item is None:
            raise InvalidIndexError(batch_id, item_index, len(batch.items))

        item.status = decision
        item.decided_at = self.clock()
        self.save_batch(batch)
        logger.debug(f"Batch {batch_id} item {item_index} -> {decision.value}")
        return batch

    def mark_final_request_sent(self, batch_id: str) -> ApprovalBatch:
        batch = self._require_pending(batch_id)
        batch.final_request_sent = True
        self.save_batch(batch)
        return batch

    def cancel_batch(self, batch_id: str) -> ApprovalBatch:
        batch = self._require_pending(batch_id)
        batch.status = BatchStatus.CANCELLED
        batch.cancelled_at = self.clock()
        self.save_batch(batch)
        logger.info(f"Cancelled approval batch {batch_id}")
        return batch

    def complete_batch(
        self,
        batch_id: str,
        applied_lines: int,
        backup_path: str | None = None,
    ) -> ApprovalBatch:
        """
        Close a batch after the final apply.

        With zero applied lines the batch becomes completed-noop; otherwise
        applied, with the backup path of the write.
        """
        batch = self._require_pending(batch_id)
        now = self.clock()
        if applied_lines == 0:
            batch.status = BatchStatus.COMPLETED_NOOP
            batch.completed_at = now
        else:
            batch.status = BatchStatus.APPLIED
            batch.applied_at = now
            batch.apply_result = ApplyOutcome(modified_lines=applied_lines, backup_path=backup_path)
        self.save_batch(batch)
        logger.info(f"Approval batch {batch_id} -> {batch.status.value}")
        return batch

    def expire_all(self, reason: str) -> int:
        """
        Expire every pending batch and its undecided items.

        Returns:
            Number of batches expired
        """
        touched = 0
        now = self.clock()
        for batch in self.list_batches():
            if batch.status.is_terminal:
                continue
            batch.status = BatchStatus.EXPIRED
            batch.expired_at = now
            batch.expire_reason = reason
            for item in batch.items:
                if item.status is ApprovalStatus.PENDING:
                    item.status = ApprovalStatus.EXPIRED
            self.save_batch(batch)
            touched += 1
        if touched:
            logger.info(f"Expired {touched} approval batch(es): {reason}")
        return touched

    # Queries

    @staticmethod
    def summarize(batch: ApprovalBatch) -> BatchSummary:
        counts = {status: 0 for status in ApprovalStatus}
        for item in batch.items:
            counts[item.status] += 1
        return BatchSummary(
            total=len(batch.items),
            pending=counts[ApprovalStatus.PENDING],
            approved=counts[ApprovalStatus.APPROVED],
            rejected=counts[ApprovalStatus.REJECTED],
            kept=counts[ApprovalStatus.KEPT],
            expired=counts[ApprovalStatus.EXPIRED],
        )

    @classmethod
    def is_ready_for_final_confirmation(cls, batch: ApprovalBatch) -> bool:
        """Pending batch with at least one item and no undecided items."""
        summary = cls.summarize(batch)
        return batch.status is BatchStatus.PENDING and summary.total > 0 and summary.pending == 0

    @staticmethod
    def build_apply_change_set(batch: ApprovalBatch) -> ChangeSet:
        """
        Rebuild one document-level change set from the approved items.

        Starts from the original content captured with the first item and
        replays each approved item's line edit onto it.

        Raises:
            EmptyBatchError: If the batch has no items
        """
        if not batch.items:
            raise EmptyBatchError(batch.batch_id)

        base = batch.items[0].changes
        lines = split_lines(base.original_content)
        modified = []
        for item in batch.items:
            if item.status is not ApprovalStatus.APPROVED:
                continue
            for line in item.changes.modified_lines:
                lines[line.line_number - 1] = line.after
                modified.append(line.model_copy())

        return ChangeSet(
            path=base.path,
            resolved_path=base.resolved_path,
            original_content=base.original_content,
            proposed_content=join_lines(lines),
            modified_lines=modified,
        )

    @staticmethod
    def build_items(change_set: ChangeSet) -> list[ApprovalItem]:
        """One pending item per modified line, each with its own single-line change set."""
        return [
            ApprovalItem(
                item_index=index,
                line_number=line.line_number,
                before=line.before.strip(),
                after=line.after.strip(),
                changes=build_single_item_change_set(change_set, line),
            )
            for index, line in enumerate(change_set.modified_lines, start=1)
        ]
