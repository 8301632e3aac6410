"""
Approval batch data models.

A batch is one weekly run's set of proposed SOUL.md edits. Each edit is an
item the operator decides on individually; the batch then waits for a
final apply/cancel confirmation.

Records are stored as camelCase JSON (batchId, finalRequestSent, ...).
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from routeopt.core.routing.models import ChangeSet, RoutingModel


class ApprovalStatus(str, Enum):
    """Per-item decision state."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    KEPT = "kept"
    EXPIRED = "expired"


class BatchStatus(str, Enum):
    """
    Batch lifecycle state.

    Only PENDING accepts decisions and final actions; every other state is
    terminal.
    """

    PENDING = "pending"
    APPLIED = "applied"
    CANCELLED = "cancelled"
    COMPLETED_NOOP = "completed-noop"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not BatchStatus.PENDING


class ApprovalItem(RoutingModel):
    """
    One proposed line edit awaiting a decision.

    Attributes:
        item_index: 1-based position in the batch
        line_number: Document line the edit targets
        before: Current line, trimmed
        after: Proposed line, trimmed
        changes: Change set scoped to this single edit
    """

    item_index: int = Field(..., ge=1)
    line_number: int
    before: str
    after: str
    status: ApprovalStatus = ApprovalStatus.PENDING
    decided_at: datetime | None = None
    changes: ChangeSet


class ApplyOutcome(RoutingModel):
    """What a final apply wrote."""

    modified_lines: int
    backup_path: str | None = None


class ApprovalBatch(RoutingModel):
    """A persisted approval batch."""

    batch_id: str
    soul_path: str
    report_path: str | None = None
    created_at: datetime
    status: BatchStatus = BatchStatus.PENDING
    final_request_sent: bool = False
    items: list[ApprovalItem] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    expired_at: datetime | None = None
    expire_reason: str | None = None
    cancelled_at: datetime | None = None
    completed_at: datetime | None = None
    applied_at: datetime | None = None
    apply_result: ApplyOutcome | None = None

    def item(self, item_index: int) -> ApprovalItem | None:
        if 1 <= item_index <= len(self.items):
            return self.items[item_index - 1]
        return None


class BatchSummary(RoutingModel):
    """Item counts by status."""

    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    kept: int = 0
    expired: int = 0
