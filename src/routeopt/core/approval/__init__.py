"""
Per-item approval of proposed routing edits.

Stores approval batches, tracks each item's decision and rebuilds the
change set of approved edits for the final apply.
"""

from routeopt.core.approval.callbacks import (
    CallbackCommand,
    CallbackKind,
    build_final_token,
    build_item_token,
    decision_for_action,
    parse_callback,
)
from routeopt.core.approval.exceptions import (
    ApprovalError,
    BatchExistsError,
    BatchNotFoundError,
    BatchNotPendingError,
    BatchNotReadyError,
    EmptyBatchError,
    InvalidIndexError,
    UnknownCallbackError,
)
from routeopt.core.approval.models import (
    ApprovalBatch,
    ApprovalItem,
    ApprovalStatus,
    BatchStatus,
    BatchSummary,
)
from routeopt.core.approval.store import ApprovalBatchStore

__all__ = [
    "ApprovalBatch",
    "ApprovalBatchStore",
    "ApprovalError",
    "BatchExistsError",
    "ApprovalItem",
    "ApprovalStatus",
    "BatchNotFoundError",
    "BatchNotPendingError",
    "BatchNotReadyError",
    "BatchStatus",
    "BatchSummary",
    "CallbackCommand",
    "CallbackKind",
    "EmptyBatchError",
    "InvalidIndexError",
    "UnknownCallbackError",
    "build_final_token",
    "build_item_token",
    "decision_for_action",
    "parse_callback",
]
