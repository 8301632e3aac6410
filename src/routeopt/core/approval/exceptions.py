"""
Exceptions for the approval batch store.

Exception Hierarchy:
    ApprovalError (base)
    ├── BatchNotFoundError (no record for the batch id)
    ├── BatchExistsError (a record already uses the batch id)
    ├── InvalidIndexError (item index outside 1..len(items))
    ├── BatchNotPendingError (batch already in a terminal state)
    ├── EmptyBatchError (batch has no items to rebuild a change set from)
    ├── BatchNotReadyError (final apply requested while items are undecided)
    └── UnknownCallbackError (callback data is not an item or final token)
"""

from routeopt.core.exceptions import RouteoptError


class ApprovalError(RouteoptError):
    """Base exception for approval store errors."""


class BatchNotFoundError(ApprovalError):
    """Raised when a batch id has no stored record."""

    def __init__(self, batch_id: str) -> None:
        super().__init__(f"Approval batch not found: {batch_id}", batch_id=batch_id)
        self.batch_id = batch_id


class BatchExistsError(ApprovalError):
    """Raised when creating a batch whose id already has a record."""

    def __init__(self, batch_id: str, path: str) -> None:
        super().__init__(f"Approval batch already exists: {batch_id}", batch_id=batch_id, path=path)
        self.batch_id = batch_id


class InvalidIndexError(ApprovalError):
    """
    Raised when an item index is outside the batch.

    Attributes:
        batch_id: Batch the decision was addressed to
        index: Requested 1-based item index
        total: Number of items in the batch
    """

    def __init__(self, batch_id: str, index: int, total: int) -> None:
        super().__init__(
            f"Invalid item index {index} for batch {batch_id} (expected 1..{total})",
            batch_id=batch_id,
            index=index,
            total=total,
        )
        self.batch_id = batch_id
        self.index = index
        self.total = total


class BatchNotPendingError(ApprovalError):
    """Raised when a decision or final action targets a terminal batch."""

    def __init__(self, batch_id: str, status: str) -> None:
        super().__init__(
            f"Approval batch {batch_id} is {status}; no further actions are accepted",
            batch_id=batch_id,
            status=status,
        )
        self.batch_id = batch_id
        self.status = status


class EmptyBatchError(ApprovalError):
    """Raised when a batch has no items."""

    def __init__(self, batch_id: str) -> None:
        super().__init__(f"Approval batch {batch_id} has no changes", batch_id=batch_id)
        self.batch_id = batch_id


class BatchNotReadyError(ApprovalError):
    """Raised when final apply is requested before every item is decided."""

    def __init__(self, batch_id: str, pending: int) -> None:
        super().__init__(
            "Batch is not ready for final apply; pending items remain.",
            batch_id=batch_id,
            pending=pending,
        )
        self.batch_id = batch_id
        self.pending = pending


class UnknownCallbackError(ApprovalError):
    """Raised when callback data is not a recognized token."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Unrecognized callback input: {raw}", raw=raw)
        self.raw = raw


__all__ = [
    "ApprovalError",
    "BatchNotFoundError",
    "InvalidIndexError",
    "BatchNotPendingError",
    "EmptyBatchError",
    "BatchNotReadyError",
    "UnknownCallbackError",
]
