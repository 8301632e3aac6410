"""Service inputs and outputs."""

from enum import Enum

from pydantic import BaseModel, Field


class RunMode(str, Enum):
    DRY_RUN = "dry-run"
    APPLY = "apply"


class WeeklyRunResult(BaseModel):
    """
    Outcome of one weekly run.

    Attributes:
        branch: Branch checked out in the working directory at run start
        modified_count: Lines the preview would change (actionable items)
        recommendation_count: Scored recommendations in the report
        batch_id: Approval batch created (apply mode only)
        items_sent: Approval messages delivered
        items_failed: Approval messages that failed to send
        summary_sent: Whether the business summary was delivered
    """

    mode: RunMode
    branch: str = "unknown"
    soul_path: str
    report_path: str
    models_analyzed: int
    providers: list[str] = Field(default_factory=list)
    known_tasks: int = 0
    unknown_tasks: int = 0
    newly_discovered: int = 0
    recommendation_count: int = 0
    modified_count: int = 0
    diff: str = ""
    expired_batches: int = 0
    batch_id: str | None = None
    items_sent: int = 0
    items_failed: int = 0
    summary_sent: bool = False


class CallbackOutcome(BaseModel):
    """What handling one callback did."""

    kind: str
    action: str
    batch_id: str
    item_index: int | None = None
    batch_status: str
    message: str
    final_request_sent: bool = False
    modified_lines: int = 0
    backup_path: str | None = None
