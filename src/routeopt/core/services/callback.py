"""
Callback service: advances approval batches from chat button presses.

Item tokens record a decision. Once every item is decided, the final
confirmation (Apply Approved / Cancel Batch) is sent exactly once. The
final apply rebuilds the change set of approved items and writes it
through the apply engine, which re-checks the live document for drift
and rolls back on any failure.
"""

import logging

from routeopt.core.approval.callbacks import (
    CALLBACK_LIMIT,
    NAMESPACE,
    CallbackCommand,
    CallbackKind,
    decision_for_action,
    parse_callback,
)
from routeopt.core.approval.exceptions import (
    BatchNotFoundError,
    BatchNotPendingError,
    BatchNotReadyError,
    UnknownCallbackError,
)
from routeopt.core.approval.store import ApprovalBatchStore
from routeopt.core.catalog import RoutingTables
from routeopt.core.config.models import RouteoptConfig
from routeopt.core.exceptions import NotificationError
from routeopt.core.notify.messages import final_confirmation
from routeopt.core.notify.messenger import Notifier
from routeopt.core.routing.apply import apply_change_set
from routeopt.core.services import wiring
from routeopt.core.services.models import CallbackOutcome

logger = logging.getLogger(__name__)


class CallbackService:
    """Handles inbound callback data for approval batches."""

    def __init__(
        self,
        *,
        store: ApprovalBatchStore,
        notifier: Notifier,
        tables: RoutingTables,
        namespace: str = NAMESPACE,
        callback_limit: int = CALLBACK_LIMIT,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.tables = tables
        self.namespace = namespace
        self.callback_limit = callback_limit

    @classmethod
    def from_config(cls, config: RouteoptConfig, notifier: Notifier | None = None) -> "CallbackService":
        return cls(
            store=wiring.build_store(config),
            notifier=notifier or wiring.build_notifier(config),
            tables=wiring.build_tables(config),
            namespace=config.notify.callback_namespace,
            callback_limit=config.notify.callback_limit,
        )

    def handle(self, raw: str) -> CallbackOutcome:
        """
        Apply one callback.

        Raises:
            UnknownCallbackError: raw is not an item or final token
            BatchNotFoundError: The token names no stored batch
            BatchNotPendingError: The batch is already terminal
            InvalidIndexError: The item index is outside the batch
            BatchNotReadyError: Final apply while items are still pending
            StaleDocumentError: The routing document changed since the run
        """
        command = parse_callback(raw, self.namespace)
        if not command.handled:
            raise UnknownCallbackError(command.raw)

        batch_id = self.store.resolve_batch_id(command.batch_id or "")
        if batch_id is None:
            raise BatchNotFoundError(command.batch_id or "")

        if command.kind is CallbackKind.ITEM:
            return self._handle_item(command, batch_id)
        if command.action == "cancel":
            return self._handle_cancel(batch_id)
        return self._handle_apply(batch_id)

    def _handle_item(self, command: CallbackCommand, batch_id: str) -> CallbackOutcome:
        decision = decision_for_action(command.action or "")
        item_index = command.item_index or 0
        batch = self.store.set_item_decision(batch_id, item_index, decision)
        summary = self.store.summarize(batch)
        logger.info(
            f"Item recorded: batch={batch_id} item={item_index} decision={decision.value} "
            f"(approved={summary.approved}, kept={summary.kept}, "
            f"rejected={summary.rejected}, pending={summary.pending})"
        )

        sent = False
        if self.store.is_ready_for_final_confirmation(batch) and not batch.final_request_sent:
            text, buttons = final_confirmation(batch_id, summary, self.namespace, self.callback_limit)
            try:
                self.notifier.send_message(text, buttons=buttons)
            except NotificationError as e:
                logger.warning(f"Failed to send final confirmation for {batch_id}: {e}")
            else:
                batch = self.store.mark_final_request_sent(batch_id)
                sent = True

        return CallbackOutcome(
            kind=CallbackKind.ITEM.value,
            action=command.action or "",
            batch_id=batch_id,
            item_index=item_index,
            batch_status=batch.status.value,
            message=f"Item {item_index} {decision.value} ({summary.pending} pending)",
            final_request_sent=sent,
        )

    def _handle_cancel(self, batch_id: str) -> CallbackOutcome:
        batch = self.store.cancel_batch(batch_id)
        return CallbackOutcome(
            kind=CallbackKind.FINAL.value,
            action="cancel",
            batch_id=batch_id,
            batch_status=batch.status.value,
            message=f"Batch cancelled: {batch_id}",
        )

    def _handle_apply(self, batch_id: str) -> CallbackOutcome:
        batch = self.store.get_batch(batch_id)
        if batch is None:
            raise BatchNotFoundError(batch_id)
        if not self.store.is_ready_for_final_confirmation(batch):
            if batch.status.is_terminal:
                raise BatchNotPendingError(batch_id, batch.status.value)
            raise BatchNotReadyError(batch_id, self.store.summarize(batch).pending)

        change_set = self.store.build_apply_change_set(batch)
        if not change_set.modified_lines:
            batch = self.store.complete_batch(batch_id, 0)
            return CallbackOutcome(
                kind=CallbackKind.FINAL.value,
                action="apply",
                batch_id=batch_id,
                batch_status=batch.status.value,
                message=f"Batch completed as no-op: {batch_id}",
            )

        result = apply_change_set(batch.soul_path, change_set, dry_run=False, tables=self.tables)
        applied = len(change_set.modified_lines)
        batch = self.store.complete_batch(batch_id, applied, result.backup_path)
        return CallbackOutcome(
            kind=CallbackKind.FINAL.value,
            action="apply",
            batch_id=batch_id,
            batch_status=batch.status.value,
            message=f"Applied {applied} approved item(s). Backup: {result.backup_path or 'none'}",
            modified_lines=applied,
            backup_path=result.backup_path,
        )
