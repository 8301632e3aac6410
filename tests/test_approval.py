"""
Tests for approval batches, the batch store and callback tokens.
"""

import json

import pytest

from routeopt.core.approval import (
    ApprovalBatchStore,
    ApprovalStatus,
    BatchExistsError,
    BatchNotFoundError,
    BatchNotPendingError,
    BatchStatus,
    CallbackKind,
    EmptyBatchError,
    InvalidIndexError,
    build_final_token,
    build_item_token,
    decision_for_action,
    parse_callback,
)
from routeopt.core.approval.callbacks import hash_batch_id, sanitize_batch_id
from routeopt.core.routing import apply_recommendations_to_document, parse_document, validate_change_set

LABELS = {
    "code-changes": "Claude Sonnet",
    "debugging": "DeepSeek Reasoner",
    "summaries": "DeepSeek Chat",
}


@pytest.fixture
def change_set(soul_text, tables):
    """Three modified lines: Code changes, Debugging and Summaries."""
    doc = parse_document(soul_text, tables, path="SOUL.md", resolved_path="/tmp/SOUL.md")
    return apply_recommendations_to_document(doc, LABELS)


@pytest.fixture
def batch(store, change_set):
    return store.create_batch(
        "weekly-2026-02-01",
        "/tmp/SOUL.md",
        "/tmp/report.md",
        ApprovalBatchStore.build_items(change_set),
        metadata={"mode": "apply"},
    )


# ==============================================================================
# Items
# ==============================================================================


class TestBuildItems:
    """Test splitting a change set into approval items."""

    def test_one_item_per_line(self, change_set):
        items = ApprovalBatchStore.build_items(change_set)

        assert [item.item_index for item in items] == [1, 2, 3]
        assert [item.line_number for item in items] == [16, 17, 18]
        assert items[0].before == "- Code changes: Claude Haiku first, then review"
        assert items[0].after == "- Code changes: Claude Sonnet first, then review"
        assert all(item.status is ApprovalStatus.PENDING for item in items)

    def test_item_change_sets_are_single_line(self, change_set):
        for item in ApprovalBatchStore.build_items(change_set):
            assert len(item.changes.modified_lines) == 1
            assert item.changes.original_content == change_set.original_content
            assert validate_change_set(item.changes).valid


# ==============================================================================
# Store
# ==============================================================================


class TestBatchStore:
    """Test persistence and lookups."""

    def test_create_persists_pending_batch(self, store, batch):
        path = store.directory / "batch-weekly-2026-02-01.json"
        assert path.exists()

        payload = json.loads(path.read_text())
        assert payload["batchId"] == "weekly-2026-02-01"
        assert payload["status"] == "pending"
        assert payload["finalRequestSent"] is False
        assert len(payload["items"]) == 3
        assert payload["metadata"] == {"mode": "apply"}

        loaded = store.get_batch("weekly-2026-02-01")
        assert loaded.to_json_dict() == batch.to_json_dict()

    def test_duplicate_id_rejected(self, store, batch, change_set):
        with pytest.raises(BatchExistsError):
            store.create_batch(batch.batch_id, "/tmp/OTHER.md", None, ApprovalBatchStore.build_items(change_set))

        store.cancel_batch(batch.batch_id)
        with pytest.raises(BatchExistsError):
            store.create_batch(batch.batch_id, "/tmp/OTHER.md", None, [])
        assert store.get_batch(batch.batch_id).soul_path == "/tmp/SOUL.md"

    def test_sanitized_id_collision_rejected(self, store):
        store.create_batch("weekly 2026:02", "/tmp/SOUL.md", None, [])
        with pytest.raises(BatchExistsError):
            store.create_batch("weekly_2026_02", "/tmp/SOUL.md", None, [])

    def test_get_missing_batch(self, store):
        assert store.get_batch("nope") is None

    def test_unsafe_ids_are_sanitized(self, store):
        store.create_batch("weekly 2026:02", "/tmp/SOUL.md", None, [])
        assert (store.directory / "batch-weekly_2026_02.json").exists()
        assert store.resolve_batch_id("weekly_2026_02") == "weekly 2026:02"

    def test_resolve_hashed_id(self, store):
        batch_id = "weekly-" + "x" * 60
        store.create_batch(batch_id, "/tmp/SOUL.md", None, [])

        assert store.resolve_batch_id(hash_batch_id(sanitize_batch_id(batch_id))) == batch_id
        assert store.resolve_batch_id("unknown") is None

    def test_list_skips_unreadable_records(self, store, batch):
        (store.directory / "batch-broken.json").write_text("{broken")
        assert store.list_batch_ids() == ["weekly-2026-02-01"]

    def test_list_without_directory(self, tmp_path):
        assert ApprovalBatchStore(tmp_path / "empty").list_batches() == []


class TestDecisions:
    """Test per-item decisions and the batch state machine."""

    def test_record_decision(self, store, batch):
        updated = store.set_item_decision(batch.batch_id, 2, ApprovalStatus.REJECTED)

        item = updated.item(2)
        assert item.status is ApprovalStatus.REJECTED
        assert item.decided_at is not None
        assert store.get_batch(batch.batch_id).item(2).status is ApprovalStatus.REJECTED

    def test_last_decision_wins(self, store, batch):
        store.set_item_decision(batch.batch_id, 1, "rejected")
        store.set_item_decision(batch.batch_id, 1, "approved")
        assert store.get_batch(batch.batch_id).item(1).status is ApprovalStatus.APPROVED

    @pytest.mark.parametrize("index", [0, 4])
    def test_index_out_of_range(self, store, batch, index):
        with pytest.raises(InvalidIndexError) as exc_info:
            store.set_item_decision(batch.batch_id, index, "approved")
        assert str(exc_info.value) == f"Invalid item index {index} for batch weekly-2026-02-01 (expected 1..3)"

    def test_not_a_decision(self, store, batch):
        with pytest.raises(ValueError):
            store.set_item_decision(batch.batch_id, 1, "pending")

    def test_missing_batch(self, store):
        with pytest.raises(BatchNotFoundError) as exc_info:
            store.set_item_decision("missing", 1, "approved")
        assert str(exc_info.value) == "Approval batch not found: missing"

    def test_terminal_batch_rejects_decisions(self, store, batch):
        store.cancel_batch(batch.batch_id)
        with pytest.raises(BatchNotPendingError) as exc_info:
            store.set_item_decision(batch.batch_id, 1, "approved")
        assert exc_info.value.status == "cancelled"

    def test_ready_only_when_all_decided(self, store, batch):
        assert not store.is_ready_for_final_confirmation(batch)
        store.set_item_decision(batch.batch_id, 1, "approved")
        store.set_item_decision(batch.batch_id, 2, "kept")
        assert not store.is_ready_for_final_confirmation(store.get_batch(batch.batch_id))

        store.set_item_decision(batch.batch_id, 3, "rejected")
        ready = store.get_batch(batch.batch_id)
        assert store.is_ready_for_final_confirmation(ready)
        summary = store.summarize(ready)
        assert (summary.approved, summary.kept, summary.rejected, summary.pending) == (1, 1, 1, 0)

    def test_empty_batch_never_ready(self, store):
        empty = store.create_batch("empty", "/tmp/SOUL.md", None, [])
        assert not store.is_ready_for_final_confirmation(empty)

    def test_mark_final_request_sent(self, store, batch):
        store.mark_final_request_sent(batch.batch_id)
        assert store.get_batch(batch.batch_id).final_request_sent


class TestLifecycle:
    """Test terminal transitions."""

    def test_complete_with_changes(self, store, batch):
        done = store.complete_batch(batch.batch_id, 2, "/tmp/SOUL.md.bak")

        assert done.status is BatchStatus.APPLIED
        assert done.applied_at is not None
        assert done.apply_result.modified_lines == 2
        assert done.apply_result.backup_path == "/tmp/SOUL.md.bak"

    def test_complete_without_changes(self, store, batch):
        done = store.complete_batch(batch.batch_id, 0)
        assert done.status is BatchStatus.COMPLETED_NOOP
        assert done.completed_at is not None
        assert done.apply_result is None

    def test_cancel(self, store, batch):
        cancelled = store.cancel_batch(batch.batch_id)
        assert cancelled.status is BatchStatus.CANCELLED
        with pytest.raises(BatchNotPendingError):
            store.cancel_batch(batch.batch_id)

    def test_expire_all_only_touches_pending(self, store, batch, change_set):
        other = store.create_batch("older", "/tmp/SOUL.md", None, ApprovalBatchStore.build_items(change_set))
        store.cancel_batch(other.batch_id)
        store.set_item_decision(batch.batch_id, 1, "approved")

        assert store.expire_all("superseded by new weekly run") == 1

        expired = store.get_batch(batch.batch_id)
        assert expired.status is BatchStatus.EXPIRED
        assert expired.expire_reason == "superseded by new weekly run"
        assert [item.status for item in expired.items] == [
            ApprovalStatus.APPROVED,
            ApprovalStatus.EXPIRED,
            ApprovalStatus.EXPIRED,
        ]
        assert store.get_batch("older").status is BatchStatus.CANCELLED

    def test_expire_all_with_nothing_pending(self, store):
        assert store.expire_all("superseded") == 0


class TestApplyChangeSet:
    """Test rebuilding the approved change set."""

    def test_only_approved_items(self, store, batch, soul_text):
        store.set_item_decision(batch.batch_id, 1, "approved")
        store.set_item_decision(batch.batch_id, 2, "approved")
        store.set_item_decision(batch.batch_id, 3, "kept")

        change_set = store.build_apply_change_set(store.get_batch(batch.batch_id))

        assert [line.line_number for line in change_set.modified_lines] == [16, 17]
        lines = change_set.proposed_content.split("\n")
        assert lines[15] == "- Code changes: Claude Sonnet first, then review"
        assert lines[16] == "- Debugging: DeepSeek Reasoner"
        assert lines[17] == "- Summaries: Gemini 3 Flash"
        assert change_set.original_content == soul_text
        assert validate_change_set(change_set).valid

    def test_nothing_approved(self, store, batch, soul_text):
        for index in (1, 2, 3):
            store.set_item_decision(batch.batch_id, index, "rejected")

        change_set = store.build_apply_change_set(store.get_batch(batch.batch_id))
        assert change_set.modified_lines == []
        assert change_set.proposed_content == soul_text

    def test_crlf_preserved(self, store, soul_text, tables):
        crlf = soul_text.replace("\n", "\r\n")
        doc = parse_document(crlf, tables)
        items = ApprovalBatchStore.build_items(apply_recommendations_to_document(doc, LABELS))
        batch = store.create_batch("crlf", "/tmp/SOUL.md", None, items)
        store.set_item_decision("crlf", 2, "approved")

        change_set = store.build_apply_change_set(store.get_batch(batch.batch_id))
        assert "\r\n- Debugging: DeepSeek Reasoner\r\n" in change_set.proposed_content

    def test_mixed_line_endings(self, store, soul_text, tables):
        mixed = soul_text.replace("- Debugging: Claude Haiku\n", "- Debugging: Claude Haiku\r\n")
        items = ApprovalBatchStore.build_items(apply_recommendations_to_document(parse_document(mixed, tables), LABELS))
        store.create_batch("mixed", "/tmp/SOUL.md", None, items)
        store.set_item_decision("mixed", 2, "approved")

        change_set = store.build_apply_change_set(store.get_batch("mixed"))
        assert change_set.proposed_content == mixed.replace("Claude Haiku\r", "DeepSeek Reasoner\r")
        assert validate_change_set(change_set).valid

    def test_empty_batch(self, store):
        empty = store.create_batch("empty", "/tmp/SOUL.md", None, [])
        with pytest.raises(EmptyBatchError):
            store.build_apply_change_set(empty)


# ==============================================================================
# Callback Tokens
# ==============================================================================


class TestCallbackTokens:
    """Test building and parsing callback tokens."""

    def test_item_token(self):
        assert build_item_token("approve", "weekly-2026-02-01", 3) == "opt:item:approve:weekly-2026-02-01:3"

    def test_final_token(self):
        assert build_final_token("cancel", "weekly-2026-02-01") == "opt:final:cancel:weekly-2026-02-01"

    def test_unknown_actions(self):
        with pytest.raises(ValueError):
            build_item_token("apply", "b", 1)
        with pytest.raises(ValueError):
            build_final_token("approve", "b")

    def test_long_ids_are_hashed(self):
        batch_id = "weekly-" + "x" * 60
        token = build_item_token("keep", batch_id, 12)

        assert len(token) <= 64
        assert token == f"opt:item:keep:{hash_batch_id(batch_id)}:12"

    def test_limit_too_small_for_hashed_token(self):
        with pytest.raises(ValueError, match="exceeds the 24-character limit"):
            build_item_token("approve", "weekly-" + "x" * 60, 3, limit=24)
        with pytest.raises(ValueError):
            build_final_token("cancel", "weekly-" + "x" * 60, namespace="optimizer", limit=24)

    def test_unsafe_characters_sanitized(self):
        assert build_final_token("apply", "weekly 2026:02") == "opt:final:apply:weekly_2026_02"

    def test_parse_item(self):
        command = parse_callback("opt:item:reject:weekly-1:2")
        assert command.kind is CallbackKind.ITEM
        assert (command.action, command.batch_id, command.item_index) == ("reject", "weekly-1", 2)
        assert command.handled

    def test_parse_final_with_label(self):
        command = parse_callback("callback_data: opt:final:apply:weekly-1")
        assert command.kind is CallbackKind.FINAL
        assert command.action == "apply"
        assert command.batch_id == "weekly-1"

    @pytest.mark.parametrize(
        "raw",
        ["", "hello", "opt:item:approve:weekly-1", "opt:approve:weekly-1", "opt:final:delete:weekly-1"],
    )
    def test_unrecognized(self, raw):
        command = parse_callback(raw)
        assert command.kind is CallbackKind.UNKNOWN
        assert not command.handled

    def test_namespace_must_match(self):
        assert parse_callback("opt:final:apply:weekly-1", namespace="rt").kind is CallbackKind.UNKNOWN
        assert parse_callback("rt:final:apply:weekly-1", namespace="rt").kind is CallbackKind.FINAL

    def test_decision_for_action(self):
        assert decision_for_action("keep") is ApprovalStatus.KEPT
        with pytest.raises(ValueError):
            decision_for_action("apply")
