"""
Tests for rewriting, diffing, validating and applying routing changes.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from routeopt.core.optimizer import Recommendation
from routeopt.core.routing import (
    ChangeSet,
    ModelLabeler,
    ModifiedLine,
    PostWriteVerificationError,
    StaleDocumentError,
    ValidationError,
    apply_change_set,
    apply_recommendations_to_document,
    generate_diff,
    parse_document,
    read_document,
    recommendations_to_label_map,
    render_change_set,
    replace_model_for_task,
    update_routing_config,
    validate_change_set,
)
from routeopt.core.routing.diff import NO_CHANGES

DEBUGGING_LINE = 17


def _recommendation(task_type: str, model: str) -> Recommendation:
    return Recommendation(
        task_type=task_type,
        recommended_model=model,
        score=9.0,
        quality=8,
        total_cost=2.0,
        reasoning="test",
    )


# ==============================================================================
# Rewriter
# ==============================================================================


class TestReplaceModelForTask:
    """Test single-line model substitution."""

    def test_colon_rule(self):
        result = replace_model_for_task("- Debugging: Claude Haiku", "debugging", "Debugging", "DeepSeek Reasoner")
        assert result == "- Debugging: DeepSeek Reasoner"

    def test_arrow_rule(self):
        result = replace_model_for_task("- ✅ Debugging → Claude Haiku", "debugging", "Debugging", "Claude Sonnet")
        assert result == "- ✅ Debugging → Claude Sonnet"

    def test_carriage_return_kept_outside_span(self):
        result = replace_model_for_task(
            "- File operations: Gemini 3 Flash, cheap/simple edits use Gemini Flash Lite\r",
            "file-edits-cheap",
            "cheap/simple edits",
            "DeepSeek Chat",
        )
        assert result == "- File operations: Gemini 3 Flash, cheap/simple edits use DeepSeek Chat\r"
        assert replace_model_for_task("- Debugging: Claude Haiku\r", "debugging", "Debugging", "X") == "- Debugging: X\r"

    def test_code_changes_keeps_first(self):
        result = replace_model_for_task(
            "- Code changes: Claude Haiku first, then review",
            "code-changes",
            "Code changes",
            "Claude Sonnet",
        )
        assert result == "- Code changes: Claude Sonnet first, then review"

    def test_version_number_is_not_a_sentence_end(self):
        result = replace_model_for_task(
            "- Summaries: Gemini 2.5 Pro. Keep it brief",
            "summaries",
            "Summaries",
            "Gemini 3 Flash",
        )
        assert result == "- Summaries: Gemini 3 Flash. Keep it brief"

    def test_trailing_notes_preserved(self):
        result = replace_model_for_task(
            "- Formatting: Claude Haiku, never Opus",
            "formatting",
            "Formatting",
            "Gemini 2.5 Flash",
        )
        assert result == "- Formatting: Gemini 2.5 Flash, never Opus"

    def test_edit_variants(self):
        line = "- File operations: Gemini 2.5 Flash, cheap/simple edits use Gemini Flash Lite, higher risk edits use Claude Haiku"
        cheap = replace_model_for_task(line, "file-edits-cheap", "cheap/simple edits use", "DeepSeek Chat")
        assert "cheap/simple edits use DeepSeek Chat, higher risk edits use Claude Haiku" in cheap

        risky = replace_model_for_task(line, "file-edits-high-risk", "higher risk edits use", "Claude Sonnet")
        assert risky.endswith("higher risk edits use Claude Sonnet")
        assert "cheap/simple edits use Gemini Flash Lite" in risky

    def test_no_pattern_leaves_line_unchanged(self):
        line = "- Debugging is handled elsewhere"
        assert replace_model_for_task(line, "debugging", "Debugging", "Claude Sonnet") == line


class TestLabels:
    """Test model labels."""

    def test_override_and_derived_labels(self, tables):
        labeler = ModelLabeler(tables.model_labels)
        assert labeler.label("claude-haiku-4-5-20251001") == "Claude Haiku"
        assert labeler.label("alibaba/qwen2.5-max") == "Qwen2.5 Max"
        assert labeler.label("openai/gpt-4.1") == "Gpt 4.1"

    def test_reverse_lookup_prefers_longest_label(self, tables):
        labeler = ModelLabeler(tables.model_labels)
        assert labeler.model_for_label(" Gemini 3 Flash first") == "google/gemini-3-flash-preview"
        assert labeler.model_for_label("Something else") is None

    def test_label_map_accepts_models_and_dicts(self, tables):
        labels = recommendations_to_label_map(
            [
                _recommendation("debugging", "deepseek/deepseek-reasoner"),
                {"taskType": "summaries", "recommendedModel": "alibaba/qwen2.5-max"},
                {"task_type": "formatting", "model": "claude-haiku-4-5-20251001"},
                {"taskType": "", "recommendedModel": "x"},
                None,
            ],
            ModelLabeler(tables.model_labels),
        )
        assert labels == {
            "debugging": "DeepSeek Reasoner",
            "summaries": "Qwen2.5 Max",
            "formatting": "Claude Haiku",
        }


class TestApplyRecommendationsToDocument:
    """Test document-level change sets."""

    def test_single_change(self, soul_text, tables):
        doc = parse_document(soul_text, tables)
        changes = apply_recommendations_to_document(doc, {"debugging": "DeepSeek Reasoner"})

        assert len(changes.modified_lines) == 1
        line = changes.modified_lines[0]
        assert line.line_number == DEBUGGING_LINE
        assert line.section == "escalation"
        assert line.before == "- Debugging: Claude Haiku"
        assert line.after == "- Debugging: DeepSeek Reasoner"
        assert line.task_types == ["debugging"]
        assert changes.original_content == soul_text
        assert changes.proposed_content == soul_text.replace(
            "- Debugging: Claude Haiku", "- Debugging: DeepSeek Reasoner"
        )

    def test_same_labels_yield_no_changes(self, soul_text, tables):
        doc = parse_document(soul_text, tables)
        changes = apply_recommendations_to_document(
            doc, {"debugging": "Claude Haiku", "summaries": "Gemini 3 Flash"}
        )
        assert changes.modified_lines == []
        assert changes.proposed_content == soul_text

    def test_applying_twice_is_a_no_op(self, soul_text, tables):
        labels = {"debugging": "DeepSeek Reasoner", "exec-commands": "Claude Sonnet"}
        first = apply_recommendations_to_document(parse_document(soul_text, tables), labels)
        second = apply_recommendations_to_document(parse_document(first.proposed_content, tables), labels)

        assert len(first.modified_lines) == 2
        assert second.modified_lines == []

    def test_crlf_preserved(self, soul_text, tables):
        crlf = soul_text.replace("\n", "\r\n")
        changes = apply_recommendations_to_document(parse_document(crlf, tables), {"debugging": "DeepSeek Reasoner"})
        assert changes.proposed_content == crlf.replace("Debugging: Claude Haiku", "Debugging: DeepSeek Reasoner")
        assert validate_change_set(changes).valid

    def test_mixed_line_endings(self, soul_text, tables):
        mixed = soul_text.replace("- Debugging: Claude Haiku\n", "- Debugging: Claude Haiku\r\n")
        changes = apply_recommendations_to_document(parse_document(mixed, tables), {"debugging": "DeepSeek Reasoner"})

        assert [line.line_number for line in changes.modified_lines] == [DEBUGGING_LINE]
        assert changes.modified_lines[0].after == "- Debugging: DeepSeek Reasoner\r"
        assert changes.proposed_content == mixed.replace("Claude Haiku\r", "DeepSeek Reasoner\r")
        assert validate_change_set(changes).valid


class TestRenderChangeSet:
    """Test the markdown diff."""

    def test_table_row(self, soul_text, tables):
        changes = apply_recommendations_to_document(
            parse_document(soul_text, tables), {"debugging": "DeepSeek Reasoner"}
        )
        diff = render_change_set(changes)

        assert diff.startswith("## SOUL.md Routing Diff")
        assert "Proposed changes: **1**" in diff
        assert "| Further escalation | 17 | `- Debugging: Claude Haiku` | `- Debugging: DeepSeek Reasoner` |" in diff

    def test_no_changes(self, soul_text):
        empty = ChangeSet(original_content=soul_text, proposed_content=soul_text)
        assert render_change_set(empty) == NO_CHANGES

    def test_generate_diff_keeps_current_models(self, soul_text, tables):
        diff = generate_diff(parse_document(soul_text, tables), {"debugging": "Claude Haiku"})
        assert diff == NO_CHANGES


# ==============================================================================
# Validator
# ==============================================================================


class TestValidateChangeSet:
    """Test structural validation."""

    @pytest.fixture
    def changes(self, soul_text, tables):
        return apply_recommendations_to_document(
            parse_document(soul_text, tables), {"debugging": "DeepSeek Reasoner"}
        )

    def test_valid(self, changes):
        result = validate_change_set(changes)
        assert result.valid
        assert result.errors == []

    def test_valid_from_json_mapping(self, changes):
        assert validate_change_set(changes.to_json_dict()).valid

    def test_missing_payload(self):
        result = validate_change_set(None)
        assert not result.valid
        assert result.errors == ["Changes payload is required."]

    def test_missing_fields(self):
        result = validate_change_set({"modifiedLines": "nope"})
        assert not result.valid
        assert "Changes must include originalContent and proposedContent strings." in result.errors
        assert "Changes must include modifiedLines array." in result.errors

    def test_undeclared_edit_detected(self, changes):
        tampered = changes.model_copy(
            update={"proposed_content": changes.proposed_content.replace("Routing rules", "Rules")}
        )
        result = validate_change_set(tampered)
        assert not result.valid
        assert any("diff count" in error for error in result.errors)

    def test_undeclared_line_ending_change_detected(self, changes):
        converted = changes.model_copy(
            update={"proposed_content": changes.proposed_content.replace("# SOUL\n", "# SOUL\r\n")}
        )
        result = validate_change_set(converted)
        assert not result.valid
        assert any("diff count" in error for error in result.errors)

    def test_line_count_change_detected(self, changes):
        grown = changes.model_copy(update={"proposed_content": changes.proposed_content + "\n- extra"})
        result = validate_change_set(grown)
        assert not result.valid
        assert "Line count changed; destructive edits are not allowed." in result.errors

    def test_non_bullet_line_rejected(self, soul_text):
        lines = soul_text.split("\n")
        proposed = list(lines)
        proposed[2] = "Routing rules, edited."
        change = ModifiedLine(line_number=3, section="actionTasks", before=lines[2], after=proposed[2])
        result = validate_change_set(
            ChangeSet(original_content=soul_text, proposed_content="\n".join(proposed), modified_lines=[change])
        )
        assert not result.valid
        assert "Only bullet routing rules may be updated (line 3)." in result.errors

    def test_unknown_section_rejected(self, changes):
        bad_line = changes.modified_lines[0].model_copy(update={"section": "elsewhere"})
        result = validate_change_set(changes.model_copy(update={"modified_lines": [bad_line]}))
        assert not result.valid
        assert "Invalid section on line 17: elsewhere" in result.errors

    def test_out_of_range_line(self, changes):
        bad_line = changes.modified_lines[0].model_copy(update={"line_number": 999})
        result = validate_change_set(changes.model_copy(update={"modified_lines": [bad_line]}))
        assert "Invalid line reference: 999" in result.errors

    def test_snapshot_mismatch(self, changes):
        bad_line = changes.modified_lines[0].model_copy(update={"before": "- Debugging: Claude Opus"})
        result = validate_change_set(changes.model_copy(update={"modified_lines": [bad_line]}))
        assert "Before snapshot mismatch on line 17." in result.errors

    def test_malformed_entry(self, changes):
        payload = changes.to_json_dict()
        payload["modifiedLines"] = [{"lineNumber": "x"}]
        result = validate_change_set(payload)
        assert "Malformed modifiedLines entry 1." in result.errors


# ==============================================================================
# Apply
# ==============================================================================


class TestApplyChangeSet:
    """Test committing change sets to disk."""

    @pytest.fixture
    def changes(self, soul_file, tables):
        return apply_recommendations_to_document(
            read_document(soul_file, tables), {"debugging": "DeepSeek Reasoner"}
        )

    def test_dry_run_writes_nothing(self, soul_file, changes, soul_text):
        result = apply_change_set(soul_file, changes, dry_run=True)

        assert not result.applied
        assert result.dry_run
        assert result.proposed_content == changes.proposed_content
        assert soul_file.read_text(encoding="utf-8") == soul_text
        assert list(soul_file.parent.glob("SOUL.md.bak.*")) == []

    def test_apply_writes_and_backs_up(self, soul_file, changes, soul_text):
        result = apply_change_set(soul_file, changes, dry_run=False)

        assert result.applied
        assert soul_file.read_text(encoding="utf-8") == changes.proposed_content
        backups = list(soul_file.parent.glob("SOUL.md.bak.*"))
        assert len(backups) == 1
        assert backups[0].name == Path(result.backup_path).name
        assert backups[0].read_text(encoding="utf-8") == soul_text

    def test_apply_preserves_crlf(self, tmp_path, soul_text, tables):
        path = tmp_path / "SOUL.md"
        path.write_bytes(soul_text.replace("\n", "\r\n").encode("utf-8"))
        changes = apply_recommendations_to_document(read_document(path, tables), {"debugging": "DeepSeek Reasoner"})

        apply_change_set(path, changes, dry_run=False, tables=tables)

        written = path.read_bytes()
        assert b"- Debugging: DeepSeek Reasoner\r\n" in written
        assert b"\n" not in written.replace(b"\r\n", b"")

    def test_stale_document_refused(self, soul_file, changes):
        soul_file.write_text(soul_file.read_text(encoding="utf-8") + "- drift\n", encoding="utf-8")
        drifted = soul_file.read_text(encoding="utf-8")

        with pytest.raises(StaleDocumentError):
            apply_change_set(soul_file, changes, dry_run=False)

        assert soul_file.read_text(encoding="utf-8") == drifted
        assert list(soul_file.parent.glob("SOUL.md.bak.*")) == []

    def test_invalid_change_set_refused(self, soul_file, changes, soul_text):
        broken = changes.model_copy(update={"proposed_content": changes.proposed_content + "\nextra"})

        with pytest.raises(ValidationError) as exc_info:
            apply_change_set(soul_file, broken, dry_run=False)

        assert exc_info.value.errors
        assert soul_file.read_text(encoding="utf-8") == soul_text

    def test_failed_verification_rolls_back(self, soul_file, changes, soul_text):
        with patch(
            "routeopt.core.routing.apply._verify_written",
            side_effect=PostWriteVerificationError("Post-write validation failed"),
        ):
            with pytest.raises(PostWriteVerificationError):
                apply_change_set(soul_file, changes, dry_run=False)

        assert soul_file.read_text(encoding="utf-8") == soul_text
        assert len(list(soul_file.parent.glob("SOUL.md.bak.*"))) == 1


class TestUpdateRoutingConfig:
    """Test the parse-rewrite-validate-apply pipeline."""

    def test_dry_run_preview(self, soul_file, tables, soul_text):
        update = update_routing_config(
            [_recommendation("debugging", "deepseek/deepseek-reasoner")],
            soul_file,
            tables,
        )

        assert update.dry_run
        assert update.recommendations_considered == 1
        assert update.modified_count == 1
        assert "DeepSeek Reasoner" in update.diff
        assert update.labels == {"debugging": "DeepSeek Reasoner"}
        assert soul_file.read_text(encoding="utf-8") == soul_text

    def test_known_task_ids_filter(self, soul_file, tables):
        update = update_routing_config(
            [
                _recommendation("debugging", "deepseek/deepseek-reasoner"),
                _recommendation("summaries", "deepseek/deepseek-chat"),
            ],
            soul_file,
            tables,
            known_task_ids={"summaries"},
        )
        assert update.recommendations_considered == 1
        assert [line.task_types for line in update.changes.modified_lines] == [["summaries"]]

    def test_apply(self, soul_file, tables):
        update = update_routing_config(
            [_recommendation("debugging", "deepseek/deepseek-reasoner")],
            soul_file,
            tables,
            dry_run=False,
        )
        assert update.result.applied
        assert "- Debugging: DeepSeek Reasoner" in soul_file.read_text(encoding="utf-8")
