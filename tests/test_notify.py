"""
Tests for chat formatting, operator messages and message delivery.
"""

import json
import subprocess
from unittest.mock import patch

import pytest

from routeopt.core.approval import ApprovalBatchStore, BatchSummary
from routeopt.core.exceptions import NotificationError
from routeopt.core.notify import RecordingNotifier
from routeopt.core.notify.formatting import (
    TRUNCATED_SUFFIX,
    compact_table,
    escape_markdown,
    format_for_chat,
    normalize_markdown,
    truncate,
)
from routeopt.core.notify.messages import (
    business_summary,
    final_confirmation,
    item_approval,
    stage_report_attachment,
)
from routeopt.core.notify.messenger import Button, CliNotifier, buttons_payload, resolve_target
from routeopt.core.routing import apply_recommendations_to_document, parse_document


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


# ==============================================================================
# Formatting
# ==============================================================================


class TestFormatting:
    """Test markdown flattening for chat."""

    def test_escape_specials(self):
        assert escape_markdown("a_b*c") == "a\\_b\\*c"
        assert escape_markdown("v1.2 (beta)!") == "v1\\.2 \\(beta\\)\\!"

    def test_escape_backslash_first(self):
        assert escape_markdown("a\\b") == "a\\\\b"

    def test_truncate(self):
        assert truncate("short", 100) == "short"
        result = truncate("x" * 200, 100)
        assert len(result) == 100
        assert result.endswith(TRUNCATED_SUFFIX)

    def test_compact_table(self):
        assert compact_table(["| A | B |", "|---|---|", "| 1 | 2 |"]) == ["A | B", "- 1 | 2"]

    def test_compact_table_limits_rows(self):
        lines = ["| Task | Model |", "|---|---|"] + [f"| t{i} | m{i} |" for i in range(9)]
        compacted = compact_table(lines, row_limit=6)

        assert len(compacted) == 8
        assert compacted[-1] == "- ... 3 more row(s)"

    def test_normalize_markdown(self):
        markdown = "\n".join(
            [
                "# Report",
                "* item one",
                "See [docs](https://example.com).",
                "| A | B |",
                "|---|---|",
                "| 1 | 2 |",
            ]
        )
        assert normalize_markdown(markdown).split("\n") == [
            "Report",
            "- item one",
            "See docs (https://example.com).",
            "A | B",
            "- 1 | 2",
        ]

    def test_format_for_chat(self):
        formatted = format_for_chat("## Savings\n- 42.9%", limit=4096)
        assert formatted == "Savings\n\\- 42\\.9%"


# ==============================================================================
# Messages
# ==============================================================================


class TestMessages:
    """Test operator message text and buttons."""

    def test_business_summary(self):
        text = business_summary("apply", "/tmp/report.md", 7, 1, 8, 1)

        assert text.startswith("Model Optimizer Weekly Summary")
        assert "Mode: apply" in text
        assert "Actionable changes (need approval): 1" in text
        assert text.endswith("Report file: /tmp/report.md")

    def test_item_approval(self, soul_text, tables):
        doc = parse_document(soul_text, tables)
        change_set = apply_recommendations_to_document(doc, {"debugging": "DeepSeek Reasoner"})
        item = ApprovalBatchStore.build_items(change_set)[0]

        text, buttons = item_approval("weekly-1", item, 1)

        assert text.startswith("Approval Item 1/1")
        assert "Line: 17" in text
        assert "Current: - Debugging: Claude Haiku" in text
        assert "Suggested: - Debugging: DeepSeek Reasoner" in text
        assert [b.label for b in buttons] == ["Approve", "Reject", "Keep Current"]
        assert [b.callback_token for b in buttons] == [
            "opt:item:approve:weekly-1:1",
            "opt:item:reject:weekly-1:1",
            "opt:item:keep:weekly-1:1",
        ]

    def test_final_confirmation(self):
        text, buttons = final_confirmation("weekly-1", BatchSummary(total=3, approved=2, kept=1))

        assert text.startswith("Final Confirmation Required")
        assert "Approved: 2" in text
        assert "Kept current: 1" in text
        assert [b.callback_token for b in buttons] == ["opt:final:apply:weekly-1", "opt:final:cancel:weekly-1"]

    def test_stage_report_attachment(self, tmp_path):
        report = tmp_path / "reports" / "weekly-1.md"
        report.parent.mkdir()
        report.write_text("# Report\n")

        staged = stage_report_attachment(report, home=tmp_path / "home")

        assert staged == tmp_path / "home" / ".openclaw" / "media" / "outbound" / "weekly-1.md"
        assert staged.read_text() == "# Report\n"


# ==============================================================================
# Delivery
# ==============================================================================


class TestResolveTarget:
    """Test chat target resolution order."""

    def test_configured_wins(self, tmp_path):
        assert resolve_target("111", {"TELEGRAM_TARGET": "222"}, tmp_path) == "111"

    def test_environment_order(self, tmp_path):
        environ = {"TELEGRAM_TARGET": "444", "OPENCLAW_TELEGRAM_CHAT_ID": "333"}
        assert resolve_target(None, environ, tmp_path) == "333"

    def test_allow_from_file(self, tmp_path):
        path = tmp_path / ".openclaw" / "credentials" / "telegram-default-allowFrom.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"allowFrom": [555, 666]}))

        assert resolve_target(None, {}, tmp_path) == "555"

    def test_nothing_configured(self, tmp_path):
        assert resolve_target(None, {}, tmp_path) is None

    def test_unreadable_allow_from_file(self, tmp_path):
        path = tmp_path / ".openclaw" / "credentials" / "telegram-default-allowFrom.json"
        path.parent.mkdir(parents=True)
        path.write_text("{broken")

        assert resolve_target(None, {}, tmp_path) is None


class TestCliNotifier:
    """Test sending through the messaging CLI."""

    def test_build_args(self):
        notifier = CliNotifier(target="123")
        buttons = [Button(label="Approve", callback_token="opt:item:approve:b:1")]

        args = notifier.build_args("123", "hello", buttons, "/tmp/r.md")

        assert args[:9] == ["openclaw", "message", "send", "--channel", "telegram", "--target", "123", "--message", "hello"]
        assert "--json" in args
        buttons_json = args[args.index("--buttons") + 1]
        assert json.loads(buttons_json) == [[{"text": "Approve", "callback_data": "opt:item:approve:b:1"}]]
        assert args[-2:] == ["--media", "/tmp/r.md"]

    def test_buttons_payload_truncates(self):
        payload = buttons_payload([Button(label="L" * 80, callback_token="t" * 80)])
        assert len(payload[0][0]["text"]) == 64
        assert len(payload[0][0]["callback_data"]) == 64

    @patch("routeopt.core.notify.messenger.subprocess.run")
    def test_send_message(self, mock_run):
        mock_run.return_value = _completed(stdout='{"ok": true, "messageId": 9}')

        result = CliNotifier(target="123").send_message("hello")

        assert result == {"ok": True, "messageId": 9}
        args = mock_run.call_args[0][0]
        assert "--buttons" not in args
        assert "--media" not in args

    @patch("routeopt.core.notify.messenger.subprocess.run")
    def test_empty_and_plain_output(self, mock_run):
        notifier = CliNotifier(target="123")

        mock_run.return_value = _completed(stdout="")
        assert notifier.send_message("hello") == {"ok": True}

        mock_run.return_value = _completed(stdout="sent")
        assert notifier.send_message("hello") == {"ok": True, "raw": "sent"}

    @patch("routeopt.core.notify.messenger.subprocess.run")
    def test_send_failure(self, mock_run):
        mock_run.return_value = _completed(returncode=1, stderr="chat not found\n")

        with pytest.raises(NotificationError, match="Message send failed: chat not found"):
            CliNotifier(target="123").send_message("hello")

    @patch("routeopt.core.notify.messenger.subprocess.run", side_effect=FileNotFoundError("openclaw"))
    def test_missing_command(self, mock_run):
        with pytest.raises(NotificationError, match="Failed to run openclaw"):
            CliNotifier(target="123").send_message("hello")

    @patch("routeopt.core.notify.messenger.resolve_target", return_value=None)
    def test_no_target(self, mock_resolve):
        with pytest.raises(NotificationError, match="Telegram target not configured"):
            CliNotifier().send_message("hello")

    @patch("routeopt.core.notify.messenger.subprocess.run")
    def test_long_message_truncated(self, mock_run):
        mock_run.return_value = _completed()
        CliNotifier(target="123", message_limit=50).send_message("x" * 500)

        args = mock_run.call_args[0][0]
        assert len(args[args.index("--message") + 1]) == 50


class TestRecordingNotifier:
    """Test the in-memory notifier."""

    def test_records_messages(self):
        notifier = RecordingNotifier()
        notifier.send_message("one")
        result = notifier.send_message("two", [Button(label="A", callback_token="t")], media="/tmp/r.md")

        assert result == {"ok": True, "recorded": 2}
        assert [m.text for m in notifier.messages] == ["one", "two"]
        assert notifier.messages[1].buttons[0].label == "A"
        assert notifier.messages[1].media == "/tmp/r.md"
