"""
Tests for task extraction, fuzzy matching, classification and learning.
"""

import json
from datetime import datetime, timezone
from unittest.mock import patch

import httpx
import pytest

from routeopt.core.discovery import (
    ClassificationError,
    DiscoveryService,
    GeminiClassifier,
    Taxonomy,
    TaxonomyStore,
    classify_with_local_patterns,
    extract_task_descriptions,
    fuzzy_match_task,
    generate_discovery_report,
)
from routeopt.core.discovery.classifier import clamp_confidence, parse_classification_json, sanitize_task_type
from routeopt.core.discovery.matching import normalize_task_text
from routeopt.core.discovery.models import TaxonomyTask

FIXED_NOW = datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)

DOCUMENT = "\n".join(
    [
        "**Action Task Track:**",
        "- Browser operations: Gemini 3 Flash",
        "- Sub-agent coordination: Claude Sonnet",
        "- Parallel sub-agents: Claude Haiku",
        "- Weather lookups: Gemini Flash Lite",
        "",
    ]
)


def _gemini_response(payload, status_code=200):
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return httpx.Response(status_code, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


@pytest.fixture
def service(tables, data_dir):
    return DiscoveryService(
        tables,
        TaxonomyStore(data_dir),
        GeminiClassifier(api_key=None),
        clock=lambda: FIXED_NOW,
    )


# ==============================================================================
# Extraction and Matching
# ==============================================================================


class TestExtraction:
    """Test task phrase extraction."""

    def test_sample_document(self, soul_text):
        assert extract_task_descriptions(soul_text) == [
            "Casual chat, greetings, jokes",
            "Simple Q&A (one-line answers)",
            "Browser operations",
            "Exec commands",
            "Web search/fetch",
            "Code changes",
            "Debugging",
            "Summaries",
        ]

    def test_arrows_marks_and_edit_rules(self):
        text = "\n".join(
            [
                "## Escalation",
                "- ✅ Debugging → Claude Sonnet",
                "- Cheap edits use Gemini Flash Lite",
                "",
                "- Outside: ignored",
            ]
        )
        assert extract_task_descriptions(text) == ["Debugging", "Cheap edits"]

    def test_no_task_headings(self):
        assert extract_task_descriptions("# Notes\n- Remember: things\n") == []


class TestFuzzyMatch:
    """Test loose matching against the phrase table and taxonomy."""

    def test_normalize(self):
        assert normalize_task_text("Sub-agent coordination (parallel)") == "multi agent coordinate parallel"
        assert normalize_task_text("") == ""

    def test_phrase_table(self, tables):
        assert fuzzy_match_task("Debugging", tables) == "debugging"
        assert fuzzy_match_task("Web search / fetch", tables) == "web-search-fetch"

    def test_unknown(self, tables):
        assert fuzzy_match_task("Sub-agent coordination", tables) is None

    def test_taxonomy(self, tables):
        taxonomy = Taxonomy(
            tasks=[TaxonomyTask(id="sub-agent-coordination", name="Sub Agent Coordination")]
        )
        assert fuzzy_match_task("Sub-agent coordination", tables, taxonomy) == "sub-agent-coordination"


# ==============================================================================
# Classification
# ==============================================================================


class TestLocalPatterns:
    """Test the offline classifier."""

    def test_sub_agent(self):
        result = classify_with_local_patterns("Parallel sub-agents")
        assert result.task_type == "sub-agent-coordination"
        assert result.confidence == 0.9
        assert result.source == "pattern-match"

    def test_generic(self):
        result = classify_with_local_patterns("Weather lookups")
        assert result.task_type == "general-task"
        assert result.confidence == 0.3

    def test_helpers(self):
        assert sanitize_task_type("Code Review!") == "code-review"
        assert sanitize_task_type(None) == "general-task"
        assert clamp_confidence("0.7") == 0.7
        assert clamp_confidence(3) == 1.0
        assert clamp_confidence("high") == 0.65

    def test_parse_fenced_json(self):
        assert parse_classification_json('```json\n{"taskType": "x"}\n```') == {"taskType": "x"}
        with pytest.raises(ClassificationError):
            parse_classification_json("not json")


class TestGeminiClassifier:
    """Test the Gemini classifier and its fallbacks."""

    def test_without_api_key(self):
        with patch("routeopt.core.discovery.classifier.httpx.post") as mock_post:
            result = GeminiClassifier(api_key=None).classify("Sub-agent coordination")

        mock_post.assert_not_called()
        assert result.source == "missing-api-key"
        assert result.task_type == "sub-agent-coordination"

    @patch("routeopt.core.discovery.classifier.httpx.post")
    def test_success(self, mock_post):
        mock_post.return_value = _gemini_response(
            '```json\n{"taskType": "Code Review", "category": "Escalation", "confidence": 1.4, "reasoning": "r"}\n```'
        )

        result = GeminiClassifier(api_key="k").classify("Reviewing pull requests")

        assert result.task_type == "code-review"
        assert result.confidence == 1.0
        assert result.category == "Escalation"
        assert result.source == "gemini:gemini-2.5-flash"
        assert mock_post.call_args.kwargs["params"] == {"key": "k"}
        assert mock_post.call_args.args[0].endswith("/gemini-2.5-flash:generateContent")

    @patch("routeopt.core.discovery.classifier.httpx.post")
    def test_http_error_status_falls_back(self, mock_post):
        mock_post.return_value = httpx.Response(500, text="overloaded")
        result = GeminiClassifier(api_key="k").classify("Translation of docs")
        assert result.source == "gemini-fallback"
        assert result.task_type == "translation"

    @patch("routeopt.core.discovery.classifier.httpx.post", side_effect=httpx.ConnectError("offline"))
    def test_network_error_falls_back(self, mock_post):
        assert GeminiClassifier(api_key="k").classify("Anything").source == "gemini-fallback"

    @patch("routeopt.core.discovery.classifier.httpx.post")
    def test_missing_output_falls_back(self, mock_post):
        mock_post.return_value = httpx.Response(200, json={"candidates": []})
        assert GeminiClassifier(api_key="k").classify("Anything").source == "gemini-fallback"


# ==============================================================================
# Taxonomy and Service
# ==============================================================================


class TestTaxonomyStore:
    """Test taxonomy persistence."""

    def test_missing_file(self, data_dir):
        taxonomy = TaxonomyStore(data_dir).load()
        assert taxonomy.tasks == []
        assert taxonomy.categories == ["Daily Conversation", "Action Tasks", "Escalation"]

    def test_corrupt_file(self, data_dir):
        (data_dir / "taxonomy.json").write_text("{broken")
        assert TaxonomyStore(data_dir).load().tasks == []

    def test_save_and_load(self, data_dir):
        store = TaxonomyStore(data_dir)
        assert store.save(Taxonomy(tasks=[TaxonomyTask(id="translation", name="Translation")]))

        payload = json.loads((data_dir / "taxonomy.json").read_text())
        assert payload["tasks"][0] == {"id": "translation", "name": "Translation", "description": "", "category": "Action Tasks"}
        assert store.load().task_ids() == {"translation"}


class TestDiscoveryService:
    """Test discovery and learning."""

    def test_learns_confident_new_types(self, service, data_dir):
        result = service.discover_task_types(DOCUMENT)

        assert result.total_tasks == 4
        assert [t.task_type for t in result.known_tasks] == ["browser-operations"]
        assert [t.description for t in result.unknown_tasks] == [
            "Sub-agent coordination",
            "Parallel sub-agents",
            "Weather lookups",
        ]
        assert [t.id for t in result.newly_discovered] == ["sub-agent-coordination"]
        assert result.newly_discovered[0].name == "Sub Agent Coordination"

        saved = TaxonomyStore(data_dir).load()
        assert saved.task_ids() == {"sub-agent-coordination"}
        assert saved.tasks[0].discovered_at == FIXED_NOW

    def test_second_run_recognizes_learned_types(self, service):
        service.discover_task_types(DOCUMENT)
        result = service.discover_task_types(DOCUMENT)

        assert result.newly_discovered == []
        known = {t.description: t.task_type for t in result.known_tasks}
        assert known["Sub-agent coordination"] == "sub-agent-coordination"
        assert known["Parallel sub-agents"] == "sub-agent-coordination"

    def test_threshold_is_exclusive(self, tables, data_dir):
        service = DiscoveryService(
            tables,
            TaxonomyStore(data_dir),
            GeminiClassifier(api_key=None),
            confidence_threshold=0.9,
        )
        result = service.discover_task_types(DOCUMENT)

        assert result.newly_discovered == []
        assert not (data_dir / "taxonomy.json").exists()

    def test_report(self, service):
        report = generate_discovery_report(service.discover_task_types(DOCUMENT))

        assert report.startswith("# Task Discovery Report")
        assert "**Newly Discovered:** 1" in report
        assert "| sub-agent-coordination | Sub Agent Coordination |" in report
        assert "- **Coverage:** 25.0% of tasks recognized" in report
        assert "- **Discovery Rate:** 33.3% of unknown tasks classified" in report
