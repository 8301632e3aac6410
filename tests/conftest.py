"""
Pytest configuration and shared fixtures.

Provides a sample SOUL.md routing document, the default routing tables,
a deterministic price list, and temp-directory backed stores used across
the test suite.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from routeopt.core.approval import ApprovalBatchStore
from routeopt.core.catalog import RoutingTables
from routeopt.core.config import clear_cache
from routeopt.core.notify import RecordingNotifier
from routeopt.core.pricing import PriceEntry

# ==============================================================================
# Sample Data
# ==============================================================================

SAMPLE_SOUL = "\n".join(
    [
        "# SOUL",
        "",
        "Routing rules for the assistant.",
        "- Keep answers short.",
        "",
        "**Daily Conversation Track:**",
        "- Casual chat, greetings, jokes: DeepSeek Chat",
        "- Simple Q&A (one-line answers): DeepSeek Chat",
        "",
        "**Action Task Track (specific routing per tool type):**",
        "- Browser operations: Gemini 3 Flash",
        "- Exec commands: Claude Haiku",
        "- Web search/fetch: Gemini 3 Flash",
        "",
        "**Further escalation:**",
        "- Code changes: Claude Haiku first, then review",
        "- Debugging: Claude Haiku",
        "- Summaries: Gemini 3 Flash",
        "",
    ]
)

FIXED_NOW = datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)


def make_price(model: str, input_per_m: float, output_per_m: float, **extra) -> PriceEntry:
    """Build a PriceEntry with snake_case keyword arguments."""
    return PriceEntry(model=model, input_per_m=input_per_m, output_per_m=output_per_m, **extra)


# ==============================================================================
# Autouse Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Make sure no test sees a configuration cached by another."""
    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Routing Fixtures
# ==============================================================================


@pytest.fixture
def tables():
    """Default routing tables."""
    return RoutingTables.default()


@pytest.fixture
def soul_text():
    """Sample routing document text (LF line endings)."""
    return SAMPLE_SOUL


@pytest.fixture
def soul_file(tmp_path) -> Path:
    """Sample routing document written to a temp file."""
    path = tmp_path / "SOUL.md"
    path.write_text(SAMPLE_SOUL, encoding="utf-8")
    return path


# ==============================================================================
# Pricing Fixtures
# ==============================================================================


@pytest.fixture
def price_list() -> list[PriceEntry]:
    """
    Deterministic prices across three providers.

    With the default tables and constraints, the optimizer keeps every
    model in SAMPLE_SOUL except Code changes, which is pinned to Claude
    Sonnet.
    """
    return [
        make_price("deepseek/deepseek-chat", 0.27, 1.10, provider="deepseek"),
        make_price("deepseek/deepseek-reasoner", 0.55, 2.19, provider="deepseek"),
        make_price("google/gemini-3-flash-preview", 0.50, 3.00, vision=True, provider="google"),
        make_price("google/gemini-2.5-flash", 0.30, 2.50, vision=True, provider="google"),
        make_price("google/gemini-flash-lite", 0.10, 0.40, provider="google"),
        make_price("claude-haiku-4-5-20251001", 0.80, 4.00, vision=True, provider="anthropic"),
        make_price("claude-sonnet-4-6", 3.00, 15.00, vision=True, provider="anthropic"),
    ]


@pytest.fixture
def pricing_by_provider(price_list) -> dict[str, list[PriceEntry]]:
    """The price list grouped the way PricingService.fetch_all_pricing returns it."""
    grouped: dict[str, list[PriceEntry]] = {}
    for entry in price_list:
        grouped.setdefault(entry.provider, []).append(entry)
    return grouped


# ==============================================================================
# Store Fixtures
# ==============================================================================


@pytest.fixture
def data_dir(tmp_path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def store(data_dir):
    """Approval batch store with a fixed clock."""
    return ApprovalBatchStore(data_dir, clock=lambda: FIXED_NOW)


@pytest.fixture
def notifier():
    """In-memory notifier."""
    return RecordingNotifier()


# ==============================================================================
# Environment Fixtures
# ==============================================================================

ROUTEOPT_ENV_VARS = (
    "SOUL_PATH",
    "ROUTEOPT_DATA_DIR",
    "ROUTEOPT_REPORTS_DIR",
    "ROUTEOPT_QUALITY_WEIGHT",
    "ROUTEOPT_MIN_QUALITY",
    "ROUTEOPT_PRICING_TIMEOUT",
    "ROUTEOPT_ALLOW_ALL_MODELS",
    "GEMINI_CLASSIFIER_MODEL",
    "GEMINI_API_KEY",
    "MODEL_OPTIMIZER_TELEGRAM_TARGET",
    "OPENCLAW_TELEGRAM_TARGET",
    "OPENCLAW_TELEGRAM_CHAT_ID",
    "TELEGRAM_TARGET",
)


@pytest.fixture
def isolated_env(tmp_path, monkeypatch) -> Path:
    """
    Run in an empty project directory with no routeopt environment.

    HOME and XDG_CONFIG_HOME point into tmp_path so no real user config or
    .env file is read.
    Returns the project directory.
    """
    for name in ROUTEOPT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project
