"""Anthropic (Claude) prices from anthropic.com/pricing."""

from routeopt.core.pricing.sources.base import PageSource, register_source


@register_source("anthropic")
class AnthropicSource(PageSource):
    """
    Claude model prices.

    The pricing page lists each model name followed by its input and
    output price per million tokens, e.g. "Haiku 4.5 ... $0.80 / MTok ...
    $4 / MTok".
    """

    NAME = "anthropic"
    URL = "https://www.anthropic.com/pricing"
    ORIGIN = "anthropic.com"
    PATTERNS = {
        "claude-haiku-4-5-20251001": r"Haiku",
        "claude-sonnet-4-6": r"Sonnet",
        "claude-opus-4-6": r"Opus",
    }
    FALLBACK = [
        {"model": "claude-haiku-4-5-20251001", "inputPerM": 0.80, "outputPerM": 4.00,
         "contextWindow": 200000, "vision": True},
        {"model": "claude-sonnet-4-6", "inputPerM": 3.00, "outputPerM": 15.00,
         "contextWindow": 200000, "vision": True},
        {"model": "claude-opus-4-6", "inputPerM": 15.00, "outputPerM": 75.00,
         "contextWindow": 200000, "vision": True},
    ]
