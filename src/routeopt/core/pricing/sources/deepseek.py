"""DeepSeek prices from api-docs.deepseek.com/pricing."""

from routeopt.core.pricing.sources.base import PageSource, register_source


@register_source("deepseek")
class DeepSeekSource(PageSource):
    """DeepSeek chat and reasoner prices plus the open-weight models."""

    NAME = "deepseek"
    URL = "https://api-docs.deepseek.com/pricing"
    ORIGIN = "deepseek.com"
    MERGE_FALLBACK = True
    PATTERNS = {
        "deepseek/deepseek-chat": r"DeepSeek Chat",
        "deepseek/deepseek-reasoner": r"DeepSeek Reasoner",
    }
    FALLBACK = [
        {"model": "deepseek/deepseek-chat", "inputPerM": 0.07, "outputPerM": 1.10,
         "contextWindow": 128000, "note": "Fallback pricing"},
        {"model": "deepseek/deepseek-reasoner", "inputPerM": 0.07, "outputPerM": 1.10,
         "contextWindow": 128000, "note": "Fallback pricing (same as chat)"},
        {"model": "deepseek/deepseek-v3", "inputPerM": 0.80, "outputPerM": 1.60,
         "contextWindow": 128000, "cache": True, "cacheHitInputPerM": 0.20,
         "cacheMissInputPerM": 0.80},
        {"model": "deepseek/deepseek-r1", "inputPerM": 0.80, "outputPerM": 1.60,
         "contextWindow": 128000, "cache": True, "cacheHitInputPerM": 0.20,
         "cacheMissInputPerM": 0.80},
        {"model": "deepseek/deepseek-r1-distill", "inputPerM": 0, "outputPerM": 0,
         "contextWindow": 128000, "free": True},
    ]
