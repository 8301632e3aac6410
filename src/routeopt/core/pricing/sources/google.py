"""Google (Gemini) prices from ai.google.dev/pricing."""

from routeopt.core.pricing.sources.base import PageSource, register_source


@register_source("google")
class GoogleSource(PageSource):
    """Gemini model prices; the older 1.5 models are always included."""

    NAME = "google"
    URL = "https://ai.google.dev/pricing"
    ORIGIN = "ai.google.dev"
    MERGE_FALLBACK = True
    PATTERNS = {
        "google/gemini-3-flash-preview": r"Gemini 3 Flash",
        "google/gemini-2.5-flash": r"Gemini 2\.5 Flash(?!-Lite)",
        "google/gemini-2.5-pro": r"Gemini 2\.5 Pro",
        "google/gemini-3-pro-preview": r"Gemini 3 Pro",
    }
    FALLBACK = [
        {"model": "google/gemini-3-flash-preview", "inputPerM": 0.50, "outputPerM": 3.00,
         "contextWindow": 1000000, "vision": True},
        {"model": "google/gemini-2.5-flash", "inputPerM": 0.50, "outputPerM": 3.00,
         "contextWindow": 1000000, "vision": True},
        {"model": "google/gemini-2.5-pro", "inputPerM": 1.25, "outputPerM": 10.00,
         "contextWindow": 2000000, "vision": True},
        {"model": "google/gemini-3-pro-preview", "inputPerM": 2.00, "outputPerM": 12.00,
         "contextWindow": 2000000, "vision": True},
        {"model": "google/gemini-flash-lite", "inputPerM": 0.10, "outputPerM": 0.40,
         "contextWindow": 1000000, "vision": False},
        {"model": "google/gemini-1.5-pro", "inputPerM": 3.50, "outputPerM": 10.50,
         "contextWindow": 1000000, "vision": True},
        {"model": "google/gemini-1.5-flash", "inputPerM": 0.037, "outputPerM": 0.15,
         "contextWindow": 1000000, "vision": False},
    ]
