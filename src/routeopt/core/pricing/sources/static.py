"""Providers priced from built-in tables only."""

from routeopt.core.pricing.sources.base import StaticSource, register_source


@register_source("openai")
class OpenAISource(StaticSource):
    NAME = "openai"
    PRICES = [
        {"model": "openai/gpt-4.1", "inputPerM": 7.50, "outputPerM": 22.50,
         "contextWindow": 1000000, "cache": True},
        {"model": "openai/gpt-4o", "inputPerM": 5.00, "outputPerM": 15.00,
         "contextWindow": 128000, "vision": True, "cache": True},
        {"model": "openai/gpt-4o-mini", "inputPerM": 0.15, "outputPerM": 0.60,
         "contextWindow": 128000, "vision": True, "cache": True},
    ]


@register_source("alibaba")
class AlibabaSource(StaticSource):
    NAME = "alibaba"
    PRICES = [
        {"model": "alibaba/qwen2.5-max", "inputPerM": 0.75, "outputPerM": 3.00,
         "contextWindow": 32000, "vision": True, "cache": True},
        {"model": "alibaba/qwen2.5-plus", "inputPerM": 0.25, "outputPerM": 1.00,
         "contextWindow": 128000, "vision": True, "cache": True},
        {"model": "alibaba/qwen2.5-7b", "inputPerM": 0, "outputPerM": 0,
         "contextWindow": 128000, "vision": True, "free": True},
    ]


@register_source("meta")
class MetaSource(StaticSource):
    """Open-weight Llama models; self-hosted, so only compute is paid."""

    NAME = "meta"
    PRICES = [
        {"model": "meta/llama-3.3-70b", "inputPerM": 0, "outputPerM": 0,
         "contextWindow": 128000, "note": "Self-hosted; compute cost only"},
        {"model": "meta/llama-3.3-8b", "inputPerM": 0, "outputPerM": 0,
         "contextWindow": 128000, "note": "Self-hosted; compute cost only"},
    ]


@register_source("moonshot")
class MoonshotSource(StaticSource):
    NAME = "moonshot"
    PRICES = [
        {"model": "moonshot/kimi-k2.5", "inputPerM": 0.60, "outputPerM": 3.00,
         "contextWindow": 256000, "vision": True},
        {"model": "moonshot/kimi-k2", "inputPerM": 0.60, "outputPerM": 2.50,
         "contextWindow": 128000, "vision": True, "cache": True,
         "cacheHitInputPerM": 0.15, "cacheMissInputPerM": 0.60},
    ]


@register_source("microsoft")
class MicrosoftSource(StaticSource):
    NAME = "microsoft"
    PRICES = [
        {"model": "microsoft/phi-4-mini", "inputPerM": 0, "outputPerM": 0,
         "contextWindow": 128000, "free": True},
    ]
