"""
Pricing source protocol and registry.

This package provides:
- PricingSource: Protocol every provider implements
- @register_source: Decorator registering a provider
- get_source() / get_all_sources(): Instantiate providers
- list_sources(): Registered provider names

Example:
    >>> from routeopt.core.pricing.sources import get_source
    >>> source = get_source("openai")
    >>> [entry.model for entry in source.fetch_prices()][:1]
    ['openai/gpt-4.1']
"""

from routeopt.core.pricing.sources import base as _base
from routeopt.core.pricing.sources.base import (
    PageSource,
    PricingSource,
    StaticSource,
    get_all_sources,
    get_source,
    list_sources,
    register_source,
)

# Import implementations to register them
from routeopt.core.pricing.sources import anthropic as _anthropic  # noqa: F401, E402
from routeopt.core.pricing.sources import google as _google  # noqa: F401, E402
from routeopt.core.pricing.sources import deepseek as _deepseek  # noqa: F401, E402
from routeopt.core.pricing.sources import static as _static  # noqa: F401, E402

# Expose the registry for testing purposes
_sources = _base._sources

__all__ = [
    "PageSource",
    "PricingSource",
    "StaticSource",
    "get_all_sources",
    "get_source",
    "list_sources",
    "register_source",
]
