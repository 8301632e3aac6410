"""
Pricing source protocol and registry.

- PricingSource is a runtime_checkable Protocol
- Sources register themselves with @register_source
- The registry instantiates sources on demand, not at import time

Two building blocks cover the providers shipped with routeopt:
PageSource scrapes a public pricing page and falls back to a built-in
table, StaticSource just returns its table.
"""

import logging
import re
from collections.abc import Callable
from typing import Any, ClassVar, Protocol, runtime_checkable

import httpx

from routeopt.core.pricing.exceptions import ProviderError
from routeopt.core.pricing.http import fetch_page
from routeopt.core.pricing.models import PriceEntry

logger = logging.getLogger(__name__)


@runtime_checkable
class PricingSource(Protocol):
    """
    Protocol for provider price lists.

    Sources are responsible for:
    - Producing the provider's current price list
    - Reporting where the list came from (origin), for the cache record
    """

    @property
    def name(self) -> str:
        """Provider name (e.g. 'anthropic', 'google')."""
        ...

    def fetch_prices(self) -> list[PriceEntry]:
        """
        Return the provider's price list.

        Raises:
            Exception: If no prices can be produced at all
        """
        ...


_sources: dict[str, type[PricingSource]] = {}


def register_source(name: str) -> Callable[[type[PricingSource]], type[PricingSource]]:
    """
    Decorator to register a pricing source.

    Usage:
        @register_source("openai")
        class OpenAISource(StaticSource):
            PRICES = [...]

    Raises:
        ValueError: If the name is already registered
    """

    def decorator(source_class: type[PricingSource]) -> type[PricingSource]:
        if name in _sources:
            raise ValueError(
                f"Pricing source '{name}' is already registered. "
                f"Available sources: {', '.join(_sources.keys())}"
            )
        _sources[name] = source_class
        return source_class

    return decorator


def get_source(name: str, **options: Any) -> PricingSource:
    """
    Instantiate a registered source.

    Raises:
        ValueError: If the name is not registered
    """
    source_class = _sources.get(name)
    if source_class is None:
        available = ", ".join(_sources.keys()) if _sources else "none registered"
        raise ValueError(f"Pricing source '{name}' not registered. Available sources: {available}")
    return source_class(**options)


def list_sources() -> list[str]:
    """Registered source names in alphabetical order."""
    return sorted(_sources.keys())


def get_all_sources(**options: Any) -> list[PricingSource]:
    """One fresh instance of every registered source, in registration order."""
    return [source_class(**options) for source_class in _sources.values()]


def _entries(rows: list[dict[str, Any]]) -> list[PriceEntry]:
    return [PriceEntry.model_validate(row) for row in rows]


class StaticSource:
    """A source backed by a fixed price table."""

    NAME: ClassVar[str] = ""
    ORIGIN: ClassVar[str] = "static"
    PRICES: ClassVar[list[dict[str, Any]]] = []
    cacheable: ClassVar[bool] = False

    def __init__(self, timeout: float = 20.0) -> None:
        self.timeout = timeout
        self.origin = self.ORIGIN

    @property
    def name(self) -> str:
        return self.NAME

    def fetch_prices(self) -> list[PriceEntry]:
        return _entries(self.PRICES)


class PageSource:
    """
    A source that scrapes a public pricing page.

    PATTERNS maps model ids to the display name searched for on the page;
    the first two dollar amounts after the name are read as input and
    output price. Attributes missing from the page (context window,
    vision, cache rates) are taken from the FALLBACK row for that model.

    When the page cannot be fetched or nothing parses, FALLBACK is returned
    instead. With MERGE_FALLBACK, fallback models missing from a parsed
    page are appended so the extended model list is always present.
    """

    NAME: ClassVar[str] = ""
    URL: ClassVar[str] = ""
    ORIGIN: ClassVar[str] = ""
    PATTERNS: ClassVar[dict[str, str]] = {}
    FALLBACK: ClassVar[list[dict[str, Any]]] = []
    MERGE_FALLBACK: ClassVar[bool] = False
    cacheable: ClassVar[bool] = True

    def __init__(self, timeout: float = 20.0, max_retries: int = 2) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.origin = self.ORIGIN

    @property
    def name(self) -> str:
        return self.NAME

    def parse(self, html: str) -> list[PriceEntry]:
        fallback = {row["model"]: row for row in self.FALLBACK}
        prices: list[PriceEntry] = []
        for model_id, display in self.PATTERNS.items():
            match = re.search(
                rf"{display}.*?\$(\d+(?:\.\d+)?).*?\$(\d+(?:\.\d+)?)",
                html,
                re.IGNORECASE,
            )
            if not match:
                continue
            row = {**fallback.get(model_id, {}), "model": model_id}
            row["inputPerM"] = float(match.group(1))
            row["outputPerM"] = float(match.group(2))
            row.pop("note", None)
            prices.append(PriceEntry.model_validate(row))
        return prices

    def fetch_prices(self) -> list[PriceEntry]:
        try:
            html = fetch_page(self.URL, timeout=self.timeout, max_retries=self.max_retries)
            prices = self.parse(html)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch {self.NAME} pricing from {self.URL}: {e}")
            prices = []

        if not prices:
            if not self.FALLBACK:
                raise ProviderError(self.NAME, "No prices parsed and no built-in table", url=self.URL)
            logger.warning(f"Using built-in {self.NAME} prices")
            self.origin = "fallback"
            return _entries(self.FALLBACK)

        logger.info(f"Parsed {len(prices)} {self.NAME} price(s) from {self.URL}")
        self.origin = self.ORIGIN
        if self.MERGE_FALLBACK:
            known = {entry.model for entry in prices}
            prices.extend(entry for entry in _entries(self.FALLBACK) if entry.model not in known)
            self.origin = f"{self.ORIGIN} + fallback"
        return prices
